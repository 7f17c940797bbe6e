"""Shared response envelope and pagination payloads."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedResult(CamelModel, Generic[T]):
    data: list[T]
    pagination: PaginationMeta


class ApiResponse(CamelModel, Generic[T]):
    success: bool
    message: str
    data: T | None = None
    errors: list[str] | None = None

    @classmethod
    def ok(cls, message: str, data: T | None = None) -> "ApiResponse[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str, errors: list[str] | None = None) -> "ApiResponse[None]":
        return cls(success=False, message=message, errors=errors or [message])
