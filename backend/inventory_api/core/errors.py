"""Domain exceptions raised by the service layer.

Routers translate these into ``HTTPException`` with the attached status code;
services never import FastAPI.
"""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(InventoryError):
    """Well-typed input that breaks a business rule (e.g. negative stock)."""

    status_code = 400


class InvalidReferenceError(InventoryError):
    """A referenced record (category) is missing or inactive."""

    status_code = 400


class NotFoundError(InventoryError):
    status_code = 404


class ConflictError(InventoryError):
    """Uniqueness violation reported by the storage engine."""

    status_code = 409
