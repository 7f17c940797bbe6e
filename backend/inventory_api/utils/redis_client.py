"""Redis client construction shared by the rate limiter and readiness probe."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from redis import Redis

from inventory_api.core.config import get_settings


def create_redis_client(url: str, **kwargs: Any) -> Redis:
    """Create a Redis client from a ``redis://`` or ``rediss://`` URL.

    TLS endpoints from managed providers commonly present certificates the
    container trust store does not know, so verification is relaxed for
    ``rediss://`` unless the caller passes ``ssl_cert_reqs`` explicitly.
    """
    if url.startswith("rediss://"):
        kwargs.setdefault("ssl_cert_reqs", "none")
    return Redis.from_url(url, **kwargs)


@lru_cache
def get_redis() -> Redis:
    """Process-wide client for request-path use (connection pooled)."""
    settings = get_settings()
    return create_redis_client(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
