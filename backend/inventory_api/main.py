"""FastAPI application bootstrap: logging, middleware, error envelope, routers."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from inventory_api.api.routers import categories, health, products
from inventory_api.api.schemas.common import ApiResponse
from inventory_api.core.config import get_settings
from inventory_api.services.rate_limiter import RateLimiter
from inventory_api.utils.redis_client import get_redis

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Throttle API calls per client address; health probes are exempt."""

    def __init__(self, app, limiter: RateLimiter, exempt_prefixes: tuple[str, ...] = ()):
        super().__init__(app)
        self.limiter = limiter
        self.exempt_prefixes = exempt_prefixes

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        client_key = request.client.host if request.client else "anonymous"
        # The Redis client is synchronous; keep it off the event loop
        decision = await run_in_threadpool(self.limiter.hit, client_key)
        if not decision.allowed:
            logger.info(f"Rate limit exceeded for {client_key}")
            body = ApiResponse.error("Too many requests")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=body.model_dump(by_alias=True),
                headers={"Retry-After": str(decision.reset_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


def _error_response(status_code: int, message: str, errors: list[str] | None = None):
    body = ApiResponse.error(message, errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(exc.status_code, message)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app() -> FastAPI:
    """Instantiate the FastAPI app and include top-level routers."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    # Middleware added last runs first; CORS must wrap throttled responses too.
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=RateLimiter(
                get_redis(),
                limit=settings.rate_limit_requests,
                window_seconds=settings.rate_limit_window_seconds,
            ),
            exempt_prefixes=("/health",),
        )

    logger.info(f"[CORS] Allowed origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health.router)
    app.include_router(
        products.router, prefix=f"{settings.api_prefix}/products", tags=["products"]
    )
    app.include_router(
        categories.router,
        prefix=f"{settings.api_prefix}/categories",
        tags=["categories"],
    )

    return app


app = create_app()
