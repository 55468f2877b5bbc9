"""FastAPI application initialization and configuration module.

This module builds the Taskhub API application. It handles:
- Application lifecycle management (startup/shutdown)
- Middleware registration in the correct order
- Exception handler registration
- Health check endpoints
- Database and Redis connection setup
- OpenTelemetry instrumentation

Middleware run outermost first in this order: request context, access log,
recovery, CORS, security headers, rate limit. Authentication is a router
dependency on the task routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from loguru import logger

from src.api.middleware.cors import CORSMiddleware
from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.rate_limit import RateLimitMiddleware
from src.api.middleware.recovery import RecoveryMiddleware
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.middleware.security_headers import SecurityHeadersMiddleware
from src.api.routers import auth, tasks
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.infrastructure.cache.client import close_redis, connect_redis
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    is_healthy, error_msg = await check_database_connection()

    if is_healthy:
        logger.info("Database connection successful")
    else:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    # Without Redis the service runs uncached and without rate limiting
    await connect_redis()

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await close_redis()
    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Register exception handlers BEFORE middleware
    register_exception_handlers(application)

    # Middleware are executed in reverse order of registration:
    # the last middleware added is the first to process requests

    # 6. Rate limit (innermost)
    if settings.rate_limit_config.enabled:
        application.add_middleware(
            RateLimitMiddleware, config=settings.rate_limit_config
        )

    # 5. Security headers
    application.add_middleware(SecurityHeadersMiddleware)

    # 4. CORS, answers preflight requests
    application.add_middleware(CORSMiddleware)

    # 3. Recovery from unhandled exceptions
    application.add_middleware(RecoveryMiddleware)

    # 2. Access log
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)

    # 1. Request context (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(auth.router)
    application.include_router(tasks.router)

    @application.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint naming the service."""
        return {"message": f"{settings.app_name} API {datetime.now(UTC).year}"}

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Liveness check for container orchestration and load balancers.

        Returns:
            dict[str, str]: Status, current time and service name.
        """
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": settings.app_name,
        }

    # Instrument application for tracing (at the end)
    instrument_app(application, settings)

    return application


app = create_app()
