"""FastAPI application factory and dependency injection setup."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quotebook.api.routes import (
    client_router,
    contact_router,
    document_router,
    health_router,
    product_router,
    project_router,
    settings_router,
    template_router,
)
from quotebook.config import get_settings
from quotebook.container import get_container, reset_container
from quotebook.exceptions import QuotebookError
from quotebook.logging_config import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown.

    Initializes logging and the DI container on startup,
    cleans up resources on shutdown.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
    )

    if app.dependency_overrides:
        logger.info("application_started", database="overridden")
    else:
        container = get_container()
        _ = container.database  # Force database initialization
        logger.info("application_started", database=container.database.path)

    yield

    logger.info("application_stopping")
    reset_container()
    logger.info("application_stopped")


async def log_request_middleware(request: Request, call_next):
    """Middleware to add request context to logs."""
    request_id = str(uuid.uuid4())[:8]
    bind_context(request_id=request_id, path=request.url.path, method=request.method)

    try:
        response = await call_next(request)
        logger.debug(
            "request_completed",
            status_code=response.status_code,
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        clear_context()


async def exception_handler(request: Request, exc: QuotebookError) -> JSONResponse:
    """Handle domain exceptions and return appropriate JSON responses."""
    logger.warning(
        "domain_exception",
        error_code=exc.error_code,
        message=exc.message,
        context=exc.context,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Quotes and invoices for freelancers and small businesses",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.middleware("http")(log_request_middleware)
    app.add_exception_handler(QuotebookError, exception_handler)

    app.include_router(health_router)
    app.include_router(client_router)
    app.include_router(contact_router)
    app.include_router(project_router)
    app.include_router(product_router)
    app.include_router(document_router)
    app.include_router(settings_router)
    app.include_router(template_router)

    return app
