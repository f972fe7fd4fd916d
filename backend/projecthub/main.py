"""
ProjectHub
Main FastAPI Application Entry Point

Builds the application: lifespan (logging, Sentry, database), middleware,
exception handlers and routers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from projecthub.api.health import router as health_router
from projecthub.api.v1.api import api_v1_router
from projecthub.core.config import settings
from projecthub.core.logging import RequestLoggingMiddleware, configure_logging, get_logger
from projecthub.core.sentry import init_sentry
from projecthub.db.session import db_manager
from projecthub.middleware.exception import setup_exception_handlers
from projecthub.session.context import ClientStateMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    configure_logging()
    logger.info(
        "Starting ProjectHub",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        demo_mode=settings.DEMO_MODE_ENABLED,
    )

    init_sentry()

    if not db_manager.initialized:
        db_manager.initialize()
    if settings.DB_CREATE_TABLES:
        await db_manager.create_tables()

    yield

    logger.info("Shutting down ProjectHub")
    await db_manager.close()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Middleware order: last added = first executed
    app.middleware("http")(ClientStateMiddleware())
    app.middleware("http")(RequestLoggingMiddleware())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):
        """Echo or mint a request id for tracing."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/", tags=["Info"])
    async def root() -> Dict[str, Any]:
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "documentation": "/api/docs",
            "health": "/health/live",
            "status": "operational",
        }

    return app


# Create the application instance
app = create_application()
