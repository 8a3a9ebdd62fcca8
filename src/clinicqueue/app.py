"""
FastAPI application factory and main app configuration.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.deps import get_token_repository
from .api.errors import APIError
from .api.routers import health, public, staff
from .api.utils.responses import fail
from .application.use_cases.expire_stale_tokens import ExpireStaleTokensUseCase
from .core.config import Settings, get_settings
from .core.exceptions import ConfigurationError
from .core.structured_logger import configure_logging, get_logger
from .domain.errors import (
    DomainError,
    IllegalStatusTransitionError,
    IntakeForbiddenError,
    NotFoundError,
    SequenceConflictError,
    TokenRequestValidationError,
    TokenStatusChangedError,
)
from .middleware.request_id_middleware import RequestIDMiddleware
from .middleware.staff_middleware import StaffMiddleware
from .workers.token_expiry_sweeper import run_expiry_sweeper_forever

logger = get_logger(__name__)


async def init_database(settings: Settings):
    """Connect Motor and register the Beanie document models. Returns the client."""
    from beanie import init_beanie
    from motor.motor_asyncio import AsyncIOMotorClient
    import certifi

    from .adapters.db.mongo.models.queue_m import DOCUMENT_MODELS

    mongo_uri = settings.database.uri
    if not mongo_uri:
        raise ConfigurationError(
            "MONGO_URI is required when DATABASE_BACKEND=mongo", {"db_name": settings.database.db_name}
        )

    # Enable TLS only for Atlas SRV URIs
    if mongo_uri.startswith("mongodb+srv://"):
        client = AsyncIOMotorClient(
            mongo_uri,
            serverSelectionTimeoutMS=settings.database.server_selection_timeout_ms,
            tls=True,
            tlsCAFile=certifi.where(),
            tlsAllowInvalidCertificates=False,
        )
    else:
        client = AsyncIOMotorClient(
            mongo_uri,
            serverSelectionTimeoutMS=settings.database.server_selection_timeout_ms,
        )

    await init_beanie(database=client[settings.database.db_name], document_models=DOCUMENT_MODELS)
    return client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.logging)
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        environment=settings.app_env,
        database_backend=settings.database_backend,
    )

    client = None
    sweeper_task: Optional[asyncio.Task] = None

    if not settings.uses_memory_backend:
        try:
            client = await init_database(settings)
            logger.info("Database connection established", db_name=settings.database.db_name)
        except Exception as e:
            logger.error("Database connection failed", error=str(e), error_type=type(e).__name__)
            raise

    if settings.expiry_sweeper.enabled:
        use_case = ExpireStaleTokensUseCase(get_token_repository())
        sweeper_task = asyncio.create_task(
            run_expiry_sweeper_forever(use_case, settings.expiry_sweeper)
        )
        logger.info("Expiry sweeper started", interval_seconds=settings.expiry_sweeper.interval_seconds)

    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.app_name}")
        if sweeper_task:
            sweeper_task.cancel()
            try:
                await sweeper_task
            except asyncio.CancelledError:
                logger.info("Expiry sweeper stopped")
        if client:
            client.close()


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, IntakeForbiddenError):
        return 403
    if isinstance(exc, (TokenRequestValidationError, IllegalStatusTransitionError)):
        return 422
    if isinstance(exc, (SequenceConflictError, TokenStatusChangedError)):
        return 409
    return 400


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Walk-in clinic queue token service",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=False,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
    )
    app.add_middleware(StaffMiddleware)
    # Added last so it wraps everything and request_id is bound first
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(public.router)
    app.include_router(staff.router)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = _status_for(exc)
        logger.info(
            "Domain error",
            error=exc.error_code,
            status_code=status_code,
            path=request.url.path,
            request_id=getattr(request.state, "request_id", None),
        )
        return fail(request, status_code, exc.error_code or "DOMAIN_ERROR", exc.message, exc.details)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(
            "API error",
            error=exc.code,
            status_code=exc.http_status,
            path=request.url.path,
            request_id=getattr(request.state, "request_id", None),
        )
        return fail(request, exc.http_status, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body") or "body",
                "message": err.get("msg", "Validation error"),
            }
            for err in exc.errors()
        ]
        return fail(
            request,
            422,
            "INVALID_INPUT",
            "Input validation failed",
            {"errors": errors, "path": request.url.path},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error",
            error_type=type(exc).__name__,
            path=request.url.path,
            request_id=getattr(request.state, "request_id", None),
        )
        return fail(
            request,
            500,
            "INTERNAL_ERROR",
            "An unexpected error has occurred. Please try again later.",
        )

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "status": "running",
        }

    return app


# Create the app instance
app = create_app()
