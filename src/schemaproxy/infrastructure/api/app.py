"""FastAPI application factory and configuration.

This module provides the application factory that builds the descriptor
store, backend client and services, and wires them into the routes,
middleware and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schemaproxy.core.config import Settings, get_settings
from schemaproxy.core.exceptions import SchemaProxyError
from schemaproxy.core.keyed_lock import KeyedLock
from schemaproxy.core.logging import bind_correlation_id, clear_context, get_logger
from schemaproxy.domain.services import DocumentForwarder, SchemaMirror
from schemaproxy.infrastructure.api.error_mapping import error_response
from schemaproxy.infrastructure.api.middleware import MethodOverrideMiddleware
from schemaproxy.infrastructure.backend import BackendClient
from schemaproxy.infrastructure.storage import DescriptorStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings

    logger.info(
        "Starting SchemaProxy",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        resources_directory=str(app.state.descriptor_store.root),
        backend_url=app.state.backend_client.base_url,
    )

    yield

    logger.info("Shutting down SchemaProxy")
    if app.state.owns_backend_client:
        await app.state.backend_client.aclose()
        logger.info("Backend client closed")


def create_app(
    settings: Settings | None = None,
    store: DescriptorStore | None = None,
    backend_client: BackendClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators not passed in are built from settings; passing them in
    allows running the proxy against a stubbed backend or a temporary
    resources directory.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Schema-synchronizing proxy for a document-storage backend",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    if store is None:
        store = DescriptorStore(settings.resources_directory, settings.descriptor_filename)
    store.ensure_root()

    owns_backend_client = backend_client is None
    if backend_client is None:
        backend_client = BackendClient(
            settings.backend_url,
            admin_header=settings.backend_admin_header,
            admin_key=settings.backend_admin_key,
            timeout=settings.backend_timeout_seconds,
        )

    app.state.settings = settings
    app.state.descriptor_store = store
    app.state.backend_client = backend_client
    app.state.owns_backend_client = owns_backend_client
    app.state.schema_mirror = SchemaMirror(
        store,
        backend_client,
        locks=KeyedLock(enabled=settings.serialize_collection_writes),
    )
    app.state.document_forwarder = DocumentForwarder(backend_client)

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": "SchemaProxy",
            "version": app.state.settings.app_version,
        }

    @app.get("/live", tags=["health"])
    async def liveness_check():
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": "SchemaProxy",
            "version": app.state.settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check endpoint.

        Returns 200 only if the backend answers.
        """
        backend_reachable = await app.state.backend_client.ping()
        if backend_reachable:
            return {
                "status": "ready",
                "service": "SchemaProxy",
                "version": app.state.settings.app_version,
                "backend": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": "SchemaProxy",
                "backend": "unreachable",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Resource routes go first so ``/resources`` is never taken for a
    collection name by the document routes.
    """
    from schemaproxy.infrastructure.api.routes import documents_router, resources_router

    app.include_router(resources_router, prefix="/resources", tags=["resources"])
    app.include_router(documents_router, tags=["documents"])


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies as 400."""
        logger.info(
            "Request validation failed",
            path=str(request.url.path),
            method=request.method,
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": "Validation error",
                "message": "Malformed request",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(SchemaProxyError)
    async def schema_proxy_error_handler(request: Request, exc: SchemaProxyError):
        """Map domain errors that reach the top level."""
        logger.warning(
            "Unhandled SchemaProxy error",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return error_response(exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if app.state.settings.debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(MethodOverrideMiddleware)

    @app.middleware("http")
    async def logging_middleware(request, call_next):
        """Log all requests and attach a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()
