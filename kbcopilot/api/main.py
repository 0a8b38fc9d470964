"""
FastAPI application with assembled routers.

Initializes the FastAPI app with all API routers, middleware and error
handlers, and configures the uvicorn server.

Dependencies: fastapi, kbcopilot.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kbcopilot.api import api_router
from kbcopilot.api.deps.dependencies import get_service_cache
from kbcopilot.boundary.vdb.vector_store_factory import uses_database
from kbcopilot.configs import get_settings
from kbcopilot.core.exceptions import (
    DocumentNotFoundError,
    KnowledgeBaseError,
    SessionBusyError,
    StorageError,
    UnsupportedFileTypeError,
    UpstreamServiceError,
    ValidationError,
)
from kbcopilot.models.common import ErrorResponse
from kbcopilot.observability.logger import configure_logging
from kbcopilot.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup awaits the schema bootstrap when the pgvector store is selected;
    a bootstrap failure aborts startup.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    if uses_database(settings):
        from kbcopilot.boundary.db import ensure_schema

        logger.info("Bootstrapping database schema...")
        await ensure_schema()

    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    _ = cache.vector_store
    _ = cache.pipeline
    _ = cache.orchestrator
    logger.info("Service cache pre-warmed")

    yield

    # Shutdown
    await cache.close()
    if uses_database(settings):
        from kbcopilot.boundary.db import dispose_async_engine

        await dispose_async_engine()
    logger.info("Service cache cleared")


def _status_for(exc: KnowledgeBaseError) -> int:
    if isinstance(exc, UnsupportedFileTypeError):
        return status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, DocumentNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, SessionBusyError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, UpstreamServiceError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, StorageError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def knowledge_base_error_handler(request: Request, exc: KnowledgeBaseError) -> JSONResponse:
    """Render application errors as ErrorResponse bodies."""
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__, "error_msg": exc.message},
        )
    body = ErrorResponse(error=exc.message, details=exc.details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Knowledge Base Copilot API",
        description="Retrieval-augmented support copilot over an uploaded knowledge base",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(KnowledgeBaseError, knowledge_base_error_handler)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "kbcopilot.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
