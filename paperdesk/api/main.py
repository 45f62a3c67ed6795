"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, paperdesk.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paperdesk.api.deps.dependencies import get_service_cache
from paperdesk.configs import get_settings
from paperdesk.observability import configure_logging
from paperdesk.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import (
    chunks_router,
    compare_router,
    health_router,
    pdf_router,
    search_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Builds the storage clients at startup and drops every cached service
    at shutdown.
    """
    logger = logging.getLogger("uvicorn")

    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    _ = cache.object_store
    _ = cache.vector_index
    logger.info(f"Service cache pre-warmed (vector store: {cache.settings.vector_store.store_type})")

    yield

    cache.clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="PaperDesk API",
        description="Research-paper workspace: extraction, summaries, comparison and grounded Q&A",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Observability; the last added middleware runs first
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(pdf_router, prefix="/api/v1")
    app.include_router(compare_router, prefix="/api/v1")
    app.include_router(chunks_router, prefix="/api/v1")
    app.include_router(search_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn."""
    uvicorn.run(
        "paperdesk.api.main:app",
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    main()
