"""
FastAPI Application Factory

Creates and configures FastAPI application
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import configure_logging, get_logger
from app.core.db import async_session_maker, close_db
from app.llm.factory import close_clients, get_embedding_service_instance
from app.services.indexing_service import EmbeddingIndexer
from app.vectorstore.memory import SemanticIndex
from app.vectorstore.sql_store import SQLRecordStore

# Import routers
from app.routers import chat, embeddings, schools
from app.api.error_handlers import register_exception_handlers
from app.api.response_middleware import SuccessEnvelopeMiddleware

logger = get_logger(__name__)


async def build_index_in_background(index: SemanticIndex) -> None:
    """Initial index build so search works without a manual rebuild."""
    t0 = time.perf_counter()
    indexer = EmbeddingIndexer(
        record_store=SQLRecordStore(async_session_maker),
        embedding_service=get_embedding_service_instance(),
        index=index,
    )
    try:
        summary = await indexer.rebuild_index()
        logger.info(
            "startup_index_build_complete",
            succeeded=summary.succeeded,
            failed=summary.failed,
            elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
        )
    except Exception as e:
        logger.error(
            "startup_index_build_failed",
            error=str(e),
            elapsed_seconds=f"{time.perf_counter() - t0:.2f}",
        )
        # Don't raise - the server stays up with an empty index


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events

    Startup:
        - Configure logging
        - Optionally schedule the initial index build as a background task

    Shutdown:
        - Cancel a still-running initial build (its result is discarded)
        - Close upstream clients and database connections
    """
    # Startup
    configure_logging()
    logger.info("application_startup", environment=settings.environment)

    startup_task: asyncio.Task | None = None
    if settings.index_on_startup:
        startup_task = asyncio.create_task(
            build_index_in_background(app.state.semantic_index)
        )

    yield

    # Shutdown
    logger.info("application_shutdown")
    if startup_task is not None and not startup_task.done():
        startup_task.cancel()
    await close_clients()
    await close_db()


def create_app() -> FastAPI:
    """
    Create FastAPI application

    Returns:
        Configured FastAPI app instance

    Usage:
        app = create_app()
        uvicorn.run(app, host="0.0.0.0", port=8000)
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="School directory with semantic search and chat assistant",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # One index per application instance
    app.state.semantic_index = SemanticIndex()

    # Success envelope middleware
    app.add_middleware(SuccessEnvelopeMiddleware)

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_hosts,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(schools.router, prefix=settings.api_prefix)
    app.include_router(embeddings.router, prefix=settings.api_prefix)
    app.include_router(chat.router, prefix=settings.api_prefix)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """
        Health check endpoint

        Returns:
            Status dict
        """
        return {
            "status": "ok",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        }

    logger.info("fastapi_app_created", routes=len(app.routes))

    return app


# Application instance
app = create_app()
