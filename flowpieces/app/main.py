"""
flowpieces - Kommo and Zagomail pieces for workflow automation

FastAPI host adapter entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowpieces import __version__
from flowpieces.app.api import flows_router, pieces_router, webhooks_router
from flowpieces.app.dependencies import (
    get_activations,
    get_registry,
    get_settings,
    initialize_services,
    shutdown_services,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting flowpieces services...")
    try:
        await initialize_services()
        logger.info("flowpieces services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down flowpieces services...")
    try:
        await shutdown_services()
        logger.info("flowpieces services shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)


app = FastAPI(
    title="flowpieces",
    description="Kommo CRM and Zagomail integration pieces behind a small HTTP host adapter",
    version=__version__,
    lifespan=lifespan,
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(pieces_router, prefix="/api/v1")
app.include_router(flows_router, prefix="/api/v1")
app.include_router(webhooks_router, prefix="/api/v1")


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint with service info."""
    return {
        "service": settings.service_name,
        "version": __version__,
        "environment": settings.environment,
        "status": "running",
    }


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns service health status including:
    - Loaded pieces
    - Number of flows with an active trigger
    """
    try:
        registry = get_registry()
        return {
            "status": "healthy",
            "pieces": registry.list_names(),
            "active_triggers": len(get_activations()),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "flowpieces.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
