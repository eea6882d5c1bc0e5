"""
FastAPI application entry point for the Creator Signals API.

This module configures logging, CORS and the API routers. The service is
stateless: every analysis recomputes its statistics from the request body,
so there is no startup or shutdown work beyond logging.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from creator_signals import __version__
from creator_signals.api import api_router
from creator_signals.core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    Logs the effective policy values on startup so a misconfigured
    environment is visible in the first lines of the log.
    """
    logger.info(f"{settings.app_name} starting")
    logger.info(
        f"Outlier method={settings.outlier_method}, "
        f"thresholds=({settings.outlier_z_threshold}, {settings.underperformer_z_threshold}), "
        f"alpha={settings.significance_alpha}, walk T={settings.walk_temperature}"
    )

    yield

    logger.info(f"{settings.app_name} shutting down")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description=(
        "Performance-signal and title-optimization engine for video creators. "
        "Provides outlier scoring, title pattern learning, lift and significance "
        "testing, readability scoring, and a Metropolis-Hastings title optimizer."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the report layer
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "creator_signals.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
