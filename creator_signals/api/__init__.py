"""
Creator Signals API package initialization.

This package contains FastAPI router modules for the Creator Signals service:
- analysis: outlier scoring, pattern learning, lift, readability, niche
  velocity and title optimization endpoints
"""

from fastapi import APIRouter

# Import router modules
from creator_signals.api.analysis import router as analysis_router

# Create main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(analysis_router)  # analysis router has its own /analysis prefix

# Export all routers for selective imports
__all__ = [
    "api_router",
    "analysis_router",
]
