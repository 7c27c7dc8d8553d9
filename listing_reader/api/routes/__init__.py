"""
API Routes sub-package for the Listing Reader.

Re-exports the analysis router for inclusion in the main FastAPI
application (`api/main.py`).
"""

from .analysis_routes import router as analysis_router

__all__ = [
    "analysis_router",
]
