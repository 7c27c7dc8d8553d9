"""
API sub-package for the Listing Reader.

Contains the FastAPI application, its routes and response models. Import
`api.main` or the routers from `api.routes` directly.
"""

__all__ = []
