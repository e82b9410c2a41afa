"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.imports import router as imports_router
from routes.search import router as search_router

__all__ = [
    "imports_router",
    "search_router",
]
