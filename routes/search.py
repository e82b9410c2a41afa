"""
Catalog search route.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.search import SearchResult
from routes.dependencies import get_search_service
from services.search_service import SearchService
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


@router.get("", response_model=SearchResult)
async def search_catalog(
    query: Optional[str] = Query(None, description="Free text; commas separate alternatives"),
    service: SearchService = Depends(get_search_service),
):
    """
    Search retailer products by material number, SKU, item number and title.

    An empty or blank query returns no results.

    Raises:
        503: Search backend failure
    """
    try:
        return service.search_text(query)
    except Exception as e:
        return handle_error(e)
