"""
Catalog upload routes.

POST /api/imports/{target} with a multipart "file" field. Vendor product
uploads also need a "vendor_id" form field.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.imports import ImportResponse, ImportTarget
from routes.dependencies import get_import_service
from services.import_service import ImportService
from exceptions import AppError, UnknownImportTargetError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
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


# ===================
# ROUTES
# ===================

@router.post("/{target}", response_model=ImportResponse)
async def upload_import(
    target: str,
    file: UploadFile = File(..., description="CSV, TSV or .xlsx file"),
    vendor_id: Optional[str] = Form(None, description="Owning vendor (vendor-products only)"),
    service: ImportService = Depends(get_import_service),
):
    """
    Import one file as a single atomic batch.

    Raises:
        413: File or row count too large
        409: Batch rejected by the database (nothing saved)
        422: Unreadable file or invalid row
    """
    logger.info(
        "import_upload_received",
        target=target,
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        try:
            import_target = ImportTarget(target)
        except ValueError:
            raise UnknownImportTargetError(target, [t.value for t in ImportTarget])

        content = await file.read()
        result = service.import_file(
            import_target,
            content,
            content_type=file.content_type,
            vendor_id=vendor_id
        )
        return ImportResponse(**result.to_dict())

    except Exception as e:
        return handle_error(e)
