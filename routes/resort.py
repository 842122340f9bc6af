"""
Collection resort API routes.

Recompute and submit a collection's product order, or preview it.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.resort import ReorderStatus, ResortPreview, ResortResult
from services.resort_service import get_resort_service
from exceptions import AppError

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
# RESORT ROUTES
# ===================

@router.post("/{collection_id}/resort", response_model=ResortResult)
async def resort_collection(collection_id: str):
    """
    Recompute and submit the full product order of a collection.

    Accepts a numeric collection id or a full collection gid.

    Returns:
        200 with ResortResult when the reorder completed
        202 with ResortResult when it was issued but not confirmed
    """
    try:
        service = get_resort_service()
        result = await service.resort(collection_id)

        if result.status == ReorderStatus.TIMED_OUT:
            return JSONResponse(
                status_code=202,
                content=result.model_dump(mode="json")
            )
        return result

    except Exception as e:
        return handle_error(e)


@router.get("/{collection_id}/resort/preview", response_model=ResortPreview)
async def preview_resort(collection_id: str):
    """
    Show the order a resort would submit, with the rule that placed
    each product. Nothing is written to the catalog.
    """
    try:
        service = get_resort_service()
        return await service.preview(collection_id)

    except Exception as e:
        return handle_error(e)
