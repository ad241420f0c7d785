"""
FastAPI HTTP Handlers for public category reads.
"""

from fastapi import APIRouter, Depends, Path, Query

from internal.transport.http.dependencies import get_category_service
from internal.transport.http.dto import success_response
from internal.usecase.category_service import CategoryService


router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
async def list_categories(
    active: bool = Query(False, description="Only active categories"),
    service: CategoryService = Depends(get_category_service),
) -> dict:
    """List categories ordered by sort key, then name."""
    categories = await service.list_categories(active_only=active)
    return success_response([category.to_dict() for category in categories])


@router.get("/{category_id}")
async def get_category(
    category_id: str = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> dict:
    category = await service.get_by_id(category_id)
    return success_response(category.to_dict())
