"""
FastAPI HTTP Handlers for the admin back office.

Every route here requires an authenticated admin.
"""

import platform
import time

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import JSONResponse, Response

from internal.domain.admin import Admin
from internal.domain.errors import CategoryNotFoundError
from internal.transport.http.auth import require_admin
from internal.transport.http.dependencies import (
    get_analytics_service,
    get_bulk_delete_use_case,
    get_catalog_service,
    get_category_service,
    get_container,
    get_export_use_case,
)
from internal.transport.http.dto import (
    BulkDeleteRequest,
    CreateCategoryRequest,
    UpdateCategoryRequest,
    success_response,
)
from internal.usecase.analytics import DEFAULT_PERIOD_DAYS, AnalyticsService
from internal.usecase.catalog_service import CatalogService
from internal.usecase.category_service import CategoryService
from internal.usecase.export_products import ExportFormat, ExportProductsUseCase
from internal.usecase.update_product import BulkDeleteProductsUseCase
from pkg.logger.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)

_started_at = time.monotonic()


@router.get("/metrics")
async def dashboard_metrics(
    days: int = Query(DEFAULT_PERIOD_DAYS, ge=1, le=365, description="Reporting window"),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> dict:
    """Dashboard overview, top products, breakdowns and monthly trends."""
    return success_response(await analytics.dashboard(days=days))


@router.get("/stats")
async def system_stats(analytics: AnalyticsService = Depends(get_analytics_service)) -> dict:
    """Product counts per status and basic runtime information."""
    by_status = await analytics.status_breakdown()
    return success_response({
        "products": {
            "draft": by_status.get("draft", 0),
            "inactive": by_status.get("inactive", 0),
            "by_status": by_status,
        },
        "system": {
            "python_version": platform.python_version(),
            "environment": get_container().environment,
            "uptime_seconds": round(time.monotonic() - _started_at, 1),
        },
    })


@router.get("/profile")
async def admin_profile(admin: Admin = Depends(require_admin)) -> dict:
    return success_response({"admin": admin.to_dict()})


@router.get("/products/{product_id}/performance")
async def product_performance(
    product_id: str = Path(..., description="Product ID"),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> dict:
    """Counters and derived metrics for one product, whatever its status."""
    performance = await analytics.product_performance(product_id)
    return success_response({"performance": performance})


@router.post("/products/bulk-delete")
async def bulk_delete_products(
    request: BulkDeleteRequest,
    admin: Admin = Depends(require_admin),
    use_case: BulkDeleteProductsUseCase = Depends(get_bulk_delete_use_case),
) -> dict:
    """Hard-delete every product in ``ids``; unknown IDs are skipped."""
    deleted = await use_case.execute(request.ids)
    logger.info("Bulk delete by admin", deleted=deleted, admin_id=str(admin.id))
    return success_response(
        {"deleted_count": deleted},
        message=f"{deleted} products deleted successfully",
    )


@router.get("/products/export")
async def export_products(
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    use_case: ExportProductsUseCase = Depends(get_export_use_case),
) -> Response:
    """Download every product as a CSV attachment or a JSON envelope."""
    result = await use_case.execute()

    if export_format == ExportFormat.JSON:
        return JSONResponse(content=success_response(result.to_dicts()))

    return Response(
        content=result.to_csv(),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename(export_format)}"',
        },
    )


@router.get("/networks")
async def network_options(catalog: CatalogService = Depends(get_catalog_service)) -> dict:
    """Default affiliate networks merged with the networks already in use."""
    return success_response(await catalog.network_options())


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    request: CreateCategoryRequest,
    service: CategoryService = Depends(get_category_service),
) -> JSONResponse:
    category = await service.create_category(
        name=request.name,
        image=request.image,
        description=request.description,
        is_active=request.is_active,
        order=request.order,
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success_response(category.to_dict(), message="Category created successfully"),
    )


@router.post("/categories/update-counts")
async def update_all_category_counts(
    service: CategoryService = Depends(get_category_service),
) -> dict:
    """Recount products for every category."""
    categories = await service.update_all_product_counts()
    return success_response(
        [{"name": c.name, "product_count": c.product_count} for c in categories],
        message="Product counts updated successfully",
    )


@router.post("/categories/{category_name}/update-count")
async def update_category_count(
    category_name: str = Path(..., min_length=1, max_length=50),
    service: CategoryService = Depends(get_category_service),
) -> dict:
    """Recount products for one category, by name."""
    category = await service.update_product_count(category_name)
    if category is None:
        raise CategoryNotFoundError(category_name)
    return success_response(category.to_dict(), message="Product count updated successfully")


@router.put("/categories/{category_id}")
async def update_category(
    request: UpdateCategoryRequest,
    category_id: str = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> dict:
    category = await service.update_category(category_id, request.to_changes())
    return success_response(category.to_dict(), message="Category updated successfully")


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> dict:
    await service.delete_category(category_id)
    return success_response(None, message="Category deleted successfully")
