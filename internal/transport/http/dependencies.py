"""
Handler dependencies.

The application lifespan builds the services once and registers them here;
routers pull them in through the getter functions below.
"""

from typing import Optional

from fastapi import HTTPException, status

from internal.usecase.admin_auth import AdminAuthService
from internal.usecase.analytics import AnalyticsService
from internal.usecase.catalog_service import CatalogService
from internal.usecase.category_service import CategoryService
from internal.usecase.create_product import CreateProductUseCase
from internal.usecase.export_products import ExportProductsUseCase
from internal.usecase.search_products import SearchProductsUseCase
from internal.usecase.track_engagement import TrackClickUseCase, TrackConversionUseCase
from internal.usecase.update_product import (
    BulkDeleteProductsUseCase,
    DeleteProductUseCase,
    UpdateProductUseCase,
)


# Dependency injection container (simplified)
class Dependencies:
    """Container for handler dependencies."""

    create_use_case: Optional[CreateProductUseCase] = None
    update_use_case: Optional[UpdateProductUseCase] = None
    delete_use_case: Optional[DeleteProductUseCase] = None
    bulk_delete_use_case: Optional[BulkDeleteProductsUseCase] = None
    export_use_case: Optional[ExportProductsUseCase] = None
    search_use_case: Optional[SearchProductsUseCase] = None
    catalog_service: Optional[CatalogService] = None
    track_click_use_case: Optional[TrackClickUseCase] = None
    track_conversion_use_case: Optional[TrackConversionUseCase] = None
    category_service: Optional[CategoryService] = None
    analytics_service: Optional[AnalyticsService] = None
    auth_service: Optional[AdminAuthService] = None
    cookie_name: str = "token"
    cookie_domain: Optional[str] = None
    cookie_secure: bool = False
    environment: str = "development"


_deps = Dependencies()


def _require(value, name: str):
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Service not initialized: {name}",
        )
    return value


def get_create_use_case() -> CreateProductUseCase:
    """Get CreateProductUseCase instance."""
    return _require(_deps.create_use_case, "create_product")


def get_update_use_case() -> UpdateProductUseCase:
    """Get UpdateProductUseCase instance."""
    return _require(_deps.update_use_case, "update_product")


def get_delete_use_case() -> DeleteProductUseCase:
    """Get DeleteProductUseCase instance."""
    return _require(_deps.delete_use_case, "delete_product")


def get_bulk_delete_use_case() -> BulkDeleteProductsUseCase:
    """Get BulkDeleteProductsUseCase instance."""
    return _require(_deps.bulk_delete_use_case, "bulk_delete_products")


def get_export_use_case() -> ExportProductsUseCase:
    """Get ExportProductsUseCase instance."""
    return _require(_deps.export_use_case, "export_products")


def get_search_use_case() -> SearchProductsUseCase:
    """Get SearchProductsUseCase instance."""
    return _require(_deps.search_use_case, "search_products")


def get_catalog_service() -> CatalogService:
    """Get CatalogService instance."""
    return _require(_deps.catalog_service, "catalog")


def get_track_click_use_case() -> TrackClickUseCase:
    """Get TrackClickUseCase instance."""
    return _require(_deps.track_click_use_case, "track_click")


def get_track_conversion_use_case() -> TrackConversionUseCase:
    """Get TrackConversionUseCase instance."""
    return _require(_deps.track_conversion_use_case, "track_conversion")


def get_category_service() -> CategoryService:
    """Get CategoryService instance."""
    return _require(_deps.category_service, "categories")


def get_analytics_service() -> AnalyticsService:
    """Get AnalyticsService instance."""
    return _require(_deps.analytics_service, "analytics")


def get_auth_service() -> AdminAuthService:
    """Get AdminAuthService instance."""
    return _require(_deps.auth_service, "auth")


def get_container() -> Dependencies:
    return _deps


def set_dependencies(**services) -> None:
    """
    Set handler dependencies.

    Called during application startup and by tests. Unknown names are
    rejected so a typo cannot silently leave a service unset.
    """
    for name, value in services.items():
        if not hasattr(Dependencies, name):
            raise AttributeError(f"Unknown dependency: {name}")
        setattr(_deps, name, value)


def reset_dependencies() -> None:
    """Clear every registered dependency."""
    global _deps
    _deps = Dependencies()
