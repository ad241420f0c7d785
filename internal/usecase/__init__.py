"""
Use case package for the storefront service.

Contains business logic and use cases.
"""
from .create_product import (
    CreateProductUseCase,
    CreateProductInput,
    CreateProductOutput,
)
from .update_product import (
    UpdateProductUseCase,
    UpdateProductInput,
    DeleteProductUseCase,
    BulkDeleteProductsUseCase,
)
from .track_engagement import (
    TrackClickUseCase,
    TrackClickOutput,
    TrackConversionUseCase,
    TrackConversionOutput,
)
from .search_products import (
    SearchProductsUseCase,
    SearchProductsInput,
    SearchProductsOutput,
)
from .catalog_service import CatalogService, DEFAULT_NETWORKS
from .export_products import ExportProductsUseCase, ExportFormat
from .category_service import CategoryService
from .analytics import AnalyticsService
from .admin_auth import AdminAuthService, LoginOutput

__all__ = [
    "CreateProductUseCase",
    "CreateProductInput",
    "CreateProductOutput",
    "UpdateProductUseCase",
    "UpdateProductInput",
    "DeleteProductUseCase",
    "BulkDeleteProductsUseCase",
    "TrackClickUseCase",
    "TrackClickOutput",
    "TrackConversionUseCase",
    "TrackConversionOutput",
    "SearchProductsUseCase",
    "SearchProductsInput",
    "SearchProductsOutput",
    "CatalogService",
    "DEFAULT_NETWORKS",
    "ExportProductsUseCase",
    "ExportFormat",
    "CategoryService",
    "AnalyticsService",
    "AdminAuthService",
    "LoginOutput",
]
