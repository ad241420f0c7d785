"""
PostgreSQL infrastructure package.
"""
from .repository import PostgresProductRepository, ProductFilter, create_pool
from .category_repository import PostgresCategoryRepository
from .admin_repository import PostgresAdminRepository
from .analytics_repository import PostgresAnalyticsRepository

__all__ = [
    "PostgresProductRepository",
    "ProductFilter",
    "PostgresCategoryRepository",
    "PostgresAdminRepository",
    "PostgresAnalyticsRepository",
    "create_pool",
]
