"""
Search Products Use Case.

Translates a filter/sort/pagination request into a product listing with
pagination metadata.
"""
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from internal.domain.product import Product
from internal.infrastructure.postgres.repository import (
    PostgresProductRepository,
    ProductFilter,
)
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


@dataclass
class SearchProductsInput:
    """Input for SearchProductsUseCase."""

    search: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    networks: list[str] = field(default_factory=list)
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    top_selling: Optional[bool] = None
    status: Optional[str] = "active"
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    sort_preset: Optional[str] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE


@dataclass
class SearchProductsOutput:
    """Output for SearchProductsUseCase."""

    products: list[Product]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        # An empty result has zero pages.
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        """Pagination metadata for the response envelope."""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


class SearchProductsUseCase:
    """
    Use case for listing and searching products.

    Performs PostgreSQL full-text search with filtering and pagination.
    """

    def __init__(self, repository: PostgresProductRepository):
        """
        Initialize the use case.

        Args:
            repository: Product repository.
        """
        self._repository = repository

    async def execute(self, input_data: SearchProductsInput) -> SearchProductsOutput:
        """
        Execute the search use case.

        Out-of-range page and limit values are clamped rather than rejected.

        Args:
            input_data: Search input with query and filters.

        Returns:
            Search results with pagination.
        """
        page = max(1, input_data.page)
        limit = min(max(1, input_data.limit), MAX_PAGE_SIZE)

        logger.info(
            "Searching products",
            query=input_data.search,
            categories=input_data.categories,
            status=input_data.status,
            page=page,
        )

        products, total = await self._repository.list_products(
            ProductFilter(
                status=input_data.status,
                search=input_data.search.strip() if input_data.search else None,
                categories=input_data.categories,
                tags=input_data.tags,
                networks=input_data.networks,
                min_price=input_data.min_price,
                max_price=input_data.max_price,
                top_selling=input_data.top_selling,
                sort_by=input_data.sort_by,
                sort_order=input_data.sort_order,
                sort_preset=input_data.sort_preset,
                offset=(page - 1) * limit,
                limit=limit,
            )
        )

        logger.info(
            "Search completed",
            query=input_data.search,
            total=total,
            returned=len(products),
        )

        return SearchProductsOutput(
            products=products,
            total=total,
            page=page,
            limit=limit,
        )
