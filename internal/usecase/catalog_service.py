"""
Catalog read service.

Single-product lookup, the fixed "latest" and "top selling" listings and
the distinct filter values shown in the storefront.
"""
from internal.domain.errors import ProductNotFoundError
from internal.domain.product import Product
from internal.domain.value_objects import looks_like_identifier, parse_identifier
from internal.infrastructure.postgres.repository import (
    PostgresProductRepository,
    ProductFilter,
)

from .search_products import MAX_PAGE_SIZE


LATEST_LIMIT = 12
TOP_SELLING_LIMIT = 8

DEFAULT_NETWORKS = (
    "Amazon Associates",
    "ShareASale",
    "CJ Affiliate",
    "Impact",
    "ClickBank",
    "Other",
)


class CatalogService:
    """Catalog reads; public lookups only see active products."""

    def __init__(self, repository: PostgresProductRepository) -> None:
        self._repository = repository

    async def get_product(self, identifier: str) -> Product:
        """
        Get an active product by ID or slug.

        Args:
            identifier: UUID-shaped ID, otherwise treated as a slug.

        Returns:
            The product.

        Raises:
            ProductNotFoundError: If no active product matches.
        """
        if looks_like_identifier(identifier):
            product = await self._repository.get_by_id(parse_identifier(identifier))
        else:
            product = await self._repository.get_by_slug(identifier)

        if product is None or not product.is_active:
            raise ProductNotFoundError(identifier)
        return product

    async def latest(self, limit: int = LATEST_LIMIT) -> list[Product]:
        """Most recently created active products."""
        products, _ = await self._repository.list_products(
            ProductFilter(
                sort_by="createdAt",
                sort_order="desc",
                limit=min(max(1, limit), MAX_PAGE_SIZE),
            )
        )
        return products

    async def top_selling(self, limit: int = TOP_SELLING_LIMIT) -> list[Product]:
        """Active products flagged top selling, newest first."""
        products, _ = await self._repository.list_products(
            ProductFilter(
                top_selling=True,
                sort_by="createdAt",
                sort_order="desc",
                limit=min(max(1, limit), MAX_PAGE_SIZE),
            )
        )
        return products

    async def distinct_categories(self) -> list[str]:
        return await self._repository.distinct_categories()

    async def distinct_tags(self) -> list[str]:
        return await self._repository.distinct_tags()

    async def distinct_networks(self) -> list[str]:
        return await self._repository.distinct_networks()

    async def network_options(self) -> list[str]:
        """
        Networks offered in the back office product form.

        The default networks come first, followed by any other network
        already used by a product link, whatever the product status.

        Returns:
            Deduplicated network names.
        """
        used = await self._repository.distinct_networks(active_only=False)
        names = [name.strip() for name in [*DEFAULT_NETWORKS, *used] if name and name.strip()]
        return list(dict.fromkeys(names))
