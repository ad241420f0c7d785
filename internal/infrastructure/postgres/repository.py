"""
PostgreSQL Product Repository.

Implements the repository pattern for Product persistence with asyncpg.
A Product is one row: its affiliate links live in a JSONB array and its
categories/tags in TEXT[] columns, so every write touches a single row.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import asyncpg
from asyncpg import Pool

from internal.domain.errors import ProductAlreadyExistsError
from internal.domain.product import Product
from internal.domain.value_objects import AffiliateLink, ProductStatus


PRODUCT_COLUMNS = """
    id, title, slug, short_description, description, images, price,
    affiliate_url, affiliate_links, categories, tags, top_selling,
    clicks, conversions, ctr, status, meta_title, meta_description,
    created_by, updated_by, created_at, updated_at
"""

# Public sort keys mapped to columns; anything else falls back to created_at.
SORT_COLUMNS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "title": "title",
    "price": "price",
    "clicks": "clicks",
    "conversions": "conversions",
}

# Named orderings used by the storefront search form.
SORT_PRESETS = {
    "price_low": "price ASC, created_at DESC",
    "price_high": "price DESC, created_at DESC",
    "name": "title ASC",
    "latest": "created_at DESC",
    "relevance": "top_selling DESC, created_at DESC",
}


@dataclass
class ProductFilter:
    """
    Filter, sort and pagination options for product listing.

    Attributes:
        status: Exact status to match, or None for any status.
        search: Full-text query over title and descriptions.
        categories: Match products sharing at least one category.
        tags: Match products sharing at least one tag.
        networks: Match products with a link on at least one network.
        min_price: Inclusive lower bound on price.
        max_price: Inclusive upper bound on price.
        top_selling: Exact match on the top selling flag.
        sort_by: Public sort key (see SORT_COLUMNS).
        sort_order: "asc" or "desc".
        sort_preset: Named ordering (see SORT_PRESETS); overrides sort_by.
        offset: Number of rows to skip.
        limit: Maximum number of rows.
    """
    status: Optional[str] = ProductStatus.ACTIVE.value
    search: Optional[str] = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    networks: list[str] = field(default_factory=list)
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    top_selling: Optional[bool] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    sort_preset: Optional[str] = None
    offset: int = 0
    limit: int = 12


def build_product_query(filters: ProductFilter) -> tuple[str, str, list]:
    """
    Build the listing and count queries for a filter.

    Args:
        filters: Listing options.

    Returns:
        Tuple of (select query, count query, parameters). The select query
        takes two extra trailing parameters: limit and offset.
    """
    conditions = []
    params: list = []
    param_num = 1

    if filters.status is not None:
        conditions.append(f"status = ${param_num}")
        params.append(filters.status)
        param_num += 1

    if filters.search:
        conditions.append(f"search_vector @@ plainto_tsquery('simple', ${param_num})")
        params.append(filters.search)
        param_num += 1

    if filters.categories:
        conditions.append(f"categories && ${param_num}::text[]")
        params.append(list(filters.categories))
        param_num += 1

    if filters.tags:
        conditions.append(f"tags && ${param_num}::text[]")
        params.append(list(filters.tags))
        param_num += 1

    if filters.networks:
        conditions.append(
            "EXISTS (SELECT 1 FROM jsonb_array_elements(affiliate_links) AS link"
            f" WHERE link->>'network' = ANY(${param_num}::text[]))"
        )
        params.append(list(filters.networks))
        param_num += 1

    if filters.min_price is not None:
        conditions.append(f"price >= ${param_num}")
        params.append(filters.min_price)
        param_num += 1

    if filters.max_price is not None:
        conditions.append(f"price <= ${param_num}")
        params.append(filters.max_price)
        param_num += 1

    if filters.top_selling is not None:
        conditions.append(f"top_selling = ${param_num}")
        params.append(filters.top_selling)
        param_num += 1

    where_clause = " AND ".join(conditions) if conditions else "1=1"

    # Sort keys and presets come from whitelists, never from the request
    if filters.sort_preset in SORT_PRESETS:
        order_clause = f"{SORT_PRESETS[filters.sort_preset]}, id DESC"
    else:
        sort_column = SORT_COLUMNS.get(filters.sort_by, "created_at")
        sort_order = "ASC" if filters.sort_order.lower() == "asc" else "DESC"
        order_clause = f"{sort_column} {sort_order}, id {sort_order}"

    query = f"""
        SELECT {PRODUCT_COLUMNS}
        FROM products
        WHERE {where_clause}
        ORDER BY {order_clause}
        LIMIT ${param_num} OFFSET ${param_num + 1}
    """

    count_query = f"""
        SELECT COUNT(*)
        FROM products
        WHERE {where_clause}
    """

    return query, count_query, params


class PostgresProductRepository:
    """
    PostgreSQL implementation of the Product Repository.

    Uses asyncpg for async database operations. Counter updates are single
    UPDATE statements so concurrent increments never lose a count.
    """

    def __init__(self, pool: Pool) -> None:
        """
        Initialize the repository.

        Args:
            pool: asyncpg connection pool.
        """
        self._pool = pool

    async def get_by_id(self, product_id: UUID) -> Optional[Product]:
        """
        Get a product by ID, whatever its status.

        Args:
            product_id: The UUID of the product.

        Returns:
            Product if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE id = $1
                """,
                product_id,
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def get_by_slug(self, slug: str) -> Optional[Product]:
        """
        Get a product by slug, whatever its status.

        Args:
            slug: The slug of the product.

        Returns:
            Product if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                WHERE slug = $1
                """,
                slug,
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def slug_exists(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        """
        Check whether another product already uses a slug.

        Args:
            slug: Slug to look up.
            exclude_id: Product to ignore (the one being edited).

        Returns:
            True if the slug is taken.
        """
        async with self._pool.acquire() as conn:
            return await conn.fetchval(
                """
                SELECT EXISTS(
                    SELECT 1 FROM products
                    WHERE slug = $1 AND ($2::uuid IS NULL OR id <> $2::uuid)
                )
                """,
                slug,
                exclude_id,
            )

    async def create(self, product: Product) -> Product:
        """
        Insert a product.

        Args:
            product: Product with all invariants derived.

        Returns:
            The stored product.

        Raises:
            ProductAlreadyExistsError: If the slug was taken concurrently.
        """
        async with self._pool.acquire() as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO products (
                        id, title, slug, short_description, description, images,
                        price, affiliate_url, affiliate_links, categories, tags,
                        top_selling, clicks, conversions, ctr, status,
                        meta_title, meta_description, created_by, updated_by,
                        created_at, updated_at
                    ) VALUES (
                        $1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb, $10, $11,
                        $12, $13, $14, $15, $16, $17, $18, $19, $20, $21, $22
                    )
                    RETURNING {PRODUCT_COLUMNS}
                    """,
                    product.id,
                    product.title,
                    product.slug,
                    product.short_description,
                    product.description,
                    list(product.images),
                    product.price,
                    product.affiliate_url,
                    self._serialize_links(product.affiliate_links),
                    list(product.categories),
                    list(product.tags),
                    product.top_selling,
                    product.clicks,
                    product.conversions,
                    product.ctr,
                    product.status.value,
                    product.meta_title,
                    product.meta_description,
                    product.created_by,
                    product.updated_by,
                    product.created_at,
                    product.updated_at,
                )
            except asyncpg.UniqueViolationError as e:
                raise ProductAlreadyExistsError(product.slug) from e

            return self._row_to_entity(row)

    async def update(self, product: Product) -> Product:
        """
        Update the editable fields of a product.

        Counters are owned by the tracking path and are not written here,
        except for ctr which is recomputed from the stored counters.

        Args:
            product: Product with all invariants derived.

        Returns:
            The stored product.

        Raises:
            ProductAlreadyExistsError: If the slug was taken concurrently.
        """
        async with self._pool.acquire() as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    UPDATE products
                    SET title = $2,
                        slug = $3,
                        short_description = $4,
                        description = $5,
                        images = $6,
                        price = $7,
                        affiliate_url = $8,
                        affiliate_links = $9::jsonb,
                        categories = $10,
                        tags = $11,
                        top_selling = $12,
                        status = $13,
                        meta_title = $14,
                        meta_description = $15,
                        updated_by = $16,
                        updated_at = $17,
                        ctr = CASE WHEN clicks > 0
                                   THEN conversions * 100.0 / clicks
                                   ELSE 0 END
                    WHERE id = $1
                    RETURNING {PRODUCT_COLUMNS}
                    """,
                    product.id,
                    product.title,
                    product.slug,
                    product.short_description,
                    product.description,
                    list(product.images),
                    product.price,
                    product.affiliate_url,
                    self._serialize_links(product.affiliate_links),
                    list(product.categories),
                    list(product.tags),
                    product.top_selling,
                    product.status.value,
                    product.meta_title,
                    product.meta_description,
                    product.updated_by,
                    product.updated_at,
                )
            except asyncpg.UniqueViolationError as e:
                raise ProductAlreadyExistsError(product.slug) from e

            if not row:
                return product

            return self._row_to_entity(row)

    async def delete(self, product_id: UUID) -> bool:
        """
        Hard-delete a product.

        Args:
            product_id: The UUID of the product.

        Returns:
            True if a row was deleted.
        """
        async with self._pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM products WHERE id = $1",
                product_id,
            )
            return result == "DELETE 1"

    async def delete_many(self, product_ids: list[UUID]) -> int:
        """
        Hard-delete several products in one statement.

        Args:
            product_ids: UUIDs of the products; unknown IDs are ignored.

        Returns:
            Number of rows deleted.
        """
        async with self._pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM products WHERE id = ANY($1::uuid[])",
                list(product_ids),
            )
            # Command tag is "DELETE <count>"
            return int(result.split()[-1])

    async def list_all(self) -> list[Product]:
        """Every product, whatever its status, newest first."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products
                ORDER BY created_at DESC, id DESC
                """
            )
            return [self._row_to_entity(row) for row in rows]

    async def increment_clicks(self, product_id: UUID) -> Optional[Product]:
        """
        Atomically add one click and recompute ctr.

        Only active products are counted.

        Args:
            product_id: The UUID of the product.

        Returns:
            Updated product, or None if no active product matched.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE products
                SET clicks = clicks + 1,
                    ctr = conversions * 100.0 / (clicks + 1),
                    updated_at = $2
                WHERE id = $1 AND status = 'active'
                RETURNING {PRODUCT_COLUMNS}
                """,
                product_id,
                datetime.utcnow(),
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def increment_conversions(self, product_id: UUID) -> Optional[Product]:
        """
        Atomically add one conversion and recompute ctr.

        Args:
            product_id: The UUID of the product.

        Returns:
            Updated product, or None if the product does not exist.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE products
                SET conversions = conversions + 1,
                    ctr = CASE WHEN clicks > 0
                               THEN (conversions + 1) * 100.0 / clicks
                               ELSE 0 END,
                    updated_at = $2
                WHERE id = $1
                RETURNING {PRODUCT_COLUMNS}
                """,
                product_id,
                datetime.utcnow(),
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def list_products(self, filters: ProductFilter) -> tuple[list[Product], int]:
        """
        List products with filters and pagination.

        Args:
            filters: Listing options.

        Returns:
            Tuple of (products on the requested page, total matching count).
        """
        query, count_query, params = build_product_query(filters)

        async with self._pool.acquire() as conn:
            rows = await conn.fetch(query, *params, filters.limit, filters.offset)
            total = await conn.fetchval(count_query, *params)

            return [self._row_to_entity(row) for row in rows], total or 0

    async def distinct_categories(self) -> list[str]:
        """Distinct category names used by active products."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT DISTINCT unnest(categories) AS value
                FROM products
                WHERE status = 'active'
                ORDER BY value
                """
            )
            return [row["value"] for row in rows]

    async def distinct_tags(self) -> list[str]:
        """Distinct tags used by active products."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT DISTINCT unnest(tags) AS value
                FROM products
                WHERE status = 'active'
                ORDER BY value
                """
            )
            return [row["value"] for row in rows]

    async def distinct_networks(self, active_only: bool = True) -> list[str]:
        """
        Distinct affiliate networks across product links.

        Args:
            active_only: Only look at active products.

        Returns:
            Network names in alphabetical order.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT DISTINCT link->>'network' AS value
                FROM products, jsonb_array_elements(affiliate_links) AS link
                WHERE (NOT $1 OR status = 'active')
                  AND link->>'network' IS NOT NULL
                ORDER BY value
                """,
                active_only,
            )
            return [row["value"] for row in rows]

    async def count_by_category(self, category_name: str, active_only: bool = False) -> int:
        """
        Count products whose categories contain a name.

        Args:
            category_name: Category name to look for.
            active_only: Count only active products.

        Returns:
            Number of matching products.
        """
        async with self._pool.acquire() as conn:
            count = await conn.fetchval(
                """
                SELECT COUNT(*)
                FROM products
                WHERE $1 = ANY(categories)
                  AND (NOT $2 OR status = 'active')
                """,
                category_name,
                active_only,
            )
            return count or 0

    def _row_to_entity(self, row: asyncpg.Record) -> Product:
        """
        Convert a database row to a Product entity.

        Args:
            row: Database row.

        Returns:
            Product entity.
        """
        links = row["affiliate_links"]
        if isinstance(links, str):
            links = json.loads(links)

        return Product(
            id=row["id"],
            title=row["title"],
            slug=row["slug"],
            short_description=row["short_description"],
            description=row["description"],
            images=list(row["images"] or []),
            price=row["price"],
            affiliate_url=row["affiliate_url"],
            affiliate_links=[AffiliateLink.from_dict(link) for link in links or []],
            categories=list(row["categories"] or []),
            tags=list(row["tags"] or []),
            top_selling=row["top_selling"],
            clicks=row["clicks"],
            conversions=row["conversions"],
            ctr=float(row["ctr"]),
            status=ProductStatus(row["status"]),
            meta_title=row["meta_title"],
            meta_description=row["meta_description"],
            created_by=row["created_by"],
            updated_by=row["updated_by"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _serialize_links(self, links: list[AffiliateLink]) -> str:
        """
        Serialize affiliate links to JSON.

        Args:
            links: Links to serialize.

        Returns:
            JSON string.

        Raises:
            TypeError: If a link holds a non-serializable value.
        """
        try:
            return json.dumps([link.to_dict() for link in links])
        except (TypeError, ValueError) as e:
            raise TypeError(f"Failed to serialize affiliate links: {e}") from e


async def create_pool(dsn: str, min_size: int = 5, max_size: int = 20) -> Pool:
    """
    Create an asyncpg connection pool.

    Args:
        dsn: Database connection string.
        min_size: Minimum pool size.
        max_size: Maximum pool size.

    Returns:
        asyncpg connection pool.
    """
    return await asyncpg.create_pool(
        dsn=dsn,
        min_size=min_size,
        max_size=max_size,
    )
