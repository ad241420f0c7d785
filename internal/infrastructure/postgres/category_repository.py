"""
PostgreSQL Category Repository.

Implements the repository pattern for Category persistence with asyncpg.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

import asyncpg
from asyncpg import Pool

from internal.domain.category import Category
from internal.domain.errors import CategoryAlreadyExistsError


CATEGORY_COLUMNS = """
    id, name, slug, image, description, is_active, product_count,
    sort_order, created_at, updated_at
"""


class PostgresCategoryRepository:
    """
    PostgreSQL implementation of the Category Repository.

    Uses asyncpg for async database operations.
    """

    def __init__(self, pool: Pool) -> None:
        """
        Initialize the repository.

        Args:
            pool: asyncpg connection pool.
        """
        self._pool = pool

    async def get_by_id(self, category_id: UUID) -> Optional[Category]:
        """
        Get a category by ID.

        Args:
            category_id: The ID of the category.

        Returns:
            Category if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {CATEGORY_COLUMNS}
                FROM categories
                WHERE id = $1
                """,
                category_id,
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def get_by_name(self, name: str) -> Optional[Category]:
        """
        Get a category by its exact name.

        Args:
            name: The name of the category.

        Returns:
            Category if found, None otherwise.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {CATEGORY_COLUMNS}
                FROM categories
                WHERE name = $1
                """,
                name,
            )

            if not row:
                return None

            return self._row_to_entity(row)

    async def list_categories(self, active_only: bool = False) -> list[Category]:
        """
        List categories ordered by sort key, then name.

        Args:
            active_only: Return only active categories.

        Returns:
            List of categories.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {CATEGORY_COLUMNS}
                FROM categories
                WHERE (NOT $1 OR is_active)
                ORDER BY sort_order, name
                """,
                active_only,
            )

            return [self._row_to_entity(row) for row in rows]

    async def create(self, category: Category) -> Category:
        """
        Create a new category.

        Args:
            category: The category to create.

        Returns:
            The created category.

        Raises:
            CategoryAlreadyExistsError: If the name or slug is taken.
        """
        async with self._pool.acquire() as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO categories (
                        id, name, slug, image, description, is_active,
                        product_count, sort_order, created_at, updated_at
                    )
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                    RETURNING {CATEGORY_COLUMNS}
                    """,
                    category.id,
                    category.name,
                    category.slug,
                    category.image,
                    category.description,
                    category.is_active,
                    category.product_count,
                    category.order,
                    category.created_at,
                    category.updated_at,
                )
            except asyncpg.UniqueViolationError as e:
                raise CategoryAlreadyExistsError(category.name) from e

            return self._row_to_entity(row)

    async def update(self, category: Category) -> Category:
        """
        Update a category's editable fields.

        Args:
            category: The category to update.

        Returns:
            The updated category.

        Raises:
            CategoryAlreadyExistsError: If the new name or slug is taken.
        """
        async with self._pool.acquire() as conn:
            try:
                row = await conn.fetchrow(
                    f"""
                    UPDATE categories
                    SET name = $2,
                        slug = $3,
                        image = $4,
                        description = $5,
                        is_active = $6,
                        sort_order = $7,
                        updated_at = $8
                    WHERE id = $1
                    RETURNING {CATEGORY_COLUMNS}
                    """,
                    category.id,
                    category.name,
                    category.slug,
                    category.image,
                    category.description,
                    category.is_active,
                    category.order,
                    category.updated_at,
                )
            except asyncpg.UniqueViolationError as e:
                raise CategoryAlreadyExistsError(category.name) from e

            if not row:
                return category

            return self._row_to_entity(row)

    async def delete(self, category_id: UUID) -> bool:
        """
        Delete a category.

        Args:
            category_id: The ID of the category.

        Returns:
            True if a row was deleted.
        """
        async with self._pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM categories WHERE id = $1",
                category_id,
            )
            return result == "DELETE 1"

    async def set_product_count(self, category_id: UUID, count: int) -> None:
        """
        Overwrite the denormalized product count for a category.

        Args:
            category_id: The ID of the category.
            count: Freshly computed product count.
        """
        async with self._pool.acquire() as conn:
            await conn.execute(
                """
                UPDATE categories
                SET product_count = $2,
                    updated_at = $3
                WHERE id = $1
                """,
                category_id,
                count,
                datetime.utcnow(),
            )

    def _row_to_entity(self, row: asyncpg.Record) -> Category:
        """
        Convert a database row to a Category entity.

        Args:
            row: Database row.

        Returns:
            Category entity.
        """
        return Category(
            id=row["id"],
            name=row["name"],
            slug=row["slug"],
            image=row["image"],
            description=row["description"],
            is_active=row["is_active"],
            product_count=row["product_count"],
            order=row["sort_order"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
