"""
Category Service Use Case.

Provides category management and the product count reconciliation job.
"""

from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from internal.domain.category import Category
from internal.domain.errors import CategoryAlreadyExistsError, CategoryNotFoundError
from internal.domain.value_objects import parse_identifier
from internal.infrastructure.postgres.category_repository import (
    PostgresCategoryRepository,
)
from internal.infrastructure.postgres.repository import PostgresProductRepository
from pkg.logger.logger import get_logger

logger = get_logger(__name__)


EDITABLE_FIELDS = frozenset({"image", "description", "is_active", "order"})


class CategoryService:
    """
    Service for category operations.

    This service:
    1. Manages category CRUD with unique names and derived slugs
    2. Reconciles the denormalized product_count on demand

    Product writes never touch category counts; the counts are refreshed
    by update_product_count / update_all_product_counts and may lag behind.
    """

    def __init__(
        self,
        repository: PostgresCategoryRepository,
        product_repository: PostgresProductRepository,
        count_active_only: bool = False,
    ) -> None:
        """
        Initialize the category service.

        Args:
            repository: Category repository instance.
            product_repository: Product repository used for counting.
            count_active_only: Count only active products when reconciling.
        """
        self._repository = repository
        self._product_repository = product_repository
        self._count_active_only = count_active_only

    async def list_categories(self, active_only: bool = False) -> list[Category]:
        """
        List categories ordered by sort key, then name.

        Args:
            active_only: Return only active categories.

        Returns:
            List of categories.
        """
        return await self._repository.list_categories(active_only=active_only)

    async def get_by_id(self, category_id: str) -> Category:
        """
        Get category by ID.

        Args:
            category_id: The ID of the category.

        Returns:
            The category.

        Raises:
            InvalidIdentifierError: If the ID is malformed.
            CategoryNotFoundError: If no category has this ID.
        """
        category = await self._repository.get_by_id(parse_identifier(category_id))
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def create_category(
        self,
        name: str,
        image: str,
        description: Optional[str] = None,
        is_active: bool = True,
        order: int = 0,
    ) -> Category:
        """
        Create a category.

        Raises:
            DomainValidationError: If a field is invalid.
            CategoryAlreadyExistsError: If the name is taken.
        """
        category = Category(
            name=name.strip(),
            image=image,
            description=description,
            is_active=is_active,
            order=order,
        )

        if await self._repository.get_by_name(category.name):
            raise CategoryAlreadyExistsError(category.name)

        created = await self._repository.create(category)
        logger.info(
            "Category created",
            category_id=str(created.id),
            category_name=created.name,
            slug=created.slug,
        )
        return created

    async def update_category(self, category_id: str, changes: dict[str, Any]) -> Category:
        """
        Update a category; a new name re-derives the slug.

        Args:
            category_id: The ID of the category.
            changes: Field values to change; unknown keys are ignored.

        Returns:
            The updated category.

        Raises:
            CategoryNotFoundError: If no category has this ID.
            CategoryAlreadyExistsError: If the new name is taken.
        """
        category = await self.get_by_id(category_id)

        updated = replace(
            category,
            **{key: value for key, value in changes.items() if key in EDITABLE_FIELDS},
            updated_at=datetime.utcnow(),
        )

        new_name = changes.get("name")
        if new_name is not None and new_name.strip() != category.name:
            new_name = new_name.strip()
            existing = await self._repository.get_by_name(new_name)
            if existing is not None and existing.id != category.id:
                raise CategoryAlreadyExistsError(new_name)
            updated.rename(new_name)

        saved = await self._repository.update(updated)
        logger.info(
            "Category updated",
            category_id=str(saved.id),
            category_name=saved.name,
            slug=saved.slug,
        )
        return saved

    async def delete_category(self, category_id: str) -> None:
        """
        Delete a category.

        Products keep the category name in their own list.

        Raises:
            CategoryNotFoundError: If no category has this ID.
        """
        category = await self.get_by_id(category_id)
        await self._repository.delete(category.id)
        logger.info("Category deleted", category_id=str(category.id), category_name=category.name)

    async def update_product_count(self, category_name: str) -> Optional[Category]:
        """
        Recount the products referencing a category and store the count.

        Safe to re-run at any time.

        Args:
            category_name: Name of the category.

        Returns:
            The category with its fresh count, or None if it does not exist.
        """
        category = await self._repository.get_by_name(category_name)
        if category is None:
            logger.warning("Category not found for count update", category_name=category_name)
            return None

        count = await self._product_repository.count_by_category(
            category.name,
            active_only=self._count_active_only,
        )
        await self._repository.set_product_count(category.id, count)

        logger.debug("Category count updated", category_name=category.name, product_count=count)
        return replace(category, product_count=count)

    async def update_all_product_counts(self) -> list[Category]:
        """
        Recount every category, one at a time.

        Returns:
            Categories with their fresh counts.
        """
        categories = await self._repository.list_categories()
        updated = []
        for category in categories:
            refreshed = await self.update_product_count(category.name)
            if refreshed is not None:
                updated.append(refreshed)

        logger.info("Category counts reconciled", categories=len(updated))
        return updated
