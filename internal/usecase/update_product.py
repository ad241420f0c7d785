"""
Update and Delete Product Use Cases.
"""
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from internal.domain.errors import InvalidIdsError, ProductNotFoundError
from internal.domain.invariants import derive_product_invariants, validate_product
from internal.domain.value_objects import parse_identifier
from pkg.logger.logger import get_logger

from .create_product import CreateProductOutput, ProductRepository, ensure_unique_slug


logger = get_logger(__name__)


# Fields an admin may edit; counters, slug and timestamps are derived.
EDITABLE_FIELDS = frozenset({
    "title",
    "short_description",
    "description",
    "images",
    "price",
    "affiliate_url",
    "affiliate_links",
    "categories",
    "tags",
    "top_selling",
    "status",
    "meta_title",
    "meta_description",
})


class UpdateProductInput:
    """Input DTO for a partial product update."""

    def __init__(
        self,
        product_id: str,
        changes: dict[str, Any],
        updated_by: Optional[UUID] = None,
    ) -> None:
        """
        Initialize update product input.

        Args:
            product_id: ID of the product to update.
            changes: Field values to change; unknown keys are ignored.
            updated_by: ID of the admin making the change.
        """
        self.product_id = product_id
        self.changes = changes
        self.updated_by = updated_by


class UpdateProductUseCase:
    """
    Use case for editing a product.

    Re-runs validation and derivation on the merged product. The slug is
    recomputed only when the title changes, so saving twice without a title
    edit leaves it untouched.
    """

    def __init__(self, repository: ProductRepository) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository for persistence.
        """
        self._repository = repository

    async def execute(self, input_dto: UpdateProductInput) -> CreateProductOutput:
        """
        Execute the update product use case.

        Args:
            input_dto: Product ID and changed fields.

        Returns:
            CreateProductOutput with the stored product.

        Raises:
            InvalidIdentifierError: If the ID is malformed.
            ProductNotFoundError: If no product has this ID.
            DomainValidationError: If a field violates its constraint.
            MissingAffiliateLinkError: If the product ends up with no link.
        """
        product_id = parse_identifier(input_dto.product_id)

        existing = await self._repository.get_by_id(product_id)
        if existing is None:
            raise ProductNotFoundError(str(product_id))

        changes = {
            key: value
            for key, value in input_dto.changes.items()
            if key in EDITABLE_FIELDS
        }
        candidate = replace(
            existing,
            **changes,
            updated_by=input_dto.updated_by or existing.updated_by,
            updated_at=datetime.utcnow(),
        )

        validate_product(candidate)
        candidate = derive_product_invariants(candidate, previous_title=existing.title)

        if candidate.slug != existing.slug:
            slug = await ensure_unique_slug(
                self._repository,
                candidate.slug,
                exclude_id=candidate.id,
            )
            candidate = replace(candidate, slug=slug)

        updated = await self._repository.update(candidate)

        logger.info(
            "Product updated",
            product_id=str(updated.id),
            fields=sorted(changes),
            slug=updated.slug,
        )

        return CreateProductOutput(product=updated)


class DeleteProductUseCase:
    """Use case for hard-deleting a product."""

    def __init__(self, repository: ProductRepository) -> None:
        self._repository = repository

    async def execute(self, product_id: str) -> None:
        """
        Delete a product.

        Args:
            product_id: ID of the product.

        Raises:
            InvalidIdentifierError: If the ID is malformed.
            ProductNotFoundError: If no product has this ID.
        """
        parsed_id = parse_identifier(product_id)

        deleted = await self._repository.delete(parsed_id)
        if not deleted:
            raise ProductNotFoundError(str(parsed_id))

        logger.info("Product deleted", product_id=str(parsed_id))


class BulkDeleteProductsUseCase:
    """Use case for hard-deleting a selection of products at once."""

    def __init__(self, repository: ProductRepository) -> None:
        self._repository = repository

    async def execute(self, product_ids: Any) -> int:
        """
        Delete every listed product.

        The whole list is checked before anything is deleted, so one
        malformed ID leaves the store untouched. IDs of products that no
        longer exist are ignored.

        Args:
            product_ids: Non-empty list of product IDs.

        Returns:
            Number of products deleted.

        Raises:
            InvalidIdsError: If product_ids is not a non-empty list.
            InvalidIdentifierError: If any ID is malformed.
        """
        if not isinstance(product_ids, list) or not product_ids:
            raise InvalidIdsError()

        parsed_ids = list(dict.fromkeys(parse_identifier(value) for value in product_ids))

        deleted = await self._repository.delete_many(parsed_ids)

        logger.info(
            "Products bulk deleted",
            requested=len(parsed_ids),
            deleted=deleted,
        )

        return deleted
