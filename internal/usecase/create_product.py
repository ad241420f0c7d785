"""
Create Product Use Case.

Runs field validation and invariant derivation before anything is written,
so a rejected payload never leaves a partial product behind.
"""
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Protocol
from uuid import UUID

from internal.domain.invariants import derive_product_invariants, validate_product
from internal.domain.product import Product
from internal.domain.slug import with_unique_suffix
from internal.domain.value_objects import AffiliateLink, ProductStatus
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class ProductRepository(Protocol):
    """Protocol for product repository write operations."""

    async def get_by_id(self, product_id: UUID) -> Optional[Product]:
        """Get product by ID."""
        ...

    async def slug_exists(self, slug: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check whether another product already uses a slug."""
        ...

    async def create(self, product: Product) -> Product:
        """Insert a product."""
        ...

    async def update(self, product: Product) -> Product:
        """Update a product's editable fields."""
        ...

    async def delete(self, product_id: UUID) -> bool:
        """Hard-delete a product."""
        ...

    async def delete_many(self, product_ids: list[UUID]) -> int:
        """Hard-delete several products, returning how many existed."""
        ...


async def ensure_unique_slug(
    repository: ProductRepository,
    slug: str,
    exclude_id: Optional[UUID] = None,
) -> str:
    """
    Resolve a slug collision by appending a timestamp suffix.

    Args:
        repository: Product repository used for the lookup.
        slug: Base slug derived from the title.
        exclude_id: Product being edited, ignored in the lookup.

    Returns:
        ``slug`` if it is free, otherwise ``slug-<epoch ms>``.
    """
    candidate = slug
    while await repository.slug_exists(candidate, exclude_id):
        candidate = with_unique_suffix(slug)
    return candidate


class CreateProductInput:
    """Input DTO for creating a product."""

    def __init__(
        self,
        title: str,
        short_description: str,
        description: str,
        images: list[str],
        affiliate_links: Optional[list[AffiliateLink]] = None,
        affiliate_url: Optional[str] = None,
        price: Optional[Decimal] = None,
        categories: Optional[list[str]] = None,
        tags: Optional[list[str]] = None,
        top_selling: bool = False,
        status: ProductStatus = ProductStatus.ACTIVE,
        meta_title: Optional[str] = None,
        meta_description: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> None:
        """
        Initialize create product input.

        Args:
            title: Product title.
            short_description: Teaser text.
            description: Full description.
            images: Image URLs.
            affiliate_links: Affiliate links; price and primary flag are derived.
            affiliate_url: Legacy single affiliate URL.
            price: Only used to price a link synthesized from affiliate_url.
            categories: Category names.
            tags: Free-form tags.
            top_selling: Top selling flag.
            status: Publication status.
            meta_title: SEO title.
            meta_description: SEO description.
            created_by: ID of the admin creating the product.
        """
        self.title = title
        self.short_description = short_description
        self.description = description
        self.images = images
        self.affiliate_links = affiliate_links or []
        self.affiliate_url = affiliate_url
        self.price = price
        self.categories = categories or []
        self.tags = tags or []
        self.top_selling = top_selling
        self.status = status
        self.meta_title = meta_title
        self.meta_description = meta_description
        self.created_by = created_by


class CreateProductOutput:
    """Output DTO for created product."""

    def __init__(self, product: Product) -> None:
        """
        Initialize create product output.

        Args:
            product: The created product.
        """
        self.product = product

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return self.product.to_dict()


class CreateProductUseCase:
    """
    Use case for creating a new product.

    The stored product always carries the derived price, a single primary
    link, a unique slug and a consistent ctr.
    """

    def __init__(self, repository: ProductRepository) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository for persistence.
        """
        self._repository = repository

    async def execute(self, input_dto: CreateProductInput) -> CreateProductOutput:
        """
        Execute the create product use case.

        This method:
        1. Validates field-level constraints
        2. Derives price, primary link, slug and ctr
        3. Suffixes the slug if another product already uses it
        4. Persists the product

        Args:
            input_dto: Input data for creating the product.

        Returns:
            CreateProductOutput with the created product.

        Raises:
            DomainValidationError: If a field violates its constraint.
            MissingAffiliateLinkError: If the product has no affiliate link.
        """
        product = Product(
            title=input_dto.title,
            short_description=input_dto.short_description,
            description=input_dto.description,
            images=list(input_dto.images),
            affiliate_links=list(input_dto.affiliate_links),
            affiliate_url=input_dto.affiliate_url,
            price=input_dto.price if input_dto.price is not None else Decimal("0"),
            categories=list(input_dto.categories),
            tags=list(input_dto.tags),
            top_selling=input_dto.top_selling,
            status=input_dto.status,
            meta_title=input_dto.meta_title,
            meta_description=input_dto.meta_description,
            created_by=input_dto.created_by,
            updated_by=input_dto.created_by,
        )

        validate_product(product)
        product = derive_product_invariants(product)

        slug = await ensure_unique_slug(self._repository, product.slug)
        if slug != product.slug:
            product = replace(product, slug=slug)

        created = await self._repository.create(product)

        logger.info(
            "Product created",
            product_id=str(created.id),
            slug=created.slug,
            price=str(created.price),
            links=len(created.affiliate_links),
        )

        return CreateProductOutput(product=created)
