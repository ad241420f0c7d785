"""
Domain model for Category.

Categories group products by name; products reference categories by name,
and the denormalized product_count is refreshed by an explicit
reconciliation job rather than on every product write.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from .errors import DomainValidationError
from .slug import slugify_category_name


NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200


@dataclass
class Category:
    """
    Category entity.

    Attributes:
        name: Unique display name.
        image: Image URL.
        id: Unique identifier for the category.
        slug: URL-friendly identifier, derived from the name.
        description: Optional short description.
        is_active: Whether the category is shown publicly.
        product_count: Number of products referencing this category.
        order: Sort key.
        created_at: Timestamp of creation.
        updated_at: Timestamp of last update.
    """

    name: str
    image: str
    id: UUID = field(default_factory=uuid4)
    slug: str = ""
    description: Optional[str] = None
    is_active: bool = True
    product_count: int = 0
    order: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Validate invariants and derive the slug."""
        self._validate()
        if not self.slug:
            self.slug = slugify_category_name(self.name)

    def _validate(self) -> None:
        """
        Validate domain invariants.

        Raises:
            DomainValidationError: If validation fails.
        """
        if not self.name or not self.name.strip():
            raise DomainValidationError("Category name is required", field="name")
        if len(self.name) > NAME_MAX_LENGTH:
            raise DomainValidationError(
                f"Category name cannot exceed {NAME_MAX_LENGTH} characters",
                field="name",
            )
        if not self.image:
            raise DomainValidationError("Category image is required", field="image")
        if self.description and len(self.description) > DESCRIPTION_MAX_LENGTH:
            raise DomainValidationError(
                f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )

    def rename(self, name: str) -> None:
        """
        Change the name and re-derive the slug.

        Args:
            name: New category name.
        """
        if name == self.name:
            return
        previous = self.name
        self.name = name
        try:
            self._validate()
        except DomainValidationError:
            self.name = previous
            raise
        self.slug = slugify_category_name(name)
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> dict:
        """
        Convert to dictionary representation.

        Returns:
            Dictionary with all category data.
        """
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "image": self.image,
            "description": self.description,
            "is_active": self.is_active,
            "product_count": self.product_count,
            "order": self.order,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
