"""
Domain model for Product.

The Product is the catalog aggregate: it owns its affiliate links, derives
its headline price from them and carries the engagement counters.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional
from uuid import UUID, uuid4

from .value_objects import AffiliateLink, ProductStatus


COMMISSION_RATE = Decimal("0.05")

_CENTS = Decimal("0.01")


def calculate_ctr(clicks: int, conversions: int) -> float:
    """
    Calculate click-through rate as a percentage.

    Args:
        clicks: Number of tracked clicks.
        conversions: Number of tracked conversions.

    Returns:
        conversions / clicks * 100, or 0 when there are no clicks.
    """
    if clicks <= 0:
        return 0.0
    return (conversions / clicks) * 100


@dataclass
class Product:
    """
    Product is the aggregate root for catalog operations.

    Attributes:
        id: Unique identifier.
        title: Product title.
        slug: URL slug derived from the title.
        short_description: Teaser text for listings.
        description: Full description.
        images: Image URLs.
        price: Headline price, always derived from the affiliate links.
        affiliate_url: Legacy single affiliate URL.
        affiliate_links: Owned affiliate links.
        categories: Category names.
        tags: Free-form tags.
        top_selling: Whether the product is featured as top selling.
        clicks: Click counter.
        conversions: Conversion counter.
        ctr: conversions / clicks * 100.
        status: Publication status.
        meta_title: SEO title.
        meta_description: SEO description.
        created_by: Admin that created the product.
        updated_by: Admin that last edited the product.
        created_at: Timestamp of creation.
        updated_at: Timestamp of last update.
    """
    title: str = ""
    short_description: str = ""
    description: str = ""
    id: UUID = field(default_factory=uuid4)
    slug: str = ""
    images: list[str] = field(default_factory=list)
    price: Decimal = Decimal("0")
    affiliate_url: Optional[str] = None
    affiliate_links: list[AffiliateLink] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    top_selling: bool = False
    clicks: int = 0
    conversions: int = 0
    ctr: float = 0.0
    status: ProductStatus = ProductStatus.ACTIVE
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    @property
    def primary_link(self) -> Optional[AffiliateLink]:
        """
        Get the primary affiliate link.

        Returns:
            The link flagged primary, the first link if none is flagged,
            or None for a product without links.
        """
        for link in self.affiliate_links:
            if link.is_primary:
                return link
        return self.affiliate_links[0] if self.affiliate_links else None

    @property
    def redirect_url(self) -> Optional[str]:
        """URL a shopper is sent to when clicking through."""
        link = self.primary_link
        if link is not None:
            return link.url
        return self.affiliate_url

    @property
    def conversion_rate(self) -> str:
        """Conversion rate as a two-decimal percentage string."""
        if self.clicks <= 0:
            return "0"
        return f"{(self.conversions / self.clicks) * 100:.2f}"

    @property
    def estimated_revenue(self) -> Decimal:
        """Estimated commission earned at the fixed commission rate."""
        revenue = Decimal(self.conversions) * Decimal(self.price) * COMMISSION_RATE
        return revenue.quantize(_CENTS, rounding=ROUND_HALF_UP)

    def to_dict(self) -> dict:
        """
        Convert to dictionary representation.

        Returns:
            Dictionary with all product data, including derived metrics.
        """
        return {
            "id": str(self.id),
            "title": self.title,
            "slug": self.slug,
            "short_description": self.short_description,
            "description": self.description,
            "images": list(self.images),
            "price": float(self.price),
            "affiliate_url": self.affiliate_url,
            "affiliate_links": [link.to_dict() for link in self.affiliate_links],
            "categories": list(self.categories),
            "tags": list(self.tags),
            "top_selling": self.top_selling,
            "clicks": self.clicks,
            "conversions": self.conversions,
            "ctr": self.ctr,
            "conversion_rate": self.conversion_rate,
            "estimated_revenue": float(self.estimated_revenue),
            "status": self.status.value,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
