"""
Value Objects for the storefront domain.

Value objects are immutable and defined by their attributes.
"""
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from .errors import InvalidIdentifierError


HTTP_URL_RE = re.compile(r"^https?://.+", re.IGNORECASE)
UNSAFE_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)


def is_safe_http_url(url: Optional[str]) -> bool:
    """
    Check that a URL is http(s) and carries no script scheme.

    Args:
        url: URL to check.

    Returns:
        True if the URL may be stored and rendered as a link.
    """
    if not url:
        return False
    return bool(HTTP_URL_RE.match(url)) and not UNSAFE_SCHEME_RE.search(url)


def parse_identifier(value: Any) -> UUID:
    """
    Parse a record identifier.

    Args:
        value: UUID instance or its string form.

    Returns:
        Parsed UUID.

    Raises:
        InvalidIdentifierError: If the value is not UUID-shaped.
    """
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifierError(value)
    try:
        return UUID(value)
    except ValueError:
        raise InvalidIdentifierError(value) from None


def looks_like_identifier(value: str) -> bool:
    """Return True if ``value`` parses as a record identifier."""
    try:
        parse_identifier(value)
    except InvalidIdentifierError:
        return False
    return True


class ProductStatus(str, Enum):
    """Publication status of a product."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


@dataclass(frozen=True)
class AffiliateLink:
    """
    AffiliateLink value object, owned exclusively by a Product.

    Attributes:
        url: Outbound affiliate URL (http/https only).
        network: Affiliate network name.
        price: Price offered through this link.
        label: Button label; defaults to "Buy on {network}".
        is_primary: Whether this is the product's primary link.
    """
    url: str
    network: str
    price: Optional[Decimal] = None
    label: Optional[str] = None
    is_primary: bool = False

    @property
    def display_label(self) -> str:
        """Label shown on the buy button."""
        return self.label or f"Buy on {self.network}"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "url": self.url,
            "network": self.network,
            "price": float(self.price) if self.price is not None else None,
            "label": self.display_label,
            "is_primary": self.is_primary,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AffiliateLink":
        """
        Build a link from its stored dictionary form.

        Args:
            data: Dictionary with url, network, price, label, is_primary.

        Returns:
            AffiliateLink instance.
        """
        price = data.get("price")
        return cls(
            url=data["url"],
            network=data.get("network") or "Unknown",
            price=Decimal(str(price)) if price is not None else None,
            label=data.get("label"),
            is_primary=bool(data.get("is_primary", False)),
        )
