"""
Data Transfer Objects for the Storefront API.

Contains Pydantic models for request validation and the response envelope
helpers. Request models enforce the structural limits; the domain layer
still enforces its own invariants on whatever reaches it.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from internal.domain.invariants import PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS
from internal.domain.value_objects import AffiliateLink, ProductStatus
from internal.usecase.search_products import MAX_PAGE_SIZE


HTTP_URL_PATTERN = r"^(?i:https?)://.+"
SORT_FIELD_PATTERN = r"^(createdAt|updatedAt|title|price|clicks|conversions)$"
SORT_ORDER_PATTERN = r"^(asc|desc)$"
SEARCH_SORT_PATTERN = r"^(relevance|price_low|price_high|name|latest)$"
SEARCH_DEFAULT_LIMIT = 20


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """
    Build a success envelope.

    Args:
        data: Response payload.
        message: Optional human-readable message.

    Returns:
        ``{"success": True, "data": ..., "message"?: ...}``
    """
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def error_response(code: str, message: str, details: Optional[list] = None) -> dict:
    """
    Build an error envelope.

    Args:
        code: Machine-readable error code.
        message: Human-readable message.
        details: Optional field-level details.

    Returns:
        ``{"success": False, "error": {"code", "message", "details"?}}``
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


# Product DTOs
class AffiliateLinkDTO(BaseModel):
    """Affiliate link as sent by the admin UI."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(..., pattern=HTTP_URL_PATTERN, description="Outbound affiliate URL")
    network: str = Field(..., min_length=1, max_length=100, description="Affiliate network")
    price: Optional[Decimal] = Field(
        None,
        ge=0,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        description="Price through this link",
    )
    label: Optional[str] = Field(None, max_length=50, description="Button label")
    is_primary: bool = Field(
        False,
        validation_alias=AliasChoices("is_primary", "isPrimary"),
        description="Primary link flag",
    )

    def to_entity(self) -> AffiliateLink:
        return AffiliateLink(
            url=self.url,
            network=self.network.strip(),
            price=self.price,
            label=self.label.strip() if self.label else None,
            is_primary=self.is_primary,
        )


class CreateProductRequest(BaseModel):
    """Request body for creating a product."""

    title: str = Field(..., min_length=1, max_length=200)
    short_description: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1, max_length=5000)
    images: List[str] = Field(..., min_length=1, max_length=10)
    affiliate_links: List[AffiliateLinkDTO] = Field(default_factory=list, max_length=10)
    affiliate_url: Optional[str] = Field(None, pattern=HTTP_URL_PATTERN)
    price: Optional[Decimal] = Field(
        None, ge=0, max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES,
    )
    categories: List[str] = Field(default_factory=list, max_length=5)
    tags: List[str] = Field(default_factory=list, max_length=10)
    top_selling: bool = False
    status: ProductStatus = ProductStatus.ACTIVE
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Wireless Mouse Pro",
                "short_description": "Ergonomic wireless mouse",
                "description": "A precise, ergonomic wireless mouse.",
                "images": ["https://example.com/mouse.jpg"],
                "affiliate_links": [
                    {"url": "https://amazon.example/mouse", "network": "Amazon", "price": "29.99"},
                    {"url": "https://ebay.example/mouse", "network": "eBay", "price": "24.99"},
                ],
                "categories": ["Electronics"],
                "tags": ["mouse", "wireless"],
            }
        }
    )


class UpdateProductRequest(BaseModel):
    """Request body for a partial product update; omitted fields are kept."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    short_description: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    images: Optional[List[str]] = Field(None, min_length=1, max_length=10)
    affiliate_links: Optional[List[AffiliateLinkDTO]] = Field(None, max_length=10)
    affiliate_url: Optional[str] = Field(None, pattern=HTTP_URL_PATTERN)
    price: Optional[Decimal] = Field(
        None, ge=0, max_digits=PRICE_MAX_DIGITS, decimal_places=PRICE_DECIMAL_PLACES,
    )
    categories: Optional[List[str]] = Field(None, max_length=5)
    tags: Optional[List[str]] = Field(None, max_length=10)
    top_selling: Optional[bool] = None
    status: Optional[ProductStatus] = None
    meta_title: Optional[str] = Field(None, max_length=60)
    meta_description: Optional[str] = Field(None, max_length=160)

    def to_changes(self) -> dict[str, Any]:
        """
        Convert the explicitly sent fields into domain values.

        Returns:
            Mapping of field name to new value.
        """
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name == "affiliate_links":
                value = [link.to_entity() for link in value or []]
            elif name in ("categories", "tags", "images"):
                value = list(value or [])
            elif name == "price" and value is None:
                continue
            elif name == "status" and value is None:
                continue
            changes[name] = value
        return changes


class AdvancedSearchRequest(BaseModel):
    """Request body for the storefront search form."""

    search: Optional[str] = Field(None, max_length=200)
    categories: List[str] = Field(default_factory=list, max_length=20)
    networks: List[str] = Field(default_factory=list, max_length=20)
    min_price: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("min_price", "minPrice"),
    )
    max_price: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("max_price", "maxPrice"),
    )
    sort: str = Field("relevance", pattern=SEARCH_SORT_PATTERN)
    limit: int = Field(SEARCH_DEFAULT_LIMIT, ge=1, le=MAX_PAGE_SIZE)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "search": "mouse",
                "categories": ["Electronics"],
                "networks": ["Amazon Associates"],
                "minPrice": "10",
                "maxPrice": "50",
                "sort": "price_low",
            }
        }
    )

    @model_validator(mode="after")
    def check_price_range(self) -> AdvancedSearchRequest:
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price cannot be greater than max_price")
        return self


class BulkDeleteRequest(BaseModel):
    """Request body for bulk product deletion; the list is checked by the use case."""

    ids: Any = Field(None, description="Product IDs to delete")


# Tracking DTOs
class TrackClickRequest(BaseModel):
    """Request body for click tracking."""

    product_id: str = Field(..., validation_alias=AliasChoices("product_id", "productId"))
    referrer: Optional[str] = None
    user_agent: Optional[str] = Field(None, validation_alias=AliasChoices("user_agent", "userAgent"))


class TrackConversionRequest(BaseModel):
    """Request body for conversion tracking."""

    product_id: str = Field(..., validation_alias=AliasChoices("product_id", "productId"))
    conversion_value: Optional[Decimal] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("conversion_value", "conversionValue"),
    )


# Category DTOs
class CreateCategoryRequest(BaseModel):
    """Request body for creating a category."""

    name: str = Field(..., min_length=1, max_length=50)
    image: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=200)
    is_active: bool = True
    order: int = 0


class UpdateCategoryRequest(BaseModel):
    """Request body for updating a category."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    image: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, max_length=200)
    is_active: Optional[bool] = None
    order: Optional[int] = None

    def to_changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name == "description"
        }


# Auth DTOs
class LoginRequest(BaseModel):
    """Request body for admin login."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)
