"""
Product validation and invariant derivation.

Both functions are pure: they never touch storage, so the write path can
run them before any persistence call and tests can run them without a
database.
"""
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from .errors import DomainValidationError, MissingAffiliateLinkError
from .product import Product, calculate_ctr
from .slug import slugify_title
from .value_objects import AffiliateLink, is_safe_http_url


TITLE_MAX_LENGTH = 200
SHORT_DESCRIPTION_MAX_LENGTH = 300
DESCRIPTION_MAX_LENGTH = 5000
MAX_IMAGES = 10
MAX_AFFILIATE_LINKS = 10
NETWORK_MAX_LENGTH = 100
LINK_LABEL_MAX_LENGTH = 50
MAX_CATEGORIES = 5
CATEGORY_NAME_MAX_LENGTH = 50
MAX_TAGS = 10
TAG_MAX_LENGTH = 30
META_TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MAX_LENGTH = 160

# Matches the products.price NUMERIC(12, 2) column.
PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2
PRICE_LIMIT = Decimal(10) ** (PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES)
_PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_DECIMAL_PLACES)

LEGACY_LINK_NETWORK = "Unknown"
LEGACY_LINK_LABEL = "Buy Now"
FALLBACK_SLUG = "product"


def _check_text(
    errors: list[dict],
    field: str,
    value: Optional[str],
    max_length: int,
    required: bool = False,
) -> None:
    if not value:
        if required:
            errors.append({"field": field, "message": f"{field} is required"})
        return
    if len(value) > max_length:
        errors.append({
            "field": field,
            "message": f"{field} cannot exceed {max_length} characters",
        })


def _check_price(errors: list[dict], field: str, value: Decimal) -> None:
    if not value.is_finite():
        errors.append({"field": field, "message": "Price must be a number"})
    elif value < 0:
        errors.append({"field": field, "message": "Price cannot be negative"})
    elif value >= PRICE_LIMIT:
        errors.append({"field": field, "message": f"Price must be less than {PRICE_LIMIT}"})
    elif value != value.quantize(_PRICE_QUANTUM):
        errors.append({
            "field": field,
            "message": f"Price cannot have more than {PRICE_DECIMAL_PLACES} decimal places",
        })


def validate_product(product: Product) -> None:
    """
    Check field-level constraints of a candidate product.

    All violations are collected so the caller sees every offending field
    at once.

    Args:
        product: Candidate product.

    Raises:
        DomainValidationError: If any field violates its constraint.
    """
    errors: list[dict] = []

    _check_text(errors, "title", product.title, TITLE_MAX_LENGTH, required=True)
    _check_text(
        errors, "short_description", product.short_description,
        SHORT_DESCRIPTION_MAX_LENGTH, required=True,
    )
    _check_text(
        errors, "description", product.description,
        DESCRIPTION_MAX_LENGTH, required=True,
    )
    _check_text(errors, "meta_title", product.meta_title, META_TITLE_MAX_LENGTH)
    _check_text(
        errors, "meta_description", product.meta_description,
        META_DESCRIPTION_MAX_LENGTH,
    )

    if not product.images:
        errors.append({"field": "images", "message": "At least one image is required"})
    elif len(product.images) > MAX_IMAGES:
        errors.append({"field": "images", "message": f"Maximum {MAX_IMAGES} images allowed"})
    for index, url in enumerate(product.images):
        if not is_safe_http_url(url):
            errors.append({
                "field": f"images.{index}",
                "message": "Image URL must start with http:// or https:// and contain no unsafe scheme",
            })

    if product.affiliate_url and not is_safe_http_url(product.affiliate_url):
        errors.append({
            "field": "affiliate_url",
            "message": "Invalid affiliate URL format or contains unsafe schemes",
        })

    if len(product.affiliate_links) > MAX_AFFILIATE_LINKS:
        errors.append({
            "field": "affiliate_links",
            "message": f"Maximum {MAX_AFFILIATE_LINKS} affiliate links allowed",
        })
    for index, link in enumerate(product.affiliate_links):
        prefix = f"affiliate_links.{index}"
        if not is_safe_http_url(link.url):
            errors.append({
                "field": f"{prefix}.url",
                "message": "Invalid affiliate URL format or contains unsafe schemes",
            })
        _check_text(errors, f"{prefix}.network", link.network, NETWORK_MAX_LENGTH, required=True)
        _check_text(errors, f"{prefix}.label", link.label, LINK_LABEL_MAX_LENGTH)
        if link.price is None:
            errors.append({"field": f"{prefix}.price", "message": "Price is required for this affiliate link"})
        else:
            _check_price(errors, f"{prefix}.price", link.price)

    if len(product.categories) > MAX_CATEGORIES:
        errors.append({
            "field": "categories",
            "message": f"Maximum {MAX_CATEGORIES} categories allowed",
        })
    for index, name in enumerate(product.categories):
        _check_text(errors, f"categories.{index}", name, CATEGORY_NAME_MAX_LENGTH)

    if len(product.tags) > MAX_TAGS:
        errors.append({"field": "tags", "message": f"Maximum {MAX_TAGS} tags allowed"})
    for index, tag in enumerate(product.tags):
        _check_text(errors, f"tags.{index}", tag, TAG_MAX_LENGTH)

    _check_price(errors, "price", product.price)
    if product.clicks < 0:
        errors.append({"field": "clicks", "message": "Clicks cannot be negative"})
    if product.conversions < 0:
        errors.append({"field": "conversions", "message": "Conversions cannot be negative"})

    if errors:
        raise DomainValidationError(
            "Product validation failed",
            field=errors[0]["field"],
            details=errors,
        )


def _migrate_legacy_link(product: Product) -> list[AffiliateLink]:
    if product.affiliate_links or not product.affiliate_url:
        return list(product.affiliate_links)
    return [
        AffiliateLink(
            url=product.affiliate_url,
            network=LEGACY_LINK_NETWORK,
            price=product.price or Decimal("0"),
            label=LEGACY_LINK_LABEL,
            is_primary=True,
        )
    ]


def _derive_price(links: list[AffiliateLink], current: Decimal) -> Decimal:
    prices = [link.price for link in links if link.price is not None and link.price >= 0]
    if not prices:
        return current
    return min(prices)


def _resolve_primary(links: list[AffiliateLink]) -> list[AffiliateLink]:
    # First flagged link wins; with none flagged the first link is promoted.
    primary_index = next(
        (index for index, link in enumerate(links) if link.is_primary),
        0,
    )
    return [
        link if link.is_primary == (index == primary_index)
        else replace(link, is_primary=index == primary_index)
        for index, link in enumerate(links)
    ]


def derive_product_invariants(
    product: Product,
    previous_title: Optional[str] = None,
) -> Product:
    """
    Apply every derived invariant to a candidate product.

    Steps, in order: legacy ``affiliate_url`` migration, the at-least-one-link
    check, price = cheapest link, single primary link, base slug (only when
    the product has none yet or its title changed) and CTR.

    Args:
        product: Validated candidate product.
        previous_title: Title stored before this edit, None for new products.

    Returns:
        A new Product with all derived fields set.

    Raises:
        MissingAffiliateLinkError: If no affiliate link remains after migration.
    """
    links = _migrate_legacy_link(product)
    if not links:
        raise MissingAffiliateLinkError()

    links = _resolve_primary(links)

    slug = product.slug
    if not slug or (previous_title is not None and previous_title != product.title):
        slug = slugify_title(product.title) or FALLBACK_SLUG

    return replace(
        product,
        affiliate_links=links,
        price=_derive_price(links, product.price),
        slug=slug,
        ctr=calculate_ctr(product.clicks, product.conversions),
    )
