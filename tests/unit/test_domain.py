"""
Unit tests for domain entities.
"""
import pytest
from dataclasses import replace
from decimal import Decimal
from uuid import uuid4

from internal.domain.errors import (
    DomainValidationError,
    InvalidIdentifierError,
    MissingAffiliateLinkError,
)
from internal.domain.invariants import derive_product_invariants, validate_product
from internal.domain.product import Product, calculate_ctr
from internal.domain.slug import slugify_category_name, slugify_title, with_unique_suffix
from internal.domain.value_objects import (
    AffiliateLink,
    is_safe_http_url,
    looks_like_identifier,
    parse_identifier,
)


class TestSlug:
    """Tests for slug derivation."""

    def test_hyphenated_title(self):
        assert slugify_title("USB-C Hub") == "usb-c-hub"

    def test_excluded_punctuation_removed(self):
        assert slugify_title("Mouse (Pro) v2.0!") == "mouse-pro-v20"

    def test_whitespace_runs_collapse(self):
        assert slugify_title("  Big   Red   Kettle ") == "big-red-kettle"

    def test_accents_stripped(self):
        assert slugify_title("Café Crème") == "cafe-creme"

    @pytest.mark.parametrize(
        "title, slug",
        [
            ("Salt & Pepper Mill", "salt-and-pepper-mill"),
            ("50% Off Bundle", "50percent-off-bundle"),
            ("$5 Gift Card", "dollar5-gift-card"),
            ("Price in €", "price-in-euro"),
        ],
    )
    def test_symbols_spelled_out(self, title, slug):
        assert slugify_title(title) == slug

    def test_unique_suffix_keeps_base(self):
        suffixed = with_unique_suffix("usb-c-hub")

        assert suffixed.startswith("usb-c-hub-")
        assert suffixed.rsplit("-", 1)[1].isdigit()

    def test_category_slug(self):
        assert slugify_category_name("Home & Garden") == "home-garden"


class TestIdentifiers:
    """Tests for identifier parsing."""

    def test_parse_valid_uuid_string(self):
        value = uuid4()
        assert parse_identifier(str(value)) == value

    @pytest.mark.parametrize("value", ["not-an-id", "", "123", None, 42])
    def test_parse_malformed_raises(self, value):
        with pytest.raises(InvalidIdentifierError):
            parse_identifier(value)

    def test_looks_like_identifier(self):
        assert looks_like_identifier(str(uuid4()))
        assert not looks_like_identifier("wireless-mouse-pro")


class TestUrlSafety:
    """Tests for URL checks."""

    def test_http_and_https_accepted(self):
        assert is_safe_http_url("http://example.com")
        assert is_safe_http_url("HTTPS://example.com/a")

    def test_other_schemes_rejected(self):
        assert not is_safe_http_url("ftp://example.com")
        assert not is_safe_http_url("javascript:alert(1)")
        assert not is_safe_http_url("")

    def test_embedded_script_scheme_rejected(self):
        assert not is_safe_http_url("https://example.com/?next=javascript:alert(1)")


class TestCalculateCtr:
    """Tests for click-through rate."""

    def test_zero_clicks(self):
        assert calculate_ctr(0, 0) == 0

    def test_ratio_as_percentage(self):
        assert calculate_ctr(200, 5) == pytest.approx(2.5)


class TestValidateProduct:
    """Tests for field-level validation."""

    def test_valid_product_passes(self, product_data):
        validate_product(Product(**product_data))

    def test_missing_title(self, product_data):
        product_data["title"] = ""

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "title"

    def test_all_violations_collected(self, product_data):
        product_data["title"] = "x" * 201
        product_data["images"] = ["ftp://cdn.example/a.jpg"]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        fields = {detail["field"] for detail in exc_info.value.details}
        assert {"title", "images.0"} <= fields

    def test_link_without_price_rejected(self, product_data):
        product_data["affiliate_links"] = [
            AffiliateLink(url="https://shop.example/a", network="Shop"),
        ]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "affiliate_links.0.price"

    def test_link_price_with_three_decimals_rejected(self, product_data, amazon_link):
        product_data["affiliate_links"] = [replace(amazon_link, price=Decimal("24.995"))]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "affiliate_links.0.price"
        assert "decimal places" in exc_info.value.details[0]["message"]

    def test_trailing_zero_price_accepted(self, product_data, amazon_link):
        product_data["affiliate_links"] = [replace(amazon_link, price=Decimal("24.990"))]

        validate_product(Product(**product_data))

    def test_price_beyond_column_range_rejected(self, product_data, amazon_link):
        product_data["affiliate_links"] = [
            amazon_link,
            replace(amazon_link, price=Decimal("10000000000")),
        ]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "affiliate_links.1.price"

    def test_legacy_price_precision_checked(self, product_data):
        product_data["affiliate_links"] = []
        product_data["affiliate_url"] = "https://legacy.example/item"
        product_data["price"] = Decimal("9.999")

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "price"

    def test_unsafe_link_url_rejected(self, product_data):
        product_data["affiliate_links"] = [
            AffiliateLink(url="javascript:alert(1)", network="Shop", price=Decimal("1")),
        ]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "affiliate_links.0.url"

    def test_too_many_categories(self, product_data):
        product_data["categories"] = [f"c{i}" for i in range(6)]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_product(Product(**product_data))

        assert exc_info.value.field == "categories"


class TestDeriveProductInvariants:
    """Tests for price, primary link, slug and ctr derivation."""

    def test_price_is_cheapest_link(self, product_data):
        product = derive_product_invariants(Product(**product_data))

        assert product.price == Decimal("24.99")

    def test_first_link_promoted_when_none_flagged(self, product_data):
        product = derive_product_invariants(Product(**product_data))

        flags = [link.is_primary for link in product.affiliate_links]
        assert flags == [True, False]
        assert product.primary_link.network == "Amazon"
        assert product.redirect_url == "https://amazon.example/mouse"

    def test_flagged_link_kept_primary(self, product_data, amazon_link, ebay_link):
        product_data["affiliate_links"] = [amazon_link, replace(ebay_link, is_primary=True)]

        product = derive_product_invariants(Product(**product_data))

        assert [link.is_primary for link in product.affiliate_links] == [False, True]
        assert product.price == Decimal("24.99")
        assert product.redirect_url == "https://ebay.example/mouse"

    def test_first_flagged_wins_when_several_flagged(self, product_data, amazon_link, ebay_link):
        product_data["affiliate_links"] = [
            replace(amazon_link, is_primary=True),
            replace(ebay_link, is_primary=True),
        ]

        product = derive_product_invariants(Product(**product_data))

        assert [link.is_primary for link in product.affiliate_links] == [True, False]

    def test_legacy_url_becomes_single_primary_link(self, product_data):
        product_data["affiliate_links"] = []
        product_data["affiliate_url"] = "https://legacy.example/item"
        product_data["price"] = Decimal("15.00")

        product = derive_product_invariants(Product(**product_data))

        assert len(product.affiliate_links) == 1
        link = product.affiliate_links[0]
        assert link.url == "https://legacy.example/item"
        assert link.network == "Unknown"
        assert link.label == "Buy Now"
        assert link.is_primary
        assert product.price == Decimal("15.00")

    def test_no_links_rejected(self, product_data):
        product_data["affiliate_links"] = []

        with pytest.raises(MissingAffiliateLinkError):
            derive_product_invariants(Product(**product_data))

    def test_slug_derived_for_new_product(self, product_data):
        product_data["title"] = "USB-C Hub"

        product = derive_product_invariants(Product(**product_data))

        assert product.slug == "usb-c-hub"

    def test_slug_kept_when_title_unchanged(self, sample_product):
        stored = replace(sample_product, slug="wireless-mouse-pro-1700000000000")

        product = derive_product_invariants(stored, previous_title=stored.title)

        assert product.slug == "wireless-mouse-pro-1700000000000"

    def test_slug_recomputed_when_title_changes(self, sample_product):
        edited = replace(sample_product, title="Wireless Mouse Max")

        product = derive_product_invariants(edited, previous_title=sample_product.title)

        assert product.slug == "wireless-mouse-max"

    def test_ctr_recomputed(self, sample_product):
        product = derive_product_invariants(replace(sample_product, clicks=10, conversions=1))

        assert product.ctr == pytest.approx(10.0)

    def test_ctr_and_conversion_rate_agree(self, sample_product):
        product = derive_product_invariants(replace(sample_product, clicks=200, conversions=10))

        assert product.ctr == pytest.approx(5.0)
        assert product.conversion_rate == "5.00"

    def test_derivation_is_idempotent(self, product_data):
        once = derive_product_invariants(Product(**product_data))
        twice = derive_product_invariants(once, previous_title=once.title)

        assert twice.price == once.price
        assert twice.slug == once.slug
        assert twice.affiliate_links == once.affiliate_links


class TestProductMetrics:
    """Tests for derived product metrics."""

    def test_conversion_rate_without_clicks(self, sample_product):
        assert sample_product.conversion_rate == "0"

    def test_conversion_rate_two_decimals(self, sample_product):
        product = replace(sample_product, clicks=3, conversions=1)

        assert product.conversion_rate == "33.33"

    def test_estimated_revenue(self, sample_product):
        product = replace(sample_product, price=Decimal("24.99"), conversions=4)

        assert product.estimated_revenue == Decimal("5.00")

    def test_to_dict_labels_link(self, sample_product):
        data = sample_product.to_dict()

        assert data["affiliate_links"][0]["label"] == "Buy on Amazon"
        assert data["price"] == 24.99
        assert data["status"] == "active"
