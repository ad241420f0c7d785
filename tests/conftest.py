"""
Pytest configuration and fixtures.
"""
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from internal.domain.admin import Admin
from internal.domain.product import Product
from internal.domain.value_objects import AffiliateLink, ProductStatus
from internal.transport.http.dependencies import reset_dependencies
from pkg.security import hash_password


TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def clean_dependencies():
    """Every test starts with an empty dependency container."""
    reset_dependencies()
    yield
    reset_dependencies()


@pytest.fixture
def mock_repository():
    """Product repository double with async methods."""
    repository = AsyncMock()
    repository.slug_exists = AsyncMock(return_value=False)
    repository.create = AsyncMock(side_effect=lambda product: product)
    repository.update = AsyncMock(side_effect=lambda product: product)
    return repository


@pytest.fixture
def amazon_link():
    return AffiliateLink(
        url="https://amazon.example/mouse",
        network="Amazon",
        price=Decimal("29.99"),
    )


@pytest.fixture
def ebay_link():
    return AffiliateLink(
        url="https://ebay.example/mouse",
        network="eBay",
        price=Decimal("24.99"),
    )


@pytest.fixture
def product_data(amazon_link, ebay_link):
    """Keyword arguments for a valid product."""
    return {
        "title": "Wireless Mouse Pro",
        "short_description": "Ergonomic wireless mouse",
        "description": "A precise, ergonomic wireless mouse.",
        "images": ["https://cdn.example/mouse.jpg"],
        "affiliate_links": [amazon_link, ebay_link],
        "categories": ["Electronics"],
        "tags": ["mouse"],
    }


@pytest.fixture
def sample_product(amazon_link, ebay_link):
    """Stored, active product with consistent derived fields."""
    return Product(
        title="Wireless Mouse Pro",
        slug="wireless-mouse-pro",
        short_description="Ergonomic wireless mouse",
        description="A precise, ergonomic wireless mouse.",
        images=["https://cdn.example/mouse.jpg"],
        affiliate_links=[
            AffiliateLink(
                url=amazon_link.url,
                network=amazon_link.network,
                price=amazon_link.price,
                is_primary=True,
            ),
            ebay_link,
        ],
        price=Decimal("24.99"),
        categories=["Electronics"],
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture
def admin_account():
    """Active admin whose password is TEST_PASSWORD."""
    return Admin(
        email="admin@example.com",
        password_hash=hash_password(TEST_PASSWORD, iterations=1000),
        first_name="Ada",
        last_name="Admin",
    )
