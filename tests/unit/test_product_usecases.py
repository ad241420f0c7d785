"""
Unit tests for product create, update and delete use cases.
"""
from dataclasses import replace
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from internal.domain.errors import (
    DomainValidationError,
    InvalidIdentifierError,
    InvalidIdsError,
    MissingAffiliateLinkError,
    ProductNotFoundError,
)
from internal.domain.value_objects import AffiliateLink
from internal.usecase.create_product import (
    CreateProductInput,
    CreateProductUseCase,
    ensure_unique_slug,
)
from internal.usecase.update_product import (
    BulkDeleteProductsUseCase,
    DeleteProductUseCase,
    UpdateProductInput,
    UpdateProductUseCase,
)


class TestEnsureUniqueSlug:
    """Tests for slug collision handling."""

    @pytest.mark.asyncio
    async def test_free_slug_unchanged(self, mock_repository):
        slug = await ensure_unique_slug(mock_repository, "usb-c-hub")

        assert slug == "usb-c-hub"

    @pytest.mark.asyncio
    async def test_taken_slug_suffixed(self, mock_repository):
        mock_repository.slug_exists = AsyncMock(side_effect=[True, False])

        slug = await ensure_unique_slug(mock_repository, "usb-c-hub")

        assert slug.startswith("usb-c-hub-")
        assert slug != "usb-c-hub"

    @pytest.mark.asyncio
    async def test_exclude_id_forwarded(self, mock_repository):
        product_id = uuid4()

        await ensure_unique_slug(mock_repository, "usb-c-hub", exclude_id=product_id)

        mock_repository.slug_exists.assert_awaited_once_with("usb-c-hub", product_id)


class TestCreateProductUseCase:
    """Tests for CreateProductUseCase."""

    @pytest.fixture
    def use_case(self, mock_repository):
        return CreateProductUseCase(repository=mock_repository)

    @pytest.mark.asyncio
    async def test_price_and_primary_derived(self, use_case, product_data):
        result = await use_case.execute(CreateProductInput(**product_data))

        product = result.product
        assert product.price == Decimal("24.99")
        assert [link.is_primary for link in product.affiliate_links] == [True, False]
        assert product.slug == "wireless-mouse-pro"
        assert product.clicks == 0
        assert product.ctr == 0

    @pytest.mark.asyncio
    async def test_second_product_with_same_title_gets_suffix(
        self, use_case, mock_repository, product_data
    ):
        product_data["title"] = "USB-C Hub"

        first = await use_case.execute(CreateProductInput(**product_data))
        mock_repository.slug_exists = AsyncMock(side_effect=[True, False])
        second = await use_case.execute(CreateProductInput(**product_data))

        assert first.product.slug == "usb-c-hub"
        assert second.product.slug.startswith("usb-c-hub-")
        assert second.product.slug != first.product.slug

    @pytest.mark.asyncio
    async def test_legacy_affiliate_url_accepted(self, use_case, product_data):
        product_data["affiliate_links"] = []
        product_data["affiliate_url"] = "https://legacy.example/item"
        product_data["price"] = Decimal("12.50")

        result = await use_case.execute(CreateProductInput(**product_data))

        assert result.product.affiliate_links[0].network == "Unknown"
        assert result.product.price == Decimal("12.50")

    @pytest.mark.asyncio
    async def test_no_links_nothing_stored(self, use_case, mock_repository, product_data):
        product_data["affiliate_links"] = []

        with pytest.raises(MissingAffiliateLinkError):
            await use_case.execute(CreateProductInput(**product_data))

        mock_repository.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_payload_nothing_stored(self, use_case, mock_repository, product_data):
        product_data["images"] = []

        with pytest.raises(DomainValidationError):
            await use_case.execute(CreateProductInput(**product_data))

        mock_repository.slug_exists.assert_not_called()
        mock_repository.create.assert_not_called()


class TestUpdateProductUseCase:
    """Tests for UpdateProductUseCase."""

    @pytest.fixture
    def use_case(self, mock_repository):
        return UpdateProductUseCase(repository=mock_repository)

    @pytest.mark.asyncio
    async def test_malformed_id_rejected_before_lookup(self, use_case, mock_repository):
        with pytest.raises(InvalidIdentifierError):
            await use_case.execute(UpdateProductInput("not-an-id", {"title": "X"}))

        mock_repository.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_product(self, use_case, mock_repository):
        mock_repository.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(ProductNotFoundError):
            await use_case.execute(UpdateProductInput(str(uuid4()), {"title": "X"}))

    @pytest.mark.asyncio
    async def test_save_without_title_change_keeps_slug(
        self, use_case, mock_repository, sample_product
    ):
        stored = replace(sample_product, slug="wireless-mouse-pro-1700000000000")
        mock_repository.get_by_id = AsyncMock(return_value=stored)

        result = await use_case.execute(
            UpdateProductInput(str(stored.id), {"tags": ["gaming"]})
        )

        assert result.product.slug == "wireless-mouse-pro-1700000000000"
        assert result.product.tags == ["gaming"]
        mock_repository.slug_exists.assert_not_called()

    @pytest.mark.asyncio
    async def test_title_change_rederives_unique_slug(
        self, use_case, mock_repository, sample_product
    ):
        mock_repository.get_by_id = AsyncMock(return_value=sample_product)

        result = await use_case.execute(
            UpdateProductInput(str(sample_product.id), {"title": "Wireless Mouse Max"})
        )

        assert result.product.slug == "wireless-mouse-max"
        mock_repository.slug_exists.assert_awaited_once_with(
            "wireless-mouse-max", sample_product.id
        )

    @pytest.mark.asyncio
    async def test_new_links_reprice_product(self, use_case, mock_repository, sample_product):
        mock_repository.get_by_id = AsyncMock(return_value=sample_product)
        links = [
            AffiliateLink(url="https://a.example/1", network="A", price=Decimal("40")),
            AffiliateLink(
                url="https://b.example/1", network="B", price=Decimal("35"), is_primary=True
            ),
        ]

        result = await use_case.execute(
            UpdateProductInput(str(sample_product.id), {"affiliate_links": links})
        )

        assert result.product.price == Decimal("35")
        assert result.product.primary_link.network == "B"

    @pytest.mark.asyncio
    async def test_counters_not_editable(self, use_case, mock_repository, sample_product):
        mock_repository.get_by_id = AsyncMock(return_value=replace(sample_product, clicks=7))

        result = await use_case.execute(
            UpdateProductInput(str(sample_product.id), {"clicks": 1000, "slug": "hijack"})
        )

        assert result.product.clicks == 7
        assert result.product.slug == sample_product.slug


class TestDeleteProductUseCase:
    """Tests for DeleteProductUseCase."""

    @pytest.mark.asyncio
    async def test_delete(self, mock_repository):
        mock_repository.delete = AsyncMock(return_value=True)
        product_id = uuid4()

        await DeleteProductUseCase(mock_repository).execute(str(product_id))

        mock_repository.delete.assert_awaited_once_with(product_id)

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_repository):
        mock_repository.delete = AsyncMock(return_value=False)

        with pytest.raises(ProductNotFoundError):
            await DeleteProductUseCase(mock_repository).execute(str(uuid4()))


class TestBulkDeleteProductsUseCase:
    """Tests for BulkDeleteProductsUseCase."""

    @pytest.mark.asyncio
    async def test_deletes_listed_products(self, mock_repository):
        mock_repository.delete_many = AsyncMock(return_value=2)
        first, second = uuid4(), uuid4()

        deleted = await BulkDeleteProductsUseCase(mock_repository).execute(
            [str(first), str(second), str(first)]
        )

        assert deleted == 2
        mock_repository.delete_many.assert_awaited_once_with([first, second])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ids", [None, [], "not-a-list", {"id": "x"}])
    async def test_missing_or_empty_list_rejected(self, mock_repository, ids):
        with pytest.raises(InvalidIdsError) as exc_info:
            await BulkDeleteProductsUseCase(mock_repository).execute(ids)

        assert exc_info.value.code == "INVALID_IDS"
        mock_repository.delete_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_one_malformed_id_deletes_nothing(self, mock_repository):
        with pytest.raises(InvalidIdentifierError):
            await BulkDeleteProductsUseCase(mock_repository).execute([str(uuid4()), "nope"])

        mock_repository.delete_many.assert_not_called()
