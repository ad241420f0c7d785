"""
Unit tests for click and conversion tracking.
"""
import asyncio
from dataclasses import replace
from typing import Optional
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from internal.domain.errors import (
    InvalidIdentifierError,
    ProductNotActiveError,
    ProductNotFoundError,
)
from internal.domain.product import Product, calculate_ctr
from internal.domain.value_objects import ProductStatus
from internal.usecase.track_engagement import TrackClickUseCase, TrackConversionUseCase


class InMemoryTrackingRepository:
    """Repository double whose increments are atomic under concurrency."""

    def __init__(self, *products: Product) -> None:
        self._products = {product.id: product for product in products}
        self._lock = asyncio.Lock()

    async def get_by_id(self, product_id: UUID) -> Optional[Product]:
        await asyncio.sleep(0)
        return self._products.get(product_id)

    async def _increment(self, product_id: UUID, field: str, active_only: bool) -> Optional[Product]:
        async with self._lock:
            product = self._products.get(product_id)
            if product is None or (active_only and not product.is_active):
                return None
            await asyncio.sleep(0)
            clicks = product.clicks + (field == "clicks")
            conversions = product.conversions + (field == "conversions")
            product = replace(
                product,
                clicks=clicks,
                conversions=conversions,
                ctr=calculate_ctr(clicks, conversions),
            )
            self._products[product_id] = product
            return product

    async def increment_clicks(self, product_id: UUID) -> Optional[Product]:
        return await self._increment(product_id, "clicks", active_only=True)

    async def increment_conversions(self, product_id: UUID) -> Optional[Product]:
        return await self._increment(product_id, "conversions", active_only=False)


class TestTrackClickUseCase:
    """Tests for TrackClickUseCase."""

    @pytest.mark.asyncio
    async def test_click_returns_count_and_primary_url(self, sample_product):
        use_case = TrackClickUseCase(InMemoryTrackingRepository(sample_product))

        result = await use_case.execute(str(sample_product.id), referrer="https://blog.example")

        assert result.clicks == 1
        assert result.redirect_url == "https://amazon.example/mouse"
        assert result.to_dict()["product_id"] == str(sample_product.id)

    @pytest.mark.asyncio
    async def test_draft_product_rejected_without_increment(self, sample_product, mock_repository):
        draft = replace(sample_product, status=ProductStatus.DRAFT)
        mock_repository.get_by_id = AsyncMock(return_value=draft)

        with pytest.raises(ProductNotActiveError) as exc_info:
            await TrackClickUseCase(mock_repository).execute(str(draft.id))

        assert exc_info.value.status == "draft"
        mock_repository.increment_clicks.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_product(self, mock_repository):
        mock_repository.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(ProductNotFoundError):
            await TrackClickUseCase(mock_repository).execute(str(uuid4()))

    @pytest.mark.asyncio
    async def test_malformed_id_never_reaches_repository(self, mock_repository):
        with pytest.raises(InvalidIdentifierError):
            await TrackClickUseCase(mock_repository).execute("not-an-id")

        mock_repository.get_by_id.assert_not_called()
        mock_repository.increment_clicks.assert_not_called()

    @pytest.mark.asyncio
    async def test_deactivated_between_lookup_and_increment(self, sample_product, mock_repository):
        inactive = replace(sample_product, status=ProductStatus.INACTIVE)
        mock_repository.get_by_id = AsyncMock(side_effect=[sample_product, inactive])
        mock_repository.increment_clicks = AsyncMock(return_value=None)

        with pytest.raises(ProductNotActiveError):
            await TrackClickUseCase(mock_repository).execute(str(sample_product.id))

    @pytest.mark.asyncio
    async def test_concurrent_clicks_all_counted(self, sample_product):
        repository = InMemoryTrackingRepository(sample_product)
        use_case = TrackClickUseCase(repository)

        await asyncio.gather(*(use_case.execute(str(sample_product.id)) for _ in range(50)))

        stored = await repository.get_by_id(sample_product.id)
        assert stored.clicks == 50


class TestTrackConversionUseCase:
    """Tests for TrackConversionUseCase."""

    @pytest.mark.asyncio
    async def test_conversion_updates_rate(self, sample_product):
        product = replace(sample_product, clicks=4)
        use_case = TrackConversionUseCase(InMemoryTrackingRepository(product))

        result = await use_case.execute(str(product.id))

        assert result.conversions == 1
        assert result.conversion_rate == "25.00"

    @pytest.mark.asyncio
    async def test_malformed_id_never_reaches_repository(self, mock_repository):
        with pytest.raises(InvalidIdentifierError):
            await TrackConversionUseCase(mock_repository).execute("12345")

        mock_repository.get_by_id.assert_not_called()
        mock_repository.increment_conversions.assert_not_called()

    @pytest.mark.asyncio
    async def test_conversion_on_inactive_product_counted(self, sample_product):
        inactive = replace(sample_product, status=ProductStatus.INACTIVE)
        use_case = TrackConversionUseCase(InMemoryTrackingRepository(inactive))

        result = await use_case.execute(str(inactive.id))

        assert result.conversions == 1

    @pytest.mark.asyncio
    async def test_concurrent_conversions_all_counted(self, sample_product):
        repository = InMemoryTrackingRepository(sample_product)
        use_case = TrackConversionUseCase(repository)

        await asyncio.gather(*(use_case.execute(str(sample_product.id)) for _ in range(25)))

        stored = await repository.get_by_id(sample_product.id)
        assert stored.conversions == 25
        assert stored.ctr == 0
