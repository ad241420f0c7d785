"""
Click and Conversion Tracking Use Cases.

Counters are incremented by a single atomic statement in the repository;
nothing here reads a counter, adds one and writes it back.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol
from uuid import UUID

from internal.domain.errors import ProductNotActiveError, ProductNotFoundError
from internal.domain.product import Product
from internal.domain.value_objects import parse_identifier
from internal.infrastructure.metrics import (
    affiliate_clicks_total,
    affiliate_conversions_total,
)
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


class TrackingRepository(Protocol):
    """Protocol for the repository operations tracking needs."""

    async def get_by_id(self, product_id: UUID) -> Optional[Product]:
        """Get product by ID."""
        ...

    async def increment_clicks(self, product_id: UUID) -> Optional[Product]:
        """Atomically add one click to an active product."""
        ...

    async def increment_conversions(self, product_id: UUID) -> Optional[Product]:
        """Atomically add one conversion."""
        ...


@dataclass
class TrackClickOutput:
    """Output for TrackClickUseCase."""

    product_id: UUID
    title: str
    clicks: int
    redirect_url: Optional[str]

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "title": self.title,
            "clicks": self.clicks,
            "redirect_url": self.redirect_url,
        }


@dataclass
class TrackConversionOutput:
    """Output for TrackConversionUseCase."""

    product_id: UUID
    conversions: int
    conversion_rate: str

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "conversions": self.conversions,
            "conversion_rate": self.conversion_rate,
        }


class TrackClickUseCase:
    """
    Use case for recording an outbound click.

    Referrer and user agent are logged only; they never gate the increment.
    """

    def __init__(self, repository: TrackingRepository) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository with atomic counter updates.
        """
        self._repository = repository

    async def execute(
        self,
        product_id: str,
        referrer: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> TrackClickOutput:
        """
        Record a click.

        Args:
            product_id: ID of the clicked product.
            referrer: Referring page, for logging.
            user_agent: Client user agent, for logging.

        Returns:
            Click count after the increment and the URL to redirect to.

        Raises:
            InvalidIdentifierError: If the ID is malformed.
            ProductNotFoundError: If the product does not exist.
            ProductNotActiveError: If the product is not active.
        """
        parsed_id = parse_identifier(product_id)

        product = await self._repository.get_by_id(parsed_id)
        if product is None:
            raise ProductNotFoundError(str(parsed_id))
        if not product.is_active:
            raise ProductNotActiveError(str(parsed_id), product.status.value)

        updated = await self._repository.increment_clicks(parsed_id)
        if updated is None:
            # Deleted or deactivated between the lookup and the increment.
            current = await self._repository.get_by_id(parsed_id)
            if current is None:
                raise ProductNotFoundError(str(parsed_id))
            raise ProductNotActiveError(str(parsed_id), current.status.value)

        affiliate_clicks_total.inc()

        logger.info(
            "Click tracked",
            product_id=str(parsed_id),
            product_title=updated.title,
            clicks=updated.clicks,
            referrer=referrer,
            user_agent=user_agent,
        )

        return TrackClickOutput(
            product_id=updated.id,
            title=updated.title,
            clicks=updated.clicks,
            redirect_url=updated.redirect_url,
        )


class TrackConversionUseCase:
    """
    Use case for recording a conversion.

    Conversions are an aggregate counter with no link to any earlier click.
    """

    def __init__(self, repository: TrackingRepository) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository with atomic counter updates.
        """
        self._repository = repository

    async def execute(
        self,
        product_id: str,
        conversion_value: Optional[Decimal] = None,
    ) -> TrackConversionOutput:
        """
        Record a conversion.

        Args:
            product_id: ID of the converted product.
            conversion_value: Reported order value, for logging.

        Returns:
            Conversion count and conversion rate after the increment.

        Raises:
            InvalidIdentifierError: If the ID is malformed; raised before
                the repository is touched.
            ProductNotFoundError: If the product does not exist.
        """
        parsed_id = parse_identifier(product_id)

        product = await self._repository.get_by_id(parsed_id)
        if product is None:
            raise ProductNotFoundError(str(parsed_id))

        updated = await self._repository.increment_conversions(parsed_id)
        if updated is None:
            raise ProductNotFoundError(str(parsed_id))

        affiliate_conversions_total.inc()

        logger.info(
            "Conversion tracked",
            product_id=str(parsed_id),
            conversions=updated.conversions,
            conversion_value=str(conversion_value) if conversion_value is not None else None,
        )

        return TrackConversionOutput(
            product_id=updated.id,
            conversions=updated.conversions,
            conversion_rate=updated.conversion_rate,
        )
