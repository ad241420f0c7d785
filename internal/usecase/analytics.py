"""
Analytics Service.

Aggregates the engagement counters into the admin dashboard views.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from internal.domain.errors import ProductNotFoundError
from internal.domain.product import calculate_ctr
from internal.domain.value_objects import ProductStatus, parse_identifier
from internal.infrastructure.postgres.analytics_repository import (
    PostgresAnalyticsRepository,
)
from internal.infrastructure.postgres.repository import PostgresProductRepository
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


DEFAULT_PERIOD_DAYS = 30
TOP_PRODUCTS_LIMIT = 10
TOP_CATEGORIES_LIMIT = 10
TREND_MONTHS = 6


def _rate(clicks: int, conversions: int) -> float:
    return round(calculate_ctr(clicks, conversions), 2)


class AnalyticsService:
    """Read-only dashboard aggregates over product counters."""

    def __init__(
        self,
        repository: PostgresAnalyticsRepository,
        product_repository: PostgresProductRepository,
    ) -> None:
        """
        Initialize the service.

        Args:
            repository: Aggregate query repository.
            product_repository: Product repository for single-product views.
        """
        self._repository = repository
        self._product_repository = product_repository

    async def dashboard(self, days: int = DEFAULT_PERIOD_DAYS, now: Optional[datetime] = None) -> dict:
        """
        Build the admin dashboard.

        Args:
            days: Window, in days, for counting recently added products.
            now: Current time, defaults to utcnow.

        Returns:
            Dict with overview, top_products, products_by_network,
            products_by_category, monthly_trends and period.
        """
        days = days if days and days > 0 else DEFAULT_PERIOD_DAYS
        end = now or datetime.utcnow()
        start = end - timedelta(days=days)

        overview = await self._repository.get_overview(since=start)
        top_products = await self._repository.get_top_products(limit=TOP_PRODUCTS_LIMIT)
        networks = await self._repository.get_network_breakdown()
        categories = await self._repository.get_category_breakdown(limit=TOP_CATEGORIES_LIMIT)
        trends = await self._repository.get_monthly_trends(
            since=end - timedelta(days=TREND_MONTHS * 30),
        )

        total_clicks = overview["total_clicks"]
        total_conversions = overview["total_conversions"]
        revenue = Decimal(overview["estimated_revenue"]).quantize(Decimal("0.01"))

        logger.debug("Dashboard built", days=days, total_products=overview["total_products"])

        return {
            "overview": {
                "total_products": overview["total_products"],
                "active_products": overview["active_products"],
                "top_selling_products": overview["top_selling_products"],
                "recent_products": overview["recent_products"],
                "total_clicks": total_clicks,
                "total_conversions": total_conversions,
                "overall_ctr": _rate(total_clicks, total_conversions),
                "estimated_revenue": float(revenue),
            },
            "top_products": [
                {
                    "id": str(row["id"]),
                    "title": row["title"],
                    "slug": row["slug"],
                    "clicks": row["clicks"],
                    "conversions": row["conversions"],
                    "price": float(row["price"]),
                    "ctr": round(float(row["ctr"]), 2),
                }
                for row in top_products
            ],
            "products_by_network": [
                {
                    "network": row["network"],
                    "count": row["count"],
                    "total_clicks": row["total_clicks"] or 0,
                    "total_conversions": row["total_conversions"] or 0,
                }
                for row in networks
            ],
            "products_by_category": [
                {
                    "category": row["category"],
                    "count": row["count"],
                    "total_clicks": row["total_clicks"] or 0,
                    "total_conversions": row["total_conversions"] or 0,
                }
                for row in categories
            ],
            "monthly_trends": [
                {
                    "month": row["month"],
                    "products_added": row["products_added"],
                    "clicks": row["clicks"] or 0,
                    "conversions": row["conversions"] or 0,
                    "ctr": _rate(row["clicks"] or 0, row["conversions"] or 0),
                }
                for row in trends
            ],
            "period": {
                "days": days,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
            },
        }

    async def product_performance(self, product_id: str) -> dict:
        """
        Get counters and derived metrics for one product, any status.

        Raises:
            InvalidIdentifierError: If the ID is malformed.
            ProductNotFoundError: If no product has this ID.
        """
        parsed_id = parse_identifier(product_id)
        product = await self._product_repository.get_by_id(parsed_id)
        if product is None:
            raise ProductNotFoundError(str(parsed_id))

        primary = product.primary_link
        return {
            "product_id": str(product.id),
            "title": product.title,
            "slug": product.slug,
            "status": product.status.value,
            "top_selling": product.top_selling,
            "network": primary.network if primary else None,
            "price": float(product.price),
            "clicks": product.clicks,
            "conversions": product.conversions,
            "conversion_rate": float(product.conversion_rate),
            "estimated_revenue": float(product.estimated_revenue),
            "created_at": product.created_at.isoformat(),
            "updated_at": product.updated_at.isoformat(),
        }

    async def status_breakdown(self) -> dict[str, int]:
        """Product counts per status, zero-filled for unused statuses."""
        counts = await self._repository.get_status_counts()
        return {status.value: counts.get(status.value, 0) for status in ProductStatus}
