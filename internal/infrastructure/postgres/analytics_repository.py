"""
PostgreSQL Analytics Repository.

Read-only aggregate queries over products backing the admin dashboard.
"""

from datetime import datetime
from decimal import Decimal

from asyncpg import Pool

from internal.domain.product import COMMISSION_RATE


class PostgresAnalyticsRepository:
    """Aggregate queries for the admin dashboard."""

    def __init__(self, pool: Pool) -> None:
        """
        Initialize the repository.

        Args:
            pool: asyncpg connection pool.
        """
        self._pool = pool

    async def get_overview(self, since: datetime) -> dict:
        """
        Get catalog-wide totals.

        Args:
            since: Start of the window for counting recently added products.

        Returns:
            Dict with total, active, top_selling, recent product counts,
            total clicks/conversions and estimated revenue.
        """
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT
                    COUNT(*) AS total_products,
                    COUNT(*) FILTER (WHERE status = 'active') AS active_products,
                    COUNT(*) FILTER (
                        WHERE top_selling AND status = 'active'
                    ) AS top_selling_products,
                    COUNT(*) FILTER (WHERE created_at >= $1) AS recent_products,
                    COALESCE(SUM(clicks), 0) AS total_clicks,
                    COALESCE(SUM(conversions), 0) AS total_conversions,
                    COALESCE(
                        SUM(conversions * price * $2) FILTER (WHERE status = 'active'),
                        0
                    ) AS estimated_revenue
                FROM products
                """,
                since,
                COMMISSION_RATE,
            )

            result = dict(row)
            result["estimated_revenue"] = Decimal(result["estimated_revenue"])
            return result

    async def get_top_products(self, limit: int = 10) -> list[dict]:
        """
        Get active products with the most clicks, then conversions.

        Args:
            limit: Maximum number of products.

        Returns:
            List of dicts with id, title, slug, clicks, conversions, price, ctr.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, title, slug, clicks, conversions, price, ctr
                FROM products
                WHERE status = 'active'
                ORDER BY clicks DESC, conversions DESC
                LIMIT $1
                """,
                limit,
            )
            return [dict(row) for row in rows]

    async def get_network_breakdown(self) -> list[dict]:
        """
        Roll up active products by the network of their primary link.

        Returns:
            List of dicts with network, count, total_clicks, total_conversions.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT
                    COALESCE(primary_link->>'network', 'Unknown') AS network,
                    COUNT(*) AS count,
                    SUM(clicks) AS total_clicks,
                    SUM(conversions) AS total_conversions
                FROM (
                    SELECT p.clicks, p.conversions,
                        COALESCE(
                            (SELECT link FROM jsonb_array_elements(p.affiliate_links) AS link
                             WHERE (link->>'is_primary')::boolean LIMIT 1),
                            p.affiliate_links->0
                        ) AS primary_link
                    FROM products p
                    WHERE p.status = 'active'
                ) AS active_products
                GROUP BY 1
                ORDER BY count DESC, network
                """
            )
            return [dict(row) for row in rows]

    async def get_category_breakdown(self, limit: int = 10) -> list[dict]:
        """
        Roll up active products by category name.

        Args:
            limit: Maximum number of categories.

        Returns:
            List of dicts with category, count, total_clicks, total_conversions.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT
                    category,
                    COUNT(*) AS count,
                    SUM(clicks) AS total_clicks,
                    SUM(conversions) AS total_conversions
                FROM products, unnest(categories) AS category
                WHERE status = 'active'
                GROUP BY category
                ORDER BY count DESC, category
                LIMIT $1
                """,
                limit,
            )
            return [dict(row) for row in rows]

    async def get_monthly_trends(self, since: datetime) -> list[dict]:
        """
        Group products created since a date by calendar month.

        Args:
            since: Earliest creation time to include.

        Returns:
            List of dicts with month ("YYYY-MM"), products_added, clicks and
            conversions, oldest month first.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT
                    to_char(date_trunc('month', created_at), 'YYYY-MM') AS month,
                    COUNT(*) AS products_added,
                    SUM(clicks) AS clicks,
                    SUM(conversions) AS conversions
                FROM products
                WHERE created_at >= $1
                GROUP BY 1
                ORDER BY 1
                """,
                since,
            )
            return [dict(row) for row in rows]

    async def get_status_counts(self) -> dict[str, int]:
        """
        Count products per status.

        Returns:
            Mapping of status to count.
        """
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT status, COUNT(*) AS count
                FROM products
                GROUP BY status
                """
            )
            return {row["status"]: row["count"] for row in rows}
