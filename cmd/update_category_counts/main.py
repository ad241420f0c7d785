"""
Category Count Reconciliation Job.

Recounts the products referencing each category and stores the counts.
Safe to run at any time, e.g. from cron.
"""
import asyncio

from dotenv import load_dotenv

from config.settings import get_settings
from internal.infrastructure.postgres import (
    PostgresCategoryRepository,
    PostgresProductRepository,
    create_pool,
)
from internal.usecase.category_service import CategoryService
from pkg.logger.logger import get_logger, setup_logging


# Load environment variables
load_dotenv()

logger = get_logger("update_category_counts")


async def run() -> None:
    """Reconcile every category count."""
    settings = get_settings()
    pool = await create_pool(settings.database_url, min_size=1, max_size=2)

    try:
        service = CategoryService(
            repository=PostgresCategoryRepository(pool),
            product_repository=PostgresProductRepository(pool),
            count_active_only=settings.category_count_active_only,
        )
        categories = await service.update_all_product_counts()
        for category in categories:
            logger.info(
                "Category count",
                category_name=category.name,
                product_count=category.product_count,
            )
    finally:
        await pool.close()


def main() -> None:
    """Main entry point."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service="update-category-counts",
    )
    asyncio.run(run())


if __name__ == "__main__":
    main()
