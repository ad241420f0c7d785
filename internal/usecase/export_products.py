"""
Export Products Use Case.

Dumps the whole catalog, whatever the status, for the back office as CSV or
JSON.
"""
import csv
import io
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from internal.domain.product import Product
from pkg.logger.logger import get_logger


logger = get_logger(__name__)


DESCRIPTION_PREVIEW_LENGTH = 100

CSV_HEADERS = [
    "Title",
    "Description",
    "Categories",
    "Price",
    "Network",
    "Clicks",
    "Conversions",
    "Status",
    "Top Selling",
    "Created",
]


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"


class ExportRepository(Protocol):
    """Protocol for reading every product."""

    async def list_all(self) -> list[Product]:
        """Every product, newest first."""
        ...


@dataclass
class ExportProductsOutput:
    """Output for ExportProductsUseCase."""

    products: list[Product]
    exported_at: datetime

    def filename(self, export_format: ExportFormat) -> str:
        return f"products-{self.exported_at.date().isoformat()}.{export_format.value}"

    def to_csv(self) -> str:
        """
        Render the products as CSV, one row per product.

        Returns:
            CSV document with a header row.
        """
        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)

        for product in self.products:
            primary = product.primary_link
            writer.writerow([
                product.title,
                (product.description or "")[:DESCRIPTION_PREVIEW_LENGTH],
                "; ".join(product.categories),
                f"{product.price:.2f}",
                primary.network if primary else "",
                product.clicks,
                product.conversions,
                product.status.value,
                "Yes" if product.top_selling else "No",
                product.created_at.strftime("%Y-%m-%d"),
            ])

        return output.getvalue()

    def to_dicts(self) -> list[dict]:
        return [product.to_dict() for product in self.products]


class ExportProductsUseCase:
    """Use case for exporting the full catalog."""

    def __init__(self, repository: ExportRepository) -> None:
        """
        Initialize the use case.

        Args:
            repository: Product repository.
        """
        self._repository = repository

    async def execute(self, now: Optional[datetime] = None) -> ExportProductsOutput:
        """
        Load every product for export.

        Args:
            now: Export timestamp, defaults to the current UTC time.

        Returns:
            ExportProductsOutput ready to render.
        """
        products = await self._repository.list_all()

        logger.info("Products exported", count=len(products))

        return ExportProductsOutput(
            products=products,
            exported_at=now or datetime.utcnow(),
        )
