"""
Unit tests for the PostgreSQL product repository without a database.
"""
import json
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from internal.domain.value_objects import ProductStatus
from internal.infrastructure.postgres.repository import (
    PostgresProductRepository,
    ProductFilter,
    build_product_query,
)


def _fake_pool(conn):
    """Pool double whose acquire() yields ``conn``."""
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    return pool


def _row(**overrides):
    row = {
        "id": uuid4(),
        "title": "USB-C Hub",
        "slug": "usb-c-hub",
        "short_description": "Seven ports",
        "description": "A seven port hub.",
        "images": ["https://cdn.example/hub.jpg"],
        "price": Decimal("19.99"),
        "affiliate_url": None,
        "affiliate_links": json.dumps([
            {"url": "https://shop.example/hub", "network": "Shop", "price": 19.99,
             "label": None, "is_primary": True},
        ]),
        "categories": ["Electronics"],
        "tags": [],
        "top_selling": False,
        "clicks": 10,
        "conversions": 1,
        "ctr": Decimal("10.0"),
        "status": "active",
        "meta_title": None,
        "meta_description": None,
        "created_by": None,
        "updated_by": None,
        "created_at": datetime(2024, 1, 1),
        "updated_at": datetime(2024, 1, 2),
    }
    row.update(overrides)
    return row


class TestBuildProductQuery:
    """Tests for listing query construction."""

    def test_default_filter_is_active_only(self):
        query, count_query, params = build_product_query(ProductFilter())

        assert "status = $1" in query
        assert "LIMIT $2 OFFSET $3" in query
        assert "ORDER BY created_at DESC, id DESC" in query
        assert "status = $1" in count_query
        assert params == ["active"]

    def test_any_status(self):
        query, _, params = build_product_query(ProductFilter(status=None))

        assert "WHERE 1=1" in query
        assert params == []

    def test_all_filters_numbered_in_order(self):
        query, _, params = build_product_query(
            ProductFilter(
                search="hub",
                categories=["Electronics"],
                tags=["usb"],
                top_selling=True,
            )
        )

        assert "plainto_tsquery('simple', $2)" in query
        assert "categories && $3::text[]" in query
        assert "tags && $4::text[]" in query
        assert "top_selling = $5" in query
        assert "LIMIT $6 OFFSET $7" in query
        assert params == ["active", "hub", ["Electronics"], ["usb"], True]

    def test_sort_mapping(self):
        query, _, _ = build_product_query(ProductFilter(sort_by="price", sort_order="asc"))

        assert "ORDER BY price ASC, id ASC" in query

    def test_unknown_sort_column_falls_back(self):
        query, _, _ = build_product_query(ProductFilter(sort_by="1; DROP TABLE products"))

        assert "DROP TABLE" not in query
        assert "ORDER BY created_at" in query

    def test_network_and_price_range_conditions(self):
        query, count_query, params = build_product_query(
            ProductFilter(
                networks=["Amazon Associates", "Impact"],
                min_price=Decimal("10"),
                max_price=Decimal("50"),
                top_selling=False,
            )
        )

        assert "link->>'network' = ANY($2::text[])" in query
        assert "price >= $3" in query
        assert "price <= $4" in query
        assert "top_selling = $5" in query
        assert "LIMIT $6 OFFSET $7" in query
        assert "price <= $4" in count_query
        assert params == [
            "active",
            ["Amazon Associates", "Impact"],
            Decimal("10"),
            Decimal("50"),
            False,
        ]

    def test_zero_min_price_still_applied(self):
        query, _, params = build_product_query(ProductFilter(min_price=Decimal("0")))

        assert "price >= $2" in query
        assert params == ["active", Decimal("0")]

    @pytest.mark.parametrize(
        "preset, order",
        [
            ("price_low", "ORDER BY price ASC, created_at DESC, id DESC"),
            ("price_high", "ORDER BY price DESC, created_at DESC, id DESC"),
            ("name", "ORDER BY title ASC, id DESC"),
            ("latest", "ORDER BY created_at DESC, id DESC"),
            ("relevance", "ORDER BY top_selling DESC, created_at DESC, id DESC"),
        ],
    )
    def test_sort_presets(self, preset, order):
        query, _, _ = build_product_query(ProductFilter(sort_preset=preset, sort_by="clicks"))

        assert order in query

    def test_unknown_preset_uses_sort_by(self):
        query, _, _ = build_product_query(
            ProductFilter(sort_preset="rating; DROP TABLE products", sort_by="clicks")
        )

        assert "DROP TABLE" not in query
        assert "ORDER BY clicks DESC, id DESC" in query


class TestPostgresProductRepository:
    """Tests for row mapping and counter statements."""

    @pytest.mark.asyncio
    async def test_get_by_id_maps_row(self):
        row = _row()
        conn = MagicMock()
        conn.fetchrow = AsyncMock(return_value=row)
        repository = PostgresProductRepository(_fake_pool(conn))

        product = await repository.get_by_id(row["id"])

        assert product.id == row["id"]
        assert product.status == ProductStatus.ACTIVE
        assert product.ctr == 10.0
        assert product.affiliate_links[0].price == Decimal("19.99")
        assert product.primary_link.network == "Shop"

    @pytest.mark.asyncio
    async def test_increment_clicks_is_single_statement(self):
        conn = MagicMock()
        conn.fetchrow = AsyncMock(return_value=_row(clicks=11))
        repository = PostgresProductRepository(_fake_pool(conn))

        product = await repository.increment_clicks(uuid4())

        sql = conn.fetchrow.call_args.args[0]
        assert "clicks = clicks + 1" in sql
        assert "status = 'active'" in sql
        assert product.clicks == 11

    @pytest.mark.asyncio
    async def test_increment_clicks_no_match(self):
        conn = MagicMock()
        conn.fetchrow = AsyncMock(return_value=None)
        repository = PostgresProductRepository(_fake_pool(conn))

        assert await repository.increment_clicks(uuid4()) is None

    @pytest.mark.asyncio
    async def test_list_products_passes_limit_and_offset(self):
        conn = MagicMock()
        conn.fetch = AsyncMock(return_value=[_row()])
        conn.fetchval = AsyncMock(return_value=13)
        repository = PostgresProductRepository(_fake_pool(conn))

        products, total = await repository.list_products(ProductFilter(offset=12, limit=12))

        assert total == 13
        assert len(products) == 1
        assert conn.fetch.call_args.args[1:] == ("active", 12, 12)

    @pytest.mark.asyncio
    async def test_delete_reports_missing(self):
        conn = MagicMock()
        conn.execute = AsyncMock(return_value="DELETE 0")
        repository = PostgresProductRepository(_fake_pool(conn))

        assert await repository.delete(uuid4()) is False

    @pytest.mark.asyncio
    async def test_delete_many_counts_rows(self):
        conn = MagicMock()
        conn.execute = AsyncMock(return_value="DELETE 2")
        repository = PostgresProductRepository(_fake_pool(conn))
        ids = [uuid4(), uuid4(), uuid4()]

        deleted = await repository.delete_many(ids)

        assert deleted == 2
        sql, sent_ids = conn.execute.call_args.args
        assert "id = ANY($1::uuid[])" in sql
        assert sent_ids == ids

    @pytest.mark.asyncio
    async def test_list_all_ignores_status(self):
        conn = MagicMock()
        conn.fetch = AsyncMock(return_value=[_row(status="draft"), _row()])
        repository = PostgresProductRepository(_fake_pool(conn))

        products = await repository.list_all()

        assert [p.status for p in products] == [ProductStatus.DRAFT, ProductStatus.ACTIVE]
        assert "WHERE" not in conn.fetch.call_args.args[0]

    @pytest.mark.asyncio
    async def test_distinct_networks_any_status(self):
        conn = MagicMock()
        conn.fetch = AsyncMock(return_value=[{"value": "Impact"}])
        repository = PostgresProductRepository(_fake_pool(conn))

        networks = await repository.distinct_networks(active_only=False)

        assert networks == ["Impact"]
        assert conn.fetch.call_args.args[1] is False
