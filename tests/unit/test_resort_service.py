"""
Unit tests for ResortService.

Run: pytest tests/unit/test_resort_service.py -v
"""

import pytest
from datetime import timedelta

from services.reorder_reconciler import ReorderReconciler
from services.resort_service import ResortService
from models.catalog import Collection, ReorderJob
from models.resort import PlacementStage, ReorderStatus
from models.rules import (
    BehaviorRules,
    CollectionSettings,
    FeaturedEntry,
    FeaturedSettings,
    TagRule,
)
from exceptions import (
    CollectionNotFoundError,
    CollectionNotManualError,
    DataUnavailableError,
    EmptyCollectionError,
)

from tests.factories import OrderFactory, ProductFactory
from tests.fakes import NOW, FakeConfigStore


def make_service(catalog, config_store, sleep) -> ResortService:
    return ResortService(
        client=catalog,
        config_store=config_store,
        reconciler=ReorderReconciler(catalog, sleep=sleep),
    )


class TestResortServiceBuildContext:
    """Tests for ResortService.build_context()"""

    @pytest.mark.asyncio
    async def test_reads_sales_for_metric_sort(self, fake_catalog, recording_sleep):
        # Arrange
        fake_catalog.products = ProductFactory.create_batch(2)
        fake_catalog.orders = [
            OrderFactory.create(NOW - timedelta(days=1), [("p2", 3, "10")]),
        ]
        store = FakeConfigStore(
            collection_settings=CollectionSettings(primary_sort="units-desc", lookback_days=30)
        )
        service = make_service(fake_catalog, store, recording_sleep)

        # Act
        context = await service.build_context("1001", now=NOW)

        # Assert
        assert "list_orders" in fake_catalog.calls
        assert context.metrics["p2"].units_total == 3
        date_range, _ = fake_catalog.order_requests[0]
        assert date_range.start == NOW - timedelta(days=30)

    @pytest.mark.asyncio
    async def test_skips_sales_for_non_metric_sort(self, fake_catalog, recording_sleep):
        fake_catalog.products = ProductFactory.create_batch(2)
        store = FakeConfigStore(
            collection_settings=CollectionSettings(primary_sort="created-desc")
        )
        service = make_service(fake_catalog, store, recording_sleep)

        context = await service.build_context("1001", now=NOW)

        assert "list_orders" not in fake_catalog.calls
        assert context.metrics == {}

    @pytest.mark.asyncio
    async def test_carries_rules_into_context(self, fake_catalog, recording_sleep):
        fake_catalog.products = ProductFactory.create_batch(1)
        store = FakeConfigStore(
            featured=[FeaturedEntry(product_id="p1", position=0)],
            featured_settings=FeaturedSettings(limit_featured=0),
            tag_rules=[TagRule(tag_name="hero", position="top")],
            behavior=BehaviorRules(new_product_days=14),
        )
        service = make_service(fake_catalog, store, recording_sleep)

        context = await service.build_context("1001", now=NOW)

        assert context.feature_limit is None
        assert context.featured[0].product_id == "p1"
        assert context.tag_rules[0].tag_name == "hero"
        assert context.behavior.new_product_days == 14
        assert context.now == NOW

    @pytest.mark.asyncio
    async def test_empty_collection_raises(self, fake_catalog, fake_config_store, recording_sleep):
        service = make_service(fake_catalog, fake_config_store, recording_sleep)

        with pytest.raises(EmptyCollectionError):
            await service.build_context("1001", now=NOW)

    @pytest.mark.asyncio
    async def test_product_page_failure_raises_data_unavailable(
        self, fake_catalog, fake_config_store, recording_sleep
    ):
        fake_catalog.products = ProductFactory.create_batch(3)
        fake_catalog.fail_products_after = 2
        service = make_service(fake_catalog, fake_config_store, recording_sleep)

        with pytest.raises(DataUnavailableError) as exc_info:
            await service.build_context("1001", now=NOW)

        assert exc_info.value.details["source"] == "products"

    @pytest.mark.asyncio
    async def test_order_page_failure_aborts(self, fake_catalog, fake_config_store, recording_sleep):
        """Partial sales data is never used for ranking."""
        fake_catalog.products = ProductFactory.create_batch(2)
        fake_catalog.orders = [
            OrderFactory.create(NOW - timedelta(days=1), [("p1", 1, "10")]),
            OrderFactory.create(NOW - timedelta(days=1), [("p2", 1, "10")]),
        ]
        fake_catalog.fail_orders_after = 1
        service = make_service(fake_catalog, fake_config_store, recording_sleep)

        with pytest.raises(DataUnavailableError) as exc_info:
            await service.build_context("1001", now=NOW)

        assert exc_info.value.details["source"] == "orders"


class TestResortServiceResort:
    """Tests for ResortService.resort()"""

    @pytest.mark.asyncio
    async def test_resort_submits_composed_order(self, fake_catalog, recording_sleep):
        # Arrange
        fake_catalog.products = [
            ProductFactory.create(id="p1"),
            ProductFactory.create_out_of_stock(id="p2"),
            ProductFactory.create(id="p3", tags=["hero"]),
        ]
        fake_catalog.job = ReorderJob(id="job-1")
        fake_catalog.statuses = [False, True]
        store = FakeConfigStore(tag_rules=[TagRule(tag_name="hero", position="top")])
        service = make_service(fake_catalog, store, recording_sleep)

        # Act
        result = await service.resort("1001")

        # Assert
        _, moves = fake_catalog.submitted[0]
        assert [m.product_id for m in moves] == ["p3", "p1", "p2"]
        assert result.status == ReorderStatus.DONE
        assert result.success is True
        assert result.job_id == "job-1"
        assert result.product_count == 3
        assert result.attempts == 2
        assert result.message == "Collection successfully reordered"

    @pytest.mark.asyncio
    async def test_resort_reports_unconfirmed_reorder(self, fake_catalog, fake_config_store, recording_sleep):
        fake_catalog.products = ProductFactory.create_batch(2)
        fake_catalog.job = ReorderJob(id="job-1")
        service = make_service(fake_catalog, fake_config_store, recording_sleep)

        result = await service.resort("1001")

        assert result.status == ReorderStatus.TIMED_OUT
        assert result.success is False
        assert result.attempts == 30
        assert "could not be confirmed" in result.message

    @pytest.mark.asyncio
    async def test_non_manual_collection_fails_before_reads(self, fake_catalog, recording_sleep):
        fake_catalog.collection = Collection(
            id="gid://shopify/Collection/1001",
            sort_order="ALPHA_ASC",
        )
        fake_catalog.products = ProductFactory.create_batch(2)
        service = make_service(fake_catalog, FakeConfigStore(), recording_sleep)

        with pytest.raises(CollectionNotManualError):
            await service.resort("1001")

        assert fake_catalog.calls == ["get_collection"]


class TestResortServicePreview:
    """Tests for ResortService.preview()"""

    @pytest.mark.asyncio
    async def test_preview_lists_stages_without_submitting(self, fake_catalog, recording_sleep):
        fake_catalog.products = [
            ProductFactory.create(id="p1", title="Oak"),
            ProductFactory.create_out_of_stock(id="p2", title="Slate"),
        ]
        service = make_service(fake_catalog, FakeConfigStore(), recording_sleep)

        preview = await service.preview("1001")

        assert preview.collection_id == "gid://shopify/Collection/1001"
        assert preview.product_count == 2
        assert [(e.position, e.product_id, e.stage) for e in preview.products] == [
            (0, "p1", PlacementStage.REGULAR),
            (1, "p2", PlacementStage.OUT_OF_STOCK),
        ]
        assert preview.products[1].in_stock is False
        assert preview.products[1].title == "Slate"
        assert fake_catalog.submitted == []

    @pytest.mark.asyncio
    async def test_preview_missing_collection_raises(self, fake_catalog, recording_sleep):
        fake_catalog.collection = None
        service = make_service(fake_catalog, FakeConfigStore(), recording_sleep)

        with pytest.raises(CollectionNotFoundError):
            await service.preview("1001")
