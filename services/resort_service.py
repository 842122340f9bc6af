"""
Resort workflow service.

Entry point for "resort this collection": checks the collection is
manual, loads rules, reads products and sales concurrently, composes
the order and reconciles it with the catalog.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional
import structlog

from exceptions import (
    CatalogError,
    CollectionNotFoundError,
    DataUnavailableError,
    EmptyCollectionError,
)
from integrations.catalog import CatalogClient
from integrations.shopify import get_shopify_client
from models.catalog import Product
from models.resort import (
    ComposedOrder,
    PreviewEntry,
    ReorderStatus,
    ResortContext,
    ResortPreview,
    ResortResult,
    SalesMetric,
)
from services.config_store import ConfigStore, get_config_store
from services.reorder_reconciler import ReorderReconciler
from services.rule_compositor import RuleCompositor, get_rule_compositor
from services.sales_aggregator import SalesAggregator

logger = structlog.get_logger(__name__)


class ResortService:
    """
    Resort orchestration.

    Holds no per-run state: each call builds its own ResortContext, so
    resorts of different collections can run concurrently.
    """

    def __init__(
        self,
        client: CatalogClient,
        config_store: ConfigStore,
        reconciler: Optional[ReorderReconciler] = None,
        aggregator: Optional[SalesAggregator] = None,
        compositor: Optional[RuleCompositor] = None,
    ):
        self.client = client
        self.config_store = config_store
        self.reconciler = reconciler or ReorderReconciler(client)
        self.aggregator = aggregator or SalesAggregator(client)
        self.compositor = compositor or get_rule_compositor()

    # ===================
    # CONTEXT
    # ===================

    def _load_products(self, collection_id: str) -> list[Product]:
        """Read every page of products; any failure discards the snapshot."""
        try:
            products = list(self.client.list_products(collection_id))
        except CatalogError as e:
            logger.error("product_listing_failed", collection_id=collection_id, error=e.message)
            raise DataUnavailableError("products", e.message) from e

        logger.info("products_loaded", collection_id=collection_id, count=len(products))
        return products

    async def build_context(
        self,
        collection_id: str,
        now: Optional[datetime] = None
    ) -> ResortContext:
        """
        Build the per-run context.

        Products and sales metrics are paginated concurrently; metrics are
        only read when the primary sort needs them.

        Raises:
            DataUnavailableError: If products or orders can't be read fully
            EmptyCollectionError: If the collection has no products
        """
        now = now or datetime.now(timezone.utc)
        store = self.config_store

        featured, featured_settings, tag_rules, behavior, collection_settings = await asyncio.gather(
            asyncio.to_thread(store.get_featured_entries, collection_id),
            asyncio.to_thread(store.get_featured_settings, collection_id),
            asyncio.to_thread(store.get_tag_rules, collection_id),
            asyncio.to_thread(store.get_behavior_rules, collection_id),
            asyncio.to_thread(store.get_collection_settings, collection_id),
        )

        products_task = asyncio.to_thread(self._load_products, collection_id)

        metrics: dict[str, SalesMetric] = {}
        if collection_settings.primary_sort.needs_metrics:
            products, metrics = await asyncio.gather(
                products_task,
                asyncio.to_thread(
                    self.aggregator.aggregate,
                    collection_settings.lookback_days,
                    collection_settings.orders_range,
                    collection_settings.include_discounts,
                    now,
                ),
            )
        else:
            products = await products_task

        if not products:
            raise EmptyCollectionError(collection_id)

        return ResortContext(
            collection_id=collection_id,
            products=products,
            metrics=metrics,
            featured=featured,
            feature_limit=featured_settings.feature_limit,
            tag_rules=tag_rules,
            behavior=behavior,
            settings=collection_settings,
            now=now,
        )

    # ===================
    # OPERATIONS
    # ===================

    async def preview(self, collection_id: str) -> ResortPreview:
        """Compose the order without submitting it."""
        collection = await asyncio.to_thread(self.client.get_collection, collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)

        context = await self.build_context(collection.id)
        composed = self.compositor.compose(context)

        return ResortPreview(
            collection_id=collection.id,
            product_count=len(composed),
            products=self._preview_entries(context, composed),
        )

    async def resort(self, collection_id: str) -> ResortResult:
        """
        Recompute and submit the full order of a collection.

        Returns:
            ResortResult; status TIMED_OUT means the reorder was issued
            but its completion could not be confirmed

        Raises:
            CollectionNotFoundError, CollectionNotManualError,
            EmptyCollectionError, DataUnavailableError,
            SubmissionRejectedError, CatalogError
        """
        logger.info("resort_started", collection_id=collection_id)

        collection = await self.reconciler.ensure_manual(collection_id)
        context = await self.build_context(collection.id)
        composed = self.compositor.compose(context)
        result = await self.reconciler.reconcile(collection, composed.product_ids)

        if result.status == ReorderStatus.DONE:
            message = "Collection successfully reordered"
        else:
            message = (
                "Reorder was submitted but completion could not be confirmed; "
                "check the collection again shortly"
            )

        logger.info(
            "resort_finished",
            collection_id=collection.id,
            status=result.status.value,
            job_id=result.job_id,
            products=len(composed)
        )

        return ResortResult(
            collection_id=collection.id,
            status=result.status,
            success=result.confirmed,
            message=message,
            job_id=result.job_id,
            product_count=len(composed),
            attempts=result.attempts,
        )

    @staticmethod
    def _preview_entries(context: ResortContext, composed: ComposedOrder) -> list[PreviewEntry]:
        products = {p.id: p for p in context.products}
        return [
            PreviewEntry(
                position=index,
                product_id=product_id,
                title=products[product_id].title,
                in_stock=products[product_id].in_stock,
                stage=composed.stages[product_id],
            )
            for index, product_id in enumerate(composed.product_ids)
        ]


# Singleton instance
_resort_service: Optional[ResortService] = None


def get_resort_service() -> ResortService:
    """Get or create ResortService instance."""
    global _resort_service
    if _resort_service is None:
        _resort_service = ResortService(
            client=get_shopify_client(),
            config_store=get_config_store(),
        )
    return _resort_service
