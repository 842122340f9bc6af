"""
Rule compositor - Core ordering logic.

Turns a ResortContext into one ordered list of distinct product ids.

Stages, in placement order:
    1. Baseline sort by the collection's primary sort key
    2. Stock partition (in stock / out of stock)
    3. Recency partition (new products, when enabled)
    4. Featured products
    5. Top-tag bucket
    6. New products
    7. After-new-tag bucket
    8. Regular in-stock products
    9. Before-out-of-stock-tag bucket
   10. Out-of-stock products
   11. Bottom-tag bucket
   12. Sweep of anything left unplaced

Each stage only places products no earlier stage claimed.
"""

import random
from collections import Counter
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Optional
import structlog

from models.catalog import Product
from models.resort import ComposedOrder, PlacementStage, ResortContext, SalesMetric
from models.rules import (
    OutOfStockVsFeatured,
    OutOfStockVsNew,
    OutOfStockVsTags,
    SortKey,
)
from services.tag_classifier import classify

logger = structlog.get_logger(__name__)


def distinct_products(products: Iterable[Product]) -> list[Product]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for product in products:
        if product.id not in seen:
            seen.add(product.id)
            unique.append(product)
    return unique


def baseline_sort(
    products: list[Product],
    sort_key: SortKey,
    metrics: Optional[dict[str, SalesMetric]] = None,
    rng: Optional[random.Random] = None,
) -> list[Product]:
    """
    Order products by the primary sort key.

    Stable: equal keys keep catalog order. Products without a publish
    date go last in both directions. Missing metrics count as zero.
    """
    sort_key = SortKey(sort_key)
    metrics = metrics or {}

    if sort_key == SortKey.RANDOM:
        shuffled = list(products)
        (rng or random).shuffle(shuffled)
        return shuffled

    criterion = sort_key.criterion

    if criterion in ("created", "published"):
        attr = "created_at" if criterion == "created" else "published_at"
        dated = [p for p in products if getattr(p, attr) is not None]
        undated = [p for p in products if getattr(p, attr) is None]
        return sorted(dated, key=lambda p: getattr(p, attr), reverse=sort_key.descending) + undated

    def value(product: Product):
        if criterion == "revenue":
            metric = metrics.get(product.id)
            return metric.revenue if metric else Decimal("0")
        if criterion == "units":
            metric = metrics.get(product.id)
            return metric.units_total if metric else 0
        if criterion == "price":
            return product.price
        return product.total_inventory

    return sorted(products, key=value, reverse=sort_key.descending)


class _Placement:
    """Output list plus the claimed set; first placement wins."""

    def __init__(self):
        self.product_ids: list[str] = []
        self.stages: dict[str, PlacementStage] = {}
        self.claimed: set[str] = set()

    def place(self, product_ids: Iterable[str], stage: PlacementStage) -> int:
        placed = 0
        for product_id in product_ids:
            if product_id in self.claimed:
                continue
            self.claimed.add(product_id)
            self.product_ids.append(product_id)
            self.stages[product_id] = stage
            placed += 1
        return placed


class RuleCompositor:
    """
    Applies featured, tag, new-product and out-of-stock rules in a fixed
    precedence to produce the final collection order.

    Deterministic for identical inputs unless the primary sort is random.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng

    def compose(self, context: ResortContext) -> ComposedOrder:
        behavior = context.behavior
        push_down = behavior.push_down_out_of_stock

        # Stage 1-2: baseline and stock partition
        baseline = baseline_sort(
            distinct_products(context.products),
            context.settings.primary_sort,
            context.metrics,
            self.rng,
        )
        by_id = {p.id: p for p in baseline}
        in_stock = [p for p in baseline if p.in_stock]
        out_of_stock = [p for p in baseline if not p.in_stock]

        # Stage 3: recency partition
        new_ids = self._new_product_ids(baseline, context)
        demoted_new: list[str] = []
        if (
            behavior.push_new_products_up
            and push_down
            and behavior.out_of_stock_vs_new == OutOfStockVsNew.PUSH_DOWN_LATER
        ):
            demoted_new = [p.id for p in out_of_stock if self._is_new(p, context)]

        # With push-down on, out-of-stock products are bucketed in stage 10
        buckets = classify(in_stock if push_down else baseline, context.tag_rules)

        placement = _Placement()

        # Stage 4-9
        demoted_featured = self._place_featured(placement, context, by_id)
        placement.place(buckets.top, PlacementStage.TOP_TAG)
        placement.place(new_ids, PlacementStage.NEW)
        placement.place(buckets.after_new, PlacementStage.AFTER_NEW_TAG)

        held_back = set(buckets.before_out_of_stock) | set(buckets.bottom)
        placement.place(
            (p.id for p in in_stock if p.id not in held_back),
            PlacementStage.REGULAR,
        )
        placement.place(buckets.before_out_of_stock, PlacementStage.BEFORE_OUT_OF_STOCK_TAG)

        # Stage 10
        trailing: list[str] = []
        if not push_down:
            bottom = set(buckets.bottom)
            placement.place(
                (p.id for p in out_of_stock if p.id not in bottom),
                PlacementStage.OUT_OF_STOCK,
            )
        else:
            lead = demoted_featured + demoted_new
            remaining = [p for p in out_of_stock if p.id not in placement.claimed]
            oos_buckets = classify(remaining, context.tag_rules)

            if behavior.out_of_stock_vs_tags == OutOfStockVsTags.POSITION_DEFINED:
                placement.place(lead, PlacementStage.OUT_OF_STOCK)
                placement.place(oos_buckets.in_tag_order(), PlacementStage.OUT_OF_STOCK)
            else:
                # One block after the bottom bucket: untagged first
                trailing = [
                    *lead,
                    *oos_buckets.unclassified,
                    *oos_buckets.top,
                    *oos_buckets.after_new,
                    *oos_buckets.before_out_of_stock,
                    *oos_buckets.bottom,
                ]

        # Stage 11-12
        placement.place(buckets.bottom, PlacementStage.BOTTOM_TAG)
        placement.place(trailing, PlacementStage.OUT_OF_STOCK)
        swept = placement.place((p.id for p in baseline), PlacementStage.SWEEP)

        if swept:
            logger.warning("unclassified_products_swept", collection_id=context.collection_id, count=swept)

        logger.info(
            "collection_order_composed",
            collection_id=context.collection_id,
            products=len(placement.product_ids),
            in_stock=len(in_stock),
            out_of_stock=len(out_of_stock),
            stages=dict(Counter(stage.value for stage in placement.stages.values())),
        )

        return ComposedOrder(
            product_ids=placement.product_ids,
            stages=placement.stages,
        )

    # ===================
    # HELPERS
    # ===================

    @staticmethod
    def _is_new(product: Product, context: ResortContext) -> bool:
        cutoff = context.now - timedelta(days=context.behavior.new_product_days)
        return product.created_at >= cutoff

    def _new_product_ids(self, baseline: list[Product], context: ResortContext) -> list[str]:
        """
        New products in baseline order.

        Out-of-stock ones only under push-new while push-down is on.
        """
        behavior = context.behavior
        if not behavior.push_new_products_up:
            return []

        include_out_of_stock = (
            behavior.push_down_out_of_stock
            and behavior.out_of_stock_vs_new == OutOfStockVsNew.PUSH_NEW
        )
        return [
            p.id for p in baseline
            if self._is_new(p, context) and (p.in_stock or include_out_of_stock)
        ]

    def _place_featured(
        self,
        placement: _Placement,
        context: ResortContext,
        by_id: dict[str, Product],
    ) -> list[str]:
        """
        Place featured products at the top.

        Only the first feature_limit entries are eligible. Returns the ids
        deferred under push-down-later; they lead the out-of-stock block.
        """
        behavior = context.behavior
        policy = behavior.out_of_stock_vs_featured

        entries = sorted(context.featured, key=lambda e: e.position)
        if context.feature_limit:
            entries = entries[:context.feature_limit]

        deferred = []
        for entry in entries:
            product = by_id.get(entry.product_id)
            if product is None:
                logger.debug("featured_product_not_in_collection", product_id=entry.product_id)
                continue
            if not entry.is_active(context.now):
                continue

            keep_at_top = (
                product.in_stock
                or not behavior.push_down_out_of_stock
                or policy == OutOfStockVsFeatured.PUSH_FEATURED
            )
            if keep_at_top:
                placement.place([product.id], PlacementStage.FEATURED)
            elif policy == OutOfStockVsFeatured.PUSH_DOWN_LATER:
                deferred.append(product.id)

        return deferred


# Singleton instance
_rule_compositor: Optional[RuleCompositor] = None


def get_rule_compositor() -> RuleCompositor:
    """Get or create RuleCompositor instance."""
    global _rule_compositor
    if _rule_compositor is None:
        _rule_compositor = RuleCompositor()
    return _rule_compositor
