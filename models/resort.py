"""
Resort engine schemas.

Metrics, classifier buckets, the per-run context and run results.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from models.catalog import Product
from models.rules import (
    BehaviorRules,
    CollectionSettings,
    FeaturedEntry,
    TagPosition,
    TagRule,
)


class SalesMetric(BaseModel):
    """Sales totals for one product over the lookback window."""

    product_id: str
    units_total: int = 0
    units_recent: int = Field(0, description="Units sold inside the recency window")
    revenue: Decimal = Decimal("0")


class TagBuckets(BaseModel):
    """Disjoint product id buckets, each in input order."""

    top: list[str] = Field(default_factory=list)
    after_new: list[str] = Field(default_factory=list)
    before_out_of_stock: list[str] = Field(default_factory=list)
    bottom: list[str] = Field(default_factory=list)
    unclassified: list[str] = Field(default_factory=list)

    def for_position(self, position: TagPosition) -> list[str]:
        return {
            TagPosition.TOP: self.top,
            TagPosition.AFTER_NEW: self.after_new,
            TagPosition.BEFORE_OUT_OF_STOCK: self.before_out_of_stock,
            TagPosition.BOTTOM: self.bottom,
        }[position]

    def in_tag_order(self) -> list[str]:
        """top → after_new → before_out_of_stock → bottom → unclassified."""
        return [
            *self.top,
            *self.after_new,
            *self.before_out_of_stock,
            *self.bottom,
            *self.unclassified,
        ]


class ResortContext(BaseModel):
    """
    Everything one resort run needs, built once per invocation.

    Passed through the pipeline by reference; nothing is read from
    ambient state after construction.
    """

    collection_id: str
    products: list[Product]
    metrics: dict[str, SalesMetric] = Field(default_factory=dict)
    featured: list[FeaturedEntry] = Field(default_factory=list)
    feature_limit: Optional[int] = Field(None, ge=1, description="None = no limit")
    tag_rules: list[TagRule] = Field(default_factory=list)
    behavior: BehaviorRules = Field(default_factory=BehaviorRules)
    settings: CollectionSettings = Field(default_factory=CollectionSettings)
    now: datetime


class PlacementStage(str, Enum):
    """Compositor stage that claimed a product."""
    FEATURED = "featured"
    TOP_TAG = "top-tag"
    NEW = "new"
    AFTER_NEW_TAG = "after-new-tag"
    REGULAR = "regular"
    BEFORE_OUT_OF_STOCK_TAG = "before-out-of-stock-tag"
    OUT_OF_STOCK = "out-of-stock"
    BOTTOM_TAG = "bottom-tag"
    SWEEP = "sweep"


class ComposedOrder(BaseModel):
    """Final product order plus the stage that placed each product."""

    product_ids: list[str] = Field(default_factory=list)
    stages: dict[str, PlacementStage] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.product_ids)

    def position_of(self, product_id: str) -> int:
        return self.product_ids.index(product_id)


class ReorderStatus(str, Enum):
    DONE = "done"
    TIMED_OUT = "timed_out"  # issued, completion unconfirmed


class ReorderResult(BaseModel):
    """Outcome of submitting and polling one reorder job."""

    status: ReorderStatus
    job_id: Optional[str] = None
    attempts: int = 0
    move_count: int = 0

    @property
    def confirmed(self) -> bool:
        return self.status == ReorderStatus.DONE


class ResortResult(BaseModel):
    """Response of a resort run."""

    collection_id: str
    status: ReorderStatus
    success: bool
    message: str
    job_id: Optional[str] = None
    product_count: int
    attempts: int = 0


class PreviewEntry(BaseModel):
    position: int
    product_id: str
    title: str
    in_stock: bool
    stage: PlacementStage


class ResortPreview(BaseModel):
    """Composed order without submitting it."""

    collection_id: str
    product_count: int
    products: list[PreviewEntry]
