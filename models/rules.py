"""
Merchant rule schemas.

Featured products, tag rules, behavior rules and collection settings,
as read from the config store for one shop + collection.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from models.base import BaseSchema, SnapshotSchema


# ===================
# ENUMS
# ===================

class SortKey(str, Enum):
    """Primary (baseline) sort of a collection."""
    REVENUE_DESC = "revenue-desc"
    REVENUE_ASC = "revenue-asc"
    UNITS_DESC = "units-desc"
    UNITS_ASC = "units-asc"
    CREATED_DESC = "created-desc"
    CREATED_ASC = "created-asc"
    PUBLISHED_DESC = "published-desc"
    PUBLISHED_ASC = "published-asc"
    PRICE_DESC = "price-desc"
    PRICE_ASC = "price-asc"
    INVENTORY_DESC = "inventory-desc"
    INVENTORY_ASC = "inventory-asc"
    RANDOM = "random"

    @property
    def criterion(self) -> str:
        return self.value.split("-")[0]

    @property
    def descending(self) -> bool:
        return self.value.endswith("-desc")

    @property
    def needs_metrics(self) -> bool:
        """Whether the baseline needs sales data."""
        return self.criterion in ("revenue", "units")


class OrdersRange(str, Enum):
    """Which orders count towards sales metrics."""
    ALL = "all-orders"
    PAID = "paid-orders"
    FULFILLED = "fulfilled-orders"


class FeatureMode(str, Enum):
    MANUAL = "manual"
    SCHEDULED = "scheduled"


class TagPosition(str, Enum):
    """Bucket a tag rule sends matching products to."""
    TOP = "top"
    AFTER_NEW = "after-new"
    BEFORE_OUT_OF_STOCK = "before-out-of-stock"
    BOTTOM = "bottom"


class OutOfStockVsNew(str, Enum):
    PUSH_DOWN = "push-down"
    PUSH_DOWN_LATER = "push-down-later"
    PUSH_NEW = "push-new"


class OutOfStockVsFeatured(str, Enum):
    PUSH_DOWN = "push-down"
    PUSH_DOWN_LATER = "push-down-later"
    PUSH_FEATURED = "push-featured"


class OutOfStockVsTags(str, Enum):
    POSITION_DEFINED = "position-defined"
    PUSH_DOWN = "push-down"


# Values written by earlier versions of the settings screens
_LEGACY_PRIORITIES = {
    "PUSH_DOWN": "push-down",
    "KEEP_FEATURED": "push-featured",
    "KEEP_TAGGED": "position-defined",
    "position-defined-tag": "position-defined",
}

_LEGACY_CRITERIA = {
    "revenue": "revenue",
    "sales": "units",
    "creation": "created",
    "publish": "published",
    "price": "price",
    "inventory": "inventory",
}


# ===================
# FEATURED PRODUCTS
# ===================

class FeaturedEntry(BaseSchema):
    """
    A product pinned near the top of a collection.

    Scheduled entries only count while their window is open:
    start_date <= now < start_date + days_to_feature. A missing bound
    leaves that side of the window open.
    """

    product_id: str = Field(..., min_length=1)
    position: int = Field(..., ge=0, description="Zero-based slot among featured products")
    mode: FeatureMode = FeatureMode.MANUAL
    start_date: Optional[datetime] = None
    days_to_feature: Optional[int] = Field(None, ge=1)

    @field_validator("start_date")
    @classmethod
    def start_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def is_active(self, now: datetime) -> bool:
        if self.mode == FeatureMode.MANUAL or self.start_date is None:
            return True
        if now < self.start_date:
            return False
        if self.days_to_feature is None:
            return True
        return now < self.start_date + timedelta(days=self.days_to_feature)


class FeaturedSettings(BaseSchema):
    """limit_featured = 0 means every featured entry is eligible."""

    limit_featured: int = Field(default=0, ge=0)

    @property
    def feature_limit(self) -> Optional[int]:
        return self.limit_featured or None


# ===================
# TAG RULES
# ===================

class TagRule(SnapshotSchema):
    """Literal tag → bucket. Matching is exact and case-sensitive."""

    tag_name: str = Field(..., min_length=1)
    position: TagPosition


# ===================
# BEHAVIOR RULES
# ===================

class BehaviorRules(BaseSchema):
    """
    New-product and out-of-stock behavior for a collection.

    Defaults match a freshly created collection configuration.
    """

    push_new_products_up: bool = True
    new_product_days: int = Field(default=7, ge=0, le=365)
    push_down_out_of_stock: bool = True
    out_of_stock_vs_new: OutOfStockVsNew = OutOfStockVsNew.PUSH_DOWN
    out_of_stock_vs_featured: OutOfStockVsFeatured = OutOfStockVsFeatured.PUSH_DOWN
    out_of_stock_vs_tags: OutOfStockVsTags = OutOfStockVsTags.POSITION_DEFINED

    @field_validator(
        "out_of_stock_vs_new",
        "out_of_stock_vs_featured",
        "out_of_stock_vs_tags",
        mode="before"
    )
    @classmethod
    def map_legacy_priority(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _LEGACY_PRIORITIES.get(v, v)
        return v


# ===================
# COLLECTION SETTINGS
# ===================

class CollectionSettings(BaseSchema):
    """Baseline sort and sales metric options."""

    primary_sort: SortKey = SortKey.REVENUE_DESC
    lookback_days: int = Field(default=180, ge=1, le=3650)
    orders_range: OrdersRange = OrdersRange.ALL
    include_discounts: bool = True

    @field_validator("primary_sort", mode="before")
    @classmethod
    def map_legacy_sort(cls, v: Any) -> Any:
        """
        Accept stored values like "criteria-sales-high-to-low".

        "position-based" and "random-high-low" both meant a shuffled baseline.
        """
        if not isinstance(v, str):
            return v
        if v in ("position-based", "random-high-low"):
            return SortKey.RANDOM.value
        if v.startswith("criteria-"):
            for name, criterion in _LEGACY_CRITERIA.items():
                prefix = f"criteria-{name}-"
                if v.startswith(prefix):
                    mode = v[len(prefix):]
                    direction = "asc" if mode == "low-to-high" else "desc"
                    return f"{criterion}-{direction}"
        return v
