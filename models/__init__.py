"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    SnapshotSchema,
    PageInfo,
)
from models.catalog import (
    CollectionSortOrder,
    Collection,
    Product,
    LineItem,
    Order,
    DateRange,
    Move,
    ReorderJob,
)
from models.rules import (
    SortKey,
    OrdersRange,
    FeatureMode,
    TagPosition,
    OutOfStockVsNew,
    OutOfStockVsFeatured,
    OutOfStockVsTags,
    FeaturedEntry,
    FeaturedSettings,
    TagRule,
    BehaviorRules,
    CollectionSettings,
)
from models.resort import (
    SalesMetric,
    TagBuckets,
    ResortContext,
    PlacementStage,
    ComposedOrder,
    ReorderStatus,
    ReorderResult,
    ResortResult,
    PreviewEntry,
    ResortPreview,
)

__all__ = [
    # Base
    "BaseSchema",
    "SnapshotSchema",
    "PageInfo",

    # Catalog
    "CollectionSortOrder",
    "Collection",
    "Product",
    "LineItem",
    "Order",
    "DateRange",
    "Move",
    "ReorderJob",

    # Rules
    "SortKey",
    "OrdersRange",
    "FeatureMode",
    "TagPosition",
    "OutOfStockVsNew",
    "OutOfStockVsFeatured",
    "OutOfStockVsTags",
    "FeaturedEntry",
    "FeaturedSettings",
    "TagRule",
    "BehaviorRules",
    "CollectionSettings",

    # Resort
    "SalesMetric",
    "TagBuckets",
    "ResortContext",
    "PlacementStage",
    "ComposedOrder",
    "ReorderStatus",
    "ReorderResult",
    "ResortResult",
    "PreviewEntry",
    "ResortPreview",
]
