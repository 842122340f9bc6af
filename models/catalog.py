"""
Catalog snapshot schemas.

Typed versions of the Shopify payloads the resort engine consumes.
Parsed once at the client boundary; nothing downstream sees raw dicts.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from models.base import SnapshotSchema


def _as_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes are taken as UTC."""
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class CollectionSortOrder(str, Enum):
    """Catalog-side ordering mode of a collection."""
    MANUAL = "MANUAL"
    BEST_SELLING = "BEST_SELLING"
    ALPHA_ASC = "ALPHA_ASC"
    ALPHA_DESC = "ALPHA_DESC"
    PRICE_ASC = "PRICE_ASC"
    PRICE_DESC = "PRICE_DESC"
    CREATED = "CREATED"
    CREATED_DESC = "CREATED_DESC"


class Collection(SnapshotSchema):
    """Collection header: identity and ordering mode."""

    id: str = Field(..., description="Collection gid")
    title: str = ""
    sort_order: Optional[str] = Field(None, description="Shopify sortOrder value")
    products_count: int = 0

    @property
    def is_manual(self) -> bool:
        return self.sort_order == CollectionSortOrder.MANUAL.value


class Product(SnapshotSchema):
    """
    Product snapshot for one resort run.

    Never mutated by the engine.
    """

    id: str = Field(..., description="Product gid")
    title: str = ""
    tags: list[str] = Field(default_factory=list)
    total_inventory: int = Field(0, description="Summed inventory; <= 0 means out of stock")
    created_at: datetime
    published_at: Optional[datetime] = None
    price: Decimal = Decimal("0")

    utc_timestamps = field_validator("created_at", "published_at")(_as_utc)

    @property
    def in_stock(self) -> bool:
        return self.total_inventory > 0

    @property
    def tag_set(self) -> frozenset[str]:
        return frozenset(self.tags)


class LineItem(SnapshotSchema):
    """Order line item. product_id is None for deleted products."""

    product_id: Optional[str] = None
    quantity: int = Field(0, ge=0)
    unit_price: Decimal = Decimal("0")
    discounted_unit_price: Optional[Decimal] = None


class Order(SnapshotSchema):
    """Order with the fields the sales aggregator reads."""

    id: str
    created_at: datetime
    line_items: list[LineItem] = Field(default_factory=list)

    utc_created = field_validator("created_at")(_as_utc)


class DateRange(SnapshotSchema):
    """Half-open [start, end) order window. end=None means up to now."""

    start: datetime
    end: Optional[datetime] = None

    utc_bounds = field_validator("start", "end")(_as_utc)

    def contains(self, moment: datetime) -> bool:
        if moment < self.start:
            return False
        return self.end is None or moment < self.end

    def to_search_query(self) -> str:
        """Shopify search syntax for the order query."""
        query = f"created_at:>={self.start.date().isoformat()}"
        if self.end is not None:
            query += f" AND created_at:<{self.end.date().isoformat()}"
        return query


class Move(SnapshotSchema):
    """One entry of a reorder move list."""

    product_id: str
    new_position: int = Field(..., ge=0)

    def to_input(self) -> dict:
        """MoveInput payload; Shopify expects the position as a string."""
        return {"id": self.product_id, "newPosition": str(self.new_position)}


class ReorderJob(SnapshotSchema):
    """Handle of the asynchronous reorder job."""

    id: str
    done: bool = False
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
