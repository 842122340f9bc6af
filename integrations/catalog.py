"""
Remote catalog interface used by the resort engine.

The engine only needs paginated reads of products and orders, one
reorder submission and job status reads. ShopifyClient implements it;
tests use in-memory fakes.
"""

from typing import Iterator, Optional, Protocol

from models.catalog import Collection, DateRange, Move, Order, Product, ReorderJob
from models.rules import OrdersRange


class CatalogClient(Protocol):
    def get_collection(self, collection_id: str) -> Optional[Collection]:
        ...

    def list_products(self, collection_id: str) -> Iterator[Product]:
        """Lazy, cursor-paginated; restartable by calling again."""
        ...

    def list_orders(
        self,
        date_range: DateRange,
        orders_range: OrdersRange
    ) -> Iterator[Order]:
        """Lazy, cursor-paginated; restartable by calling again."""
        ...

    def submit_reorder(self, collection_id: str, moves: list[Move]) -> Optional[ReorderJob]:
        """Raises SubmissionRejectedError when the platform returns user errors."""
        ...

    def get_job_status(self, job_id: str) -> ReorderJob:
        ...
