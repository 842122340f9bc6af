"""
Shopify Admin GraphQL client.

Implements the CatalogClient interface: cursor-paginated product and
order reads, collection reorder submission and job status reads.
Payloads are parsed into catalog models here and nowhere else.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterator, Optional, TypeVar
from pydantic import ValidationError
import requests
import structlog

from config import settings
from exceptions import CatalogError, SubmissionRejectedError
from integrations.shopify_queries import (
    COLLECTION_REORDER_PRODUCTS,
    GET_COLLECTION,
    GET_COLLECTION_PRODUCTS,
    GET_JOB_STATUS,
    GET_ORDERS_WITH_PRODUCTS,
    ORDER_STATUS_FILTERS,
)
from models.base import PageInfo
from models.catalog import (
    Collection,
    DateRange,
    LineItem,
    Move,
    Order,
    Product,
    ReorderJob,
)
from models.rules import OrdersRange

logger = structlog.get_logger(__name__)

COLLECTION_GID_PREFIX = "gid://shopify/Collection/"

T = TypeVar("T")


def to_collection_gid(collection_id: str) -> str:
    """Accept a numeric collection id or a full gid."""
    if collection_id.startswith("gid://"):
        return collection_id
    return f"{COLLECTION_GID_PREFIX}{collection_id}"


def _money(money_set: Optional[dict]) -> Optional[Decimal]:
    """Amount of a MoneyBag's shopMoney, or None when absent."""
    if not money_set:
        return None
    amount = (money_set.get("shopMoney") or {}).get("amount")
    if amount is None:
        return None
    try:
        return Decimal(str(amount))
    except InvalidOperation:
        return None


def parse_product(node: dict) -> Product:
    """Product node → Product."""
    variants = (node.get("variants") or {}).get("edges") or []
    price = variants[0]["node"].get("price") if variants else None
    return Product(
        id=node["id"],
        title=node.get("title") or "",
        tags=node.get("tags") or [],
        total_inventory=node.get("totalInventory") or 0,
        created_at=node["createdAt"],
        published_at=node.get("publishedAt"),
        price=Decimal(str(price)) if price is not None else Decimal("0"),
    )


def parse_order(node: dict) -> Order:
    """Order node → Order. Line items without a product keep product_id=None."""
    line_items = []
    for edge in (node.get("lineItems") or {}).get("edges") or []:
        item = edge["node"]
        product = item.get("product") or {}
        line_items.append(LineItem(
            product_id=product.get("id"),
            quantity=item.get("quantity") or 0,
            unit_price=_money(item.get("originalUnitPriceSet")) or Decimal("0"),
            discounted_unit_price=_money(item.get("discountedUnitPriceSet")),
        ))
    return Order(
        id=node["id"],
        created_at=node["createdAt"],
        line_items=line_items,
    )


def _parse(parser: Callable[[dict], T], node: dict, operation: str) -> T:
    """Run a node parser; a malformed node raises CatalogError."""
    try:
        return parser(node)
    except (KeyError, TypeError, InvalidOperation, ValidationError) as e:
        logger.error(
            "shopify_payload_malformed",
            operation=operation,
            node_id=node.get("id") if isinstance(node, dict) else None,
            error=str(e),
            error_type=type(e).__name__
        )
        raise CatalogError(
            f"Malformed {operation} payload: {type(e).__name__}: {e}",
            details={"operation": operation}
        ) from e


class ShopifyClient:
    """
    Blocking GraphQL client for one shop.

    Uses plain requests calls so instances can be shared between
    worker threads.
    """

    def __init__(
        self,
        shop_domain: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.shop_domain = shop_domain or settings.shopify_shop_domain
        self.access_token = access_token or settings.shopify_access_token
        version = api_version or settings.shopify_api_version
        self.url = f"https://{self.shop_domain}/admin/api/{version}/graphql.json"
        self.page_size = page_size or settings.shopify_page_size
        self.timeout = timeout or settings.shopify_timeout_seconds

    # ===================
    # TRANSPORT
    # ===================

    def _execute(self, query: str, variables: dict, operation: str) -> dict:
        """
        POST one GraphQL document.

        Returns:
            The "data" object of the response

        Raises:
            CatalogError: On HTTP failure or top-level GraphQL errors
        """
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }

        try:
            response = requests.post(
                self.url,
                json={"query": query, "variables": variables},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()

        except requests.exceptions.RequestException as e:
            logger.error(
                "shopify_request_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__
            )
            raise CatalogError(
                f"Shopify request failed: {e}",
                details={"operation": operation}
            ) from e

        if payload.get("errors"):
            message = ", ".join(
                err.get("message", "unknown error") for err in payload["errors"]
            )
            logger.error("shopify_graphql_errors", operation=operation, errors=payload["errors"])
            raise CatalogError(
                f"GraphQL error: {message}",
                details={"operation": operation}
            )

        return payload.get("data") or {}

    def _paginate(
        self,
        query: str,
        variables: dict,
        path: tuple[str, ...],
        operation: str,
    ) -> Iterator[dict]:
        """Yield connection nodes page by page until hasNextPage is false."""
        after = None
        pages = 0

        while True:
            data = self._execute(
                query,
                {**variables, "first": self.page_size, "after": after},
                operation,
            )

            connection: Any = data
            for key in path:
                connection = (connection or {}).get(key)
            if connection is None:
                raise CatalogError(
                    f"{operation} returned no data",
                    details={"operation": operation, "path": ".".join(path)}
                )

            for edge in connection.get("edges") or []:
                yield edge["node"]

            page_info = PageInfo(
                has_next_page=(connection.get("pageInfo") or {}).get("hasNextPage", False),
                end_cursor=(connection.get("pageInfo") or {}).get("endCursor"),
            )
            pages += 1
            logger.debug(
                "shopify_page_fetched",
                operation=operation,
                page=pages,
                has_next_page=page_info.has_next_page
            )

            if not page_info.has_next_page or not page_info.end_cursor:
                return
            after = page_info.end_cursor

    # ===================
    # READ OPERATIONS
    # ===================

    def get_collection(self, collection_id: str) -> Optional[Collection]:
        """Collection header, or None when it doesn't exist."""
        gid = to_collection_gid(collection_id)
        data = self._execute(GET_COLLECTION, {"id": gid}, "get_collection")

        node = data.get("collection")
        if not node:
            return None

        return Collection(
            id=node["id"],
            title=node.get("title") or "",
            sort_order=node.get("sortOrder"),
            products_count=(node.get("productsCount") or {}).get("count") or 0,
        )

    def list_products(self, collection_id: str) -> Iterator[Product]:
        """All products of a collection, in catalog order."""
        gid = to_collection_gid(collection_id)
        for node in self._paginate(
            GET_COLLECTION_PRODUCTS,
            {"id": gid},
            ("collection", "products"),
            "list_products",
        ):
            yield _parse(parse_product, node, "list_products")

    def list_orders(
        self,
        date_range: DateRange,
        orders_range: OrdersRange
    ) -> Iterator[Order]:
        """Orders created inside date_range, filtered by status scope."""
        query = date_range.to_search_query()
        status_filter = ORDER_STATUS_FILTERS.get(OrdersRange(orders_range).value)
        if status_filter:
            query += f" AND {status_filter}"

        logger.info("listing_orders", query=query)

        for node in self._paginate(
            GET_ORDERS_WITH_PRODUCTS,
            {"query": query},
            ("orders",),
            "list_orders",
        ):
            yield _parse(parse_order, node, "list_orders")

    def get_job_status(self, job_id: str) -> ReorderJob:
        data = self._execute(GET_JOB_STATUS, {"id": job_id}, "get_job_status")

        job = data.get("job")
        if not job:
            raise CatalogError(
                f"Job {job_id} not found",
                details={"operation": "get_job_status", "job_id": job_id}
            )
        return ReorderJob(id=job["id"], done=bool(job.get("done")))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def submit_reorder(self, collection_id: str, moves: list[Move]) -> Optional[ReorderJob]:
        """
        Submit a complete move list.

        Returns:
            The reorder job, or None when Shopify returned no job

        Raises:
            SubmissionRejectedError: If Shopify returns user errors
            CatalogError: On transport failure
        """
        gid = to_collection_gid(collection_id)
        logger.info("submitting_reorder", collection_id=gid, moves=len(moves))

        data = self._execute(
            COLLECTION_REORDER_PRODUCTS,
            {"id": gid, "moves": [move.to_input() for move in moves]},
            "submit_reorder",
        )

        result = data.get("collectionReorderProducts") or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            logger.warning("reorder_rejected", collection_id=gid, user_errors=user_errors)
            raise SubmissionRejectedError(gid, user_errors)

        job = result.get("job")
        if not job:
            return None

        logger.info("reorder_job_started", collection_id=gid, job_id=job["id"])
        return ReorderJob(id=job["id"], done=bool(job.get("done")))


# Singleton instance
_shopify_client: Optional[ShopifyClient] = None


def get_shopify_client() -> ShopifyClient:
    """Get or create ShopifyClient instance."""
    global _shopify_client
    if _shopify_client is None:
        _shopify_client = ShopifyClient()
    return _shopify_client
