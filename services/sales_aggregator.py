"""
Sales aggregation service.

Streams paginated orders from the catalog and reduces them to per-product
units sold (total and recent) and revenue.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
import structlog

from config import settings
from exceptions import CatalogError, DataUnavailableError
from integrations.catalog import CatalogClient
from models.catalog import DateRange, LineItem
from models.resort import SalesMetric
from models.rules import OrdersRange

logger = structlog.get_logger(__name__)


def line_revenue(item: LineItem, include_discounts: bool = True) -> Decimal:
    """
    Revenue of one line item.

    Uses the discounted unit price when present and discounts are
    included, otherwise the list unit price.
    """
    unit = item.unit_price
    if include_discounts and item.discounted_unit_price is not None:
        unit = item.discounted_unit_price
    return unit * item.quantity


class SalesAggregator:
    """
    Per-product sales metrics over a lookback window.

    Every page of orders is visited exactly once. A failure on any page
    discards everything read so far.
    """

    def __init__(
        self,
        client: CatalogClient,
        recency_window_days: Optional[int] = None
    ):
        self.client = client
        self.recency_window_days = recency_window_days or settings.sales_recency_window_days

    def aggregate(
        self,
        lookback_days: int,
        orders_range: OrdersRange = OrdersRange.ALL,
        include_discounts: bool = True,
        now: Optional[datetime] = None,
    ) -> dict[str, SalesMetric]:
        """
        Aggregate orders created in the last lookback_days.

        Args:
            lookback_days: Size of the order window
            orders_range: Which orders count (all / paid / fulfilled)
            include_discounts: Prefer discounted unit prices for revenue
            now: Reference time (defaults to current UTC time)

        Returns:
            Mapping product_id -> SalesMetric; unsold products are absent

        Raises:
            DataUnavailableError: If any page of orders can't be read
        """
        now = now or datetime.now(timezone.utc)
        date_range = DateRange(start=now - timedelta(days=lookback_days))
        recent_since = now - timedelta(days=self.recency_window_days)

        logger.info(
            "aggregating_sales",
            lookback_days=lookback_days,
            orders_range=OrdersRange(orders_range).value,
            include_discounts=include_discounts
        )

        metrics: dict[str, SalesMetric] = {}
        order_count = 0

        try:
            for order in self.client.list_orders(date_range, orders_range):
                if not date_range.contains(order.created_at):
                    continue
                order_count += 1
                is_recent = order.created_at >= recent_since

                for item in order.line_items:
                    if not item.product_id:
                        continue

                    metric = metrics.get(item.product_id)
                    if metric is None:
                        metric = SalesMetric(product_id=item.product_id)
                        metrics[item.product_id] = metric

                    metric.units_total += item.quantity
                    if is_recent:
                        metric.units_recent += item.quantity
                    metric.revenue += line_revenue(item, include_discounts)

        except CatalogError as e:
            logger.error(
                "sales_aggregation_failed",
                orders_read=order_count,
                error=e.message
            )
            raise DataUnavailableError("orders", e.message) from e

        logger.info(
            "sales_aggregated",
            orders=order_count,
            products=len(metrics)
        )

        return metrics
