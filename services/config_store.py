"""
Config store for merchant resort rules.

Read-only access to featured products, tag rules, behavior rules and
collection settings, keyed by shop + collection. Missing records fall
back to model defaults.
"""

from typing import Optional, Protocol
import structlog

from config import get_supabase_client, settings
from models.rules import (
    BehaviorRules,
    CollectionSettings,
    FeaturedEntry,
    FeaturedSettings,
    TagRule,
)
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class ConfigStore(Protocol):
    def get_featured_entries(self, collection_id: str) -> list[FeaturedEntry]:
        ...

    def get_featured_settings(self, collection_id: str) -> FeaturedSettings:
        ...

    def get_tag_rules(self, collection_id: str) -> list[TagRule]:
        ...

    def get_behavior_rules(self, collection_id: str) -> BehaviorRules:
        ...

    def get_collection_settings(self, collection_id: str) -> CollectionSettings:
        ...


class SupabaseConfigStore:
    """
    Supabase-backed rule store.

    Tables:
        featured_products: one row per featured product (position ordered)
        featured_settings: one row per collection
        tag_sorting_rules: one row per rule (id = insertion order)
        product_behavior_rules: one row per collection
        collection_settings: one row per collection
    """

    def __init__(self, shop_domain: Optional[str] = None):
        self.db = get_supabase_client()
        self.shop_domain = shop_domain or settings.shopify_shop_domain

    def _select(self, table: str, collection_id: str, order_by: Optional[str] = None) -> list[dict]:
        """Rows of one table for this shop + collection."""
        try:
            query = (
                self.db.table(table)
                .select("*")
                .eq("shop_domain", self.shop_domain)
                .eq("collection_id", collection_id)
            )
            if order_by:
                query = query.order(order_by)

            result = query.execute()
            return result.data or []

        except Exception as e:
            logger.error(
                "config_store_read_failed",
                table=table,
                collection_id=collection_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e), details={"table": table})

    # ===================
    # READ OPERATIONS
    # ===================

    def get_featured_entries(self, collection_id: str) -> list[FeaturedEntry]:
        """Featured products in stored position order."""
        rows = self._select("featured_products", collection_id, order_by="position")

        entries = [
            FeaturedEntry(
                product_id=row["product_id"],
                position=row["position"],
                mode=row.get("featured_type") or "manual",
                start_date=row.get("start_date"),
                days_to_feature=row.get("days_to_feature"),
            )
            for row in rows
        ]

        logger.debug("featured_entries_loaded", collection_id=collection_id, count=len(entries))
        return entries

    def get_featured_settings(self, collection_id: str) -> FeaturedSettings:
        rows = self._select("featured_settings", collection_id)
        if not rows:
            return FeaturedSettings()
        return FeaturedSettings(limit_featured=rows[0].get("limit_featured") or 0)

    def get_tag_rules(self, collection_id: str) -> list[TagRule]:
        """Tag rules in insertion order; the first matching rule wins."""
        rows = self._select("tag_sorting_rules", collection_id, order_by="id")

        rules = [
            TagRule(tag_name=row["tag_name"], position=row["position"])
            for row in rows
        ]

        logger.debug("tag_rules_loaded", collection_id=collection_id, count=len(rules))
        return rules

    def get_behavior_rules(self, collection_id: str) -> BehaviorRules:
        rows = self._select("product_behavior_rules", collection_id)
        if not rows:
            logger.debug("behavior_rules_defaulted", collection_id=collection_id)
            return BehaviorRules()

        row = rows[0]
        fields = (
            "push_new_products_up",
            "new_product_days",
            "push_down_out_of_stock",
            "out_of_stock_vs_new",
            "out_of_stock_vs_featured",
            "out_of_stock_vs_tags",
        )
        return BehaviorRules(**{f: row[f] for f in fields if row.get(f) is not None})

    def get_collection_settings(self, collection_id: str) -> CollectionSettings:
        rows = self._select("collection_settings", collection_id)
        if not rows:
            logger.debug("collection_settings_defaulted", collection_id=collection_id)
            return CollectionSettings()

        row = rows[0]
        values = {
            "primary_sort": row.get("primary_sort_order"),
            "lookback_days": row.get("lookback_period"),
            "orders_range": row.get("orders_range"),
            "include_discounts": row.get("include_discounts"),
        }
        return CollectionSettings(**{k: v for k, v in values.items() if v is not None})


# Singleton instance
_config_store: Optional[SupabaseConfigStore] = None


def get_config_store() -> SupabaseConfigStore:
    """Get or create SupabaseConfigStore instance."""
    global _config_store
    if _config_store is None:
        _config_store = SupabaseConfigStore()
    return _config_store
