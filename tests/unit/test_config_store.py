"""
Unit tests for SupabaseConfigStore.

Run: pytest tests/unit/test_config_store.py -v
"""

import pytest
from unittest.mock import patch

from services.config_store import SupabaseConfigStore
from models.rules import (
    FeatureMode,
    OrdersRange,
    OutOfStockVsFeatured,
    OutOfStockVsTags,
    SortKey,
    TagPosition,
)
from exceptions import DatabaseError


@pytest.fixture
def store(mock_supabase) -> SupabaseConfigStore:
    with patch("services.config_store.get_supabase_client", return_value=mock_supabase):
        return SupabaseConfigStore(shop_domain="test-shop.myshopify.com")


class TestConfigStoreDefaults:
    """Collections without stored rules get model defaults."""

    def test_behavior_rules_default(self, store):
        behavior = store.get_behavior_rules("1001")

        assert behavior.push_new_products_up is True
        assert behavior.new_product_days == 7
        assert behavior.push_down_out_of_stock is True
        assert behavior.out_of_stock_vs_tags == OutOfStockVsTags.POSITION_DEFINED

    def test_collection_settings_default(self, store):
        settings = store.get_collection_settings("1001")

        assert settings.primary_sort == SortKey.REVENUE_DESC
        assert settings.lookback_days == 180
        assert settings.orders_range == OrdersRange.ALL
        assert settings.include_discounts is True

    def test_featured_settings_default_is_unlimited(self, store):
        assert store.get_featured_settings("1001").feature_limit is None

    def test_no_featured_or_tag_rules(self, store):
        assert store.get_featured_entries("1001") == []
        assert store.get_tag_rules("1001") == []


class TestConfigStoreReads:

    def test_scopes_queries_to_shop_and_collection(self, store, mock_supabase):
        store.get_tag_rules("1001")

        mock_supabase.table.assert_called_with("tag_sorting_rules")

    def test_featured_entries(self, store, supabase_rows):
        supabase_rows({"featured_products": [
            {"product_id": "p1", "position": 0, "featured_type": None},
            {
                "product_id": "p2",
                "position": 1,
                "featured_type": "scheduled",
                "start_date": "2025-06-01T00:00:00",
                "days_to_feature": 14,
            },
        ]})

        entries = store.get_featured_entries("1001")

        assert entries[0].mode == FeatureMode.MANUAL
        assert entries[1].mode == FeatureMode.SCHEDULED
        assert entries[1].start_date.tzinfo is not None
        assert entries[1].days_to_feature == 14

    def test_featured_limit(self, store, supabase_rows):
        supabase_rows({"featured_settings": [{"limit_featured": 3}]})

        assert store.get_featured_settings("1001").feature_limit == 3

    def test_tag_rules_keep_stored_order(self, store, supabase_rows):
        supabase_rows({"tag_sorting_rules": [
            {"id": 1, "tag_name": "clearance", "position": "bottom"},
            {"id": 2, "tag_name": "clearance", "position": "top"},
        ]})

        rules = store.get_tag_rules("1001")

        assert [r.position for r in rules] == [TagPosition.BOTTOM, TagPosition.TOP]

    def test_behavior_rules_with_null_columns_keep_defaults(self, store, supabase_rows):
        supabase_rows({"product_behavior_rules": [{
            "push_new_products_up": False,
            "new_product_days": None,
            "out_of_stock_vs_featured": "push-featured",
        }]})

        behavior = store.get_behavior_rules("1001")

        assert behavior.push_new_products_up is False
        assert behavior.new_product_days == 7
        assert behavior.out_of_stock_vs_featured == OutOfStockVsFeatured.PUSH_FEATURED

    def test_legacy_values_are_mapped(self, store, supabase_rows):
        supabase_rows({
            "product_behavior_rules": [{"out_of_stock_vs_featured": "KEEP_FEATURED"}],
            "collection_settings": [{
                "primary_sort_order": "criteria-sales-low-to-high",
                "lookback_period": 90,
                "orders_range": "paid-orders",
                "include_discounts": False,
            }],
        })

        behavior = store.get_behavior_rules("1001")
        settings = store.get_collection_settings("1001")

        assert behavior.out_of_stock_vs_featured == OutOfStockVsFeatured.PUSH_FEATURED
        assert settings.primary_sort == SortKey.UNITS_ASC
        assert settings.lookback_days == 90
        assert settings.orders_range == OrdersRange.PAID
        assert settings.include_discounts is False

    def test_read_failure_raises_database_error(self, store, mock_supabase):
        mock_supabase.table.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            store.get_tag_rules("1001")

        assert exc_info.value.details["table"] == "tag_sorting_rules"
