"""
Business logic services.

Each service handles one stage of a collection resort.
"""

from services.config_store import ConfigStore, SupabaseConfigStore, get_config_store
from services.sales_aggregator import SalesAggregator
from services.tag_classifier import classify, bucket_for
from services.rule_compositor import RuleCompositor, get_rule_compositor
from services.reorder_reconciler import ReorderReconciler
from services.resort_service import ResortService, get_resort_service

__all__ = [
    "ConfigStore",
    "SupabaseConfigStore",
    "get_config_store",
    "SalesAggregator",
    "classify",
    "bucket_for",
    "RuleCompositor",
    "get_rule_compositor",
    "ReorderReconciler",
    "ResortService",
    "get_resort_service",
]
