"""
Shared test fixtures.

Settings are read at import time, so required environment variables
are set here before any application module is imported.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-supabase-key")
os.environ.setdefault("SHOPIFY_SHOP_DOMAIN", "test-shop.myshopify.com")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test_token")

import pytest
from datetime import datetime
from typing import Callable
from unittest.mock import MagicMock

from models.catalog import Collection
from tests.fakes import NOW, FakeCatalogClient, FakeConfigStore, RecordingSleep


# ===================
# FIXTURES
# ===================

@pytest.fixture
def now() -> datetime:
    """Fixed reference time for rule evaluation."""
    return NOW


@pytest.fixture
def manual_collection() -> Collection:
    return Collection(
        id="gid://shopify/Collection/1001",
        title="Spring Tiles",
        sort_order="MANUAL",
        products_count=3,
    )


@pytest.fixture
def fake_catalog(manual_collection) -> FakeCatalogClient:
    """
    Fake catalog with a manual collection and no products.

    Usage:
        def test_something(fake_catalog):
            fake_catalog.products = ProductFactory.create_batch(3)
    """
    return FakeCatalogClient(collection=manual_collection)


@pytest.fixture
def fake_config_store() -> FakeConfigStore:
    return FakeConfigStore()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


# ===================
# MOCK SUPABASE CLIENT
# ===================

def _mock_query(rows: list) -> MagicMock:
    """Chainable query builder whose execute() returns rows."""
    query = MagicMock()
    query.select.return_value = query
    query.eq.return_value = query
    query.order.return_value = query
    query.execute.return_value = MagicMock(data=rows)
    return query


@pytest.fixture
def mock_supabase() -> MagicMock:
    """
    MagicMock standing in for the Supabase client.

    Every table returns no rows until configured with supabase_rows.
    """
    client = MagicMock()
    client.table.side_effect = lambda name: _mock_query([])
    return client


@pytest.fixture
def supabase_rows(mock_supabase) -> Callable[[dict], None]:
    """
    Configure rows per table.

    Usage:
        def test_something(mock_supabase, supabase_rows):
            supabase_rows({"tag_sorting_rules": [{...}]})
    """

    def configure(rows_by_table: dict[str, list[dict]]) -> None:
        mock_supabase.table.side_effect = lambda name: _mock_query(rows_by_table.get(name, []))

    return configure
