"""
Rule store connection.

Merchant resort rules (featured products, tag rules, behavior rules and
collection settings) live in Supabase. This module owns the one shared
client the config store reads through.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseError(Exception):
    """Rule store could not be reached."""
    pass


class ConnectionError(DatabaseError):
    """Supabase client could not be created."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Shared Supabase client for rule reads.

    Created on first use; get_supabase_client.cache_clear() forces a new
    client on the next call.

    Raises:
        ConnectionError: If the client can't be created
    """
    try:
        logger.info(
            "connecting_to_rule_store",
            url=settings.supabase_url[:30] + "..."
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("rule_store_connected")

        return client

    except Exception as e:
        logger.error(
            "rule_store_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ConnectionError(f"Failed to connect to Supabase: {e}") from e


# Convenience alias
db = get_supabase_client


def check_connection() -> dict:
    """
    Probe the rule store for /health.

    Counts collection_settings rows; any failure is reported as
    unhealthy rather than raised.
    """
    try:
        client = get_supabase_client()

        rules = client.table("collection_settings").select("id", count="exact").execute()

        return {
            "status": "healthy",
            "collection_settings_count": rules.count,
        }

    except Exception as e:
        logger.warning("rule_store_health_check_failed", error=str(e))
        return {
            "status": "unhealthy",
            "error": str(e)
        }
