"""
Supabase client for the marketplace tables (businesses, products).

Services call get_supabase_client() once in their constructor; the client
is shared for the life of the process.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)

TABLES = ("businesses", "products")


@lru_cache()
def get_supabase_client() -> Client:
    """
    Create the shared Supabase client and check it can read the businesses table.

    Call get_supabase_client.cache_clear() to reconnect.

    Raises:
        DatabaseError: If the client cannot be created or the check query fails
    """
    logger.info("connecting_to_supabase", url=settings.supabase_url[:30] + "...")

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
        client.table("businesses").select("id").limit(1).execute()
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", str(e)) from e

    logger.info("supabase_connected")
    return client


def check_connection() -> dict:
    """
    Row counts per marketplace table, for /health and startup.

    Returns:
        {"status": "healthy", "businesses_count": n, "products_count": m}
        or {"status": "unhealthy", "error": "..."}
    """
    try:
        client = get_supabase_client()
        status = {"status": "healthy"}
        for table in TABLES:
            result = client.table(table).select("id", count="exact").execute()
            status[f"{table}_count"] = result.count
        return status

    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
