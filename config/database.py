"""
Database connection management.

Provides the cached Supabase client. Core pipelines never call this
directly; the request layer builds a catalog store around the client and
passes it in.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        ExternalServiceError: If the client cannot be created
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        # Service key is needed for the batch function when RLS is on
        client = create_client(
            settings.supabase_url,
            settings.supabase_service_key or settings.supabase_key
        )

        logger.info("supabase_client_created")

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise ExternalServiceError(
            "supabase",
            f"Failed to connect to Supabase: {e}"
        ) from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check database connection health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()

        products = client.table("retailer_products").select("id", count="exact").limit(1).execute()
        samples = client.table("samples").select("id", count="exact").limit(1).execute()

        return {
            "status": "healthy",
            "retailer_products_count": products.count,
            "samples_count": samples.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
