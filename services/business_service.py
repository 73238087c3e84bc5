"""
Business service.

Read access to businesses and the ownership check that gates every
product write.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.business import BusinessResponse
from exceptions import BusinessNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class BusinessService:
    """
    Business lookups.

    Ownership failures are reported as not-found so callers cannot tell
    a missing business from one they do not own.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "businesses"

    def get_owned(self, business_id: str, owner_id: str) -> BusinessResponse:
        """
        Get a business only if it belongs to owner_id.

        Args:
            business_id: Business UUID
            owner_id: Authenticated user UUID

        Returns:
            BusinessResponse

        Raises:
            BusinessNotFoundError: If business doesn't exist or is owned by someone else
        """
        logger.debug("verifying_business_owner", business_id=business_id, owner_id=owner_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", business_id)
                .eq("owner_id", owner_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "verify_business_owner_failed",
                business_id=business_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            logger.warning(
                "business_not_owned",
                business_id=business_id,
                owner_id=owner_id
            )
            raise BusinessNotFoundError(business_id)

        return BusinessResponse(**result.data[0])


# Singleton instance for convenience
_business_service: Optional[BusinessService] = None

def get_business_service() -> BusinessService:
    """Get or create BusinessService instance."""
    global _business_service
    if _business_service is None:
        _business_service = BusinessService()
    return _business_service
