"""
Product service for catalogue operations.

Every write is scoped to a business and checked against its owner first.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductImportRecord,
)
from services.business_service import BusinessService
from exceptions import (
    ProductNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


class ProductService:
    """
    Product business logic.

    Handles CRUD operations and the bulk insert used by CSV imports.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"
        self.businesses = BusinessService()

    # ===================
    # READ OPERATIONS
    # ===================

    def get_by_business(self, business_id: str) -> list[ProductResponse]:
        """
        Get all products of a business, newest first.

        Args:
            business_id: Business UUID

        Returns:
            List of ProductResponse
        """
        logger.info("getting_products", business_id=business_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("business_id", business_id)
                .order("created_at", desc=True)
                .execute()
            )

            products = [ProductResponse(**row) for row in result.data]

            logger.info(
                "products_retrieved",
                business_id=business_id,
                count=len(products)
            )

            return products

        except Exception as e:
            logger.error(
                "get_products_failed",
                business_id=business_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "get_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductResponse(**result.data[0])

    def _get_in_business(self, business_id: str, product_id: str) -> ProductResponse:
        """Get a product, treating one from another business as missing."""
        product = self.get_by_id(product_id)
        if product.business_id != business_id:
            raise ProductNotFoundError(product_id)
        return product

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, business_id: str, owner_id: str, data: ProductCreate) -> ProductResponse:
        """
        Create a product in an owned business.

        Raises:
            BusinessNotFoundError: If the business is not owned by owner_id
        """
        logger.info("creating_product", business_id=business_id, name=data.name)

        self.businesses.get_owned(business_id, owner_id)

        try:
            insert_data = {
                "business_id": business_id,
                "name": data.name,
                "price": data.price,
                "description": data.description,
                "image_url": data.image_url,
            }

            result = (
                self.db.table(self.table)
                .insert(insert_data)
                .execute()
            )

            product = ProductResponse(**result.data[0])

            logger.info(
                "product_created",
                product_id=product.id,
                business_id=business_id
            )

            return product

        except Exception as e:
            logger.error(
                "create_product_failed",
                business_id=business_id,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    def update(
        self,
        business_id: str,
        product_id: str,
        owner_id: str,
        data: ProductUpdate
    ) -> ProductResponse:
        """
        Update a product the caller owns.

        Only provided fields are written.

        Raises:
            ProductNotFoundError: If product doesn't exist in this business
            BusinessNotFoundError: If the business is not owned by owner_id
        """
        logger.info("updating_product", product_id=product_id)

        existing = self._get_in_business(business_id, product_id)
        self.businesses.get_owned(business_id, owner_id)

        update_data = data.model_dump(exclude_none=True)
        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", product_id)
                .execute()
            )

            product = ProductResponse(**result.data[0])

            logger.info(
                "product_updated",
                product_id=product_id,
                fields=list(update_data.keys())
            )

            return product

        except Exception as e:
            logger.error(
                "update_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def delete(self, business_id: str, product_id: str, owner_id: str) -> bool:
        """
        Delete a product the caller owns.

        Raises:
            ProductNotFoundError: If product doesn't exist in this business
            BusinessNotFoundError: If the business is not owned by owner_id
        """
        logger.info("deleting_product", product_id=product_id)

        self._get_in_business(business_id, product_id)
        self.businesses.get_owned(business_id, owner_id)

        try:
            self.db.table(self.table).delete().eq("id", product_id).execute()

            logger.info("product_deleted", product_id=product_id)

            return True

        except Exception as e:
            logger.error(
                "delete_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("delete", str(e))

    # ===================
    # BULK OPERATIONS
    # ===================

    def bulk_insert(
        self,
        business_id: str,
        owner_id: str,
        records: list[ProductImportRecord]
    ) -> int:
        """
        Insert imported products in one request.

        Ownership is verified before anything is written. The whole list goes
        to the database as a single insert, so it either lands or fails as one.

        Args:
            business_id: Business UUID the products belong to
            owner_id: Authenticated user UUID
            records: Products built from confirmed drafts

        Returns:
            Number of rows the database reports as inserted

        Raises:
            BusinessNotFoundError: If the business is not owned by owner_id
            DatabaseError: If the insert fails
        """
        logger.info("bulk_insert_products", business_id=business_id, count=len(records))

        if not records:
            return 0

        self.businesses.get_owned(business_id, owner_id)

        rows = [
            {
                "business_id": business_id,
                "name": record.name,
                "price": record.price,
                "description": record.description,
                "image_url": record.image_url,
            }
            for record in records
        ]

        try:
            result = self.db.table(self.table).insert(rows).execute()
        except Exception as e:
            logger.error(
                "bulk_insert_products_failed",
                business_id=business_id,
                count=len(rows),
                error=str(e)
            )
            raise DatabaseError("insert", str(e), details={"count": len(rows)})

        inserted = len(result.data or [])

        logger.info(
            "bulk_insert_complete",
            business_id=business_id,
            requested=len(rows),
            inserted=inserted
        )

        return inserted


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
