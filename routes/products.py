"""
Product API routes.

Products are listed per business; writes require the business owner.
"""

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse
import structlog

from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from services.product_service import get_product_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("/{business_id}/products", response_model=ProductListResponse)
def list_products(business_id: str):
    """List a business's products, newest first."""
    try:
        service = get_product_service()
        products = service.get_by_business(business_id)
        return ProductListResponse(data=products, total=len(products))

    except Exception as e:
        return handle_error(e)


@router.post("/{business_id}/products", response_model=ProductResponse, status_code=201)
def create_product(
    business_id: str,
    data: ProductCreate,
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """
    Create a single product.

    Raises:
        404: Business not found or not owned by caller
        422: Validation error
    """
    try:
        service = get_product_service()
        return service.create(business_id, owner_id, data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{business_id}/products/{product_id}", response_model=ProductResponse)
def update_product(
    business_id: str,
    product_id: str,
    data: ProductUpdate,
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """
    Update a product. Only provided fields are updated.

    Raises:
        404: Product not found, or business not owned by caller
    """
    try:
        service = get_product_service()
        return service.update(business_id, product_id, owner_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{business_id}/products/{product_id}", status_code=204)
def delete_product(
    business_id: str,
    product_id: str,
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """
    Delete a product.

    Raises:
        404: Product not found, or business not owned by caller
    """
    try:
        service = get_product_service()
        service.delete(business_id, product_id, owner_id)
        return None  # 204 No Content

    except Exception as e:
        return handle_error(e)
