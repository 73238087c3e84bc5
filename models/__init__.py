"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.business import BusinessResponse
from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductImportRecord,
    ProductResponse,
    ProductListResponse,
)
from models.inventory_import import (
    DraftUpdate,
    DraftSelection,
    DraftResponse,
    DetectedColumnsResponse,
    ImportSessionResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Business
    "BusinessResponse",

    # Product
    "ProductCreate",
    "ProductUpdate",
    "ProductImportRecord",
    "ProductResponse",
    "ProductListResponse",

    # Inventory import
    "DraftUpdate",
    "DraftSelection",
    "DraftResponse",
    "DetectedColumnsResponse",
    "ImportSessionResponse",
]
