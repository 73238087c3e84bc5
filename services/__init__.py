"""
Business logic services.

Each service handles one domain area.
"""

from services.business_service import BusinessService, get_business_service
from services.product_service import ProductService, get_product_service
from services.import_service import (
    ImportOrchestrator,
    ImportStep,
    Draft,
)

__all__ = [
    "BusinessService",
    "get_business_service",
    "ProductService",
    "get_product_service",
    "ImportOrchestrator",
    "ImportStep",
    "Draft",
]
