"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DatabaseError,

    # Businesses
    BusinessNotFoundError,

    # Products
    ProductNotFoundError,

    # Inventory import
    ImportFileRejectedError,
    ImportSessionNotFoundError,
    DraftNotFoundError,
    InvalidImportStateError,
    ImportInProgressError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",

    # Businesses
    "BusinessNotFoundError",

    # Products
    "ProductNotFoundError",

    # Inventory import
    "ImportFileRejectedError",
    "ImportSessionNotFoundError",
    "DraftNotFoundError",
    "InvalidImportStateError",
    "ImportInProgressError",
]
