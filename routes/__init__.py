"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.inventory_import import router as inventory_import_router

__all__ = [
    "products_router",
    "inventory_import_router",
]
