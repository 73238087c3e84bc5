"""
Business schemas.

Businesses own the product catalogue; every product write is scoped to one.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class BusinessResponse(BaseSchema, TimestampMixin):
    """Business row."""

    id: str = Field(..., description="Business UUID")
    owner_id: str = Field(..., description="UUID of the owning user")
    name: str = Field(..., description="Business name")
    category: Optional[str] = Field(None, description="Business category")
    address: Optional[str] = Field(None, description="Street address")
