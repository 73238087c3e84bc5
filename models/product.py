"""
Product schemas for validation and serialization.
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import BaseSchema, TimestampMixin

NAME_MAX_LENGTH = 200


class ProductCreate(BaseSchema):
    """
    Create a single product.

    Required: name, price
    Optional: description, image_url
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Product name",
        examples=["Sourdough Loaf", "Cold Brew (32oz)"]
    )
    price: float = Field(
        ...,
        ge=0,
        description="Unit price"
    )
    description: Optional[str] = Field(
        None,
        description="Free-text description"
    )
    image_url: Optional[str] = Field(
        None,
        description="Public image URL"
    )

    @field_validator("description", "image_url")
    @classmethod
    def empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Blank optional text is stored as NULL."""
        return v or None


class ProductUpdate(BaseSchema):
    """
    Update existing product.

    All fields optional - only provided fields are updated.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductImportRecord(BaseSchema):
    """
    One product produced by a confirmed CSV import.

    Built from a valid draft; the business scope is supplied separately.
    """

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    price: float = Field(..., gt=0)
    description: Optional[str] = None
    image_url: Optional[str] = None


class ProductResponse(BaseSchema, TimestampMixin):
    """
    Product response with all fields.

    Used for GET responses.
    """

    id: str = Field(..., description="Product UUID")
    business_id: str = Field(..., description="Owning business UUID")
    name: str = Field(..., description="Product name")
    price: float = Field(..., description="Unit price")
    description: Optional[str] = Field(None, description="Description")
    image_url: Optional[str] = Field(None, description="Image URL")


class ProductListResponse(BaseSchema):
    """Products of one business."""

    data: list[ProductResponse]
    total: int
