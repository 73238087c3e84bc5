"""
Inventory import API schemas.

Request bodies for editing drafts and the session snapshot returned by
every /api/imports endpoint.
"""

from pydantic import BaseModel, Field
from typing import Literal, Optional

from models.base import BaseSchema


class DraftUpdate(BaseSchema):
    """
    Edit a staged draft.

    Only provided fields change; price is raw text as typed by the user.
    """

    name: Optional[str] = Field(None, description="Product name")
    price: Optional[str] = Field(None, description="Price text, e.g. '12.50' or '$12.50'")
    description: Optional[str] = Field(None, description="Description")
    image_url: Optional[str] = Field(None, description="Image URL")


class DraftSelection(BaseModel):
    """Select or deselect one draft."""

    selected: bool


class DraftResponse(BaseModel):
    """A staged draft as shown in the preview."""

    id: str
    row_index: int = Field(..., description="1-based data row in the uploaded file")
    name: str
    price: str
    description: str
    image_url: str
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    selected: bool


class DetectedColumnsResponse(BaseModel):
    """Header matched for each product field."""

    name: Optional[str] = None
    price: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class ImportSessionResponse(BaseModel):
    """
    Snapshot of an import session.

    Fields that do not apply to the current step are empty or null.
    """

    session_id: Optional[str] = Field(None, description="Session id (null once discarded)")
    business_id: str
    step: Literal["upload", "preview", "importing", "done"]
    errors: list[str] = Field(default_factory=list, description="File-level errors (upload step)")
    warnings: list[str] = Field(default_factory=list, description="Column-detection warnings")
    detected_columns: Optional[DetectedColumnsResponse] = None
    drafts: list[DraftResponse] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Last commit failure")
    valid_count: int = 0
    selected_count: int = 0
    imported_count: Optional[int] = Field(None, description="Rows inserted (done step)")
