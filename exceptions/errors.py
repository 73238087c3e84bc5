"""
Custom exception classes for the application.

Every error carries a machine-readable code and an HTTP status so routes can
turn it into the standard error body with to_dict().
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource or state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# BUSINESS ERRORS
# ===================

class BusinessNotFoundError(NotFoundError):
    """Business missing, or not owned by the caller."""

    def __init__(self, business_id: str):
        super().__init__(
            resource="Business",
            identifier=business_id,
            code="BUSINESS_NOT_FOUND"
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


# ===================
# INVENTORY IMPORT ERRORS
# ===================

class ImportFileRejectedError(ValidationError):
    """Uploaded file could not be staged (wrong type or too few lines)."""

    def __init__(self, errors: list[str], filename: Optional[str] = None):
        super().__init__(
            code="IMPORT_FILE_REJECTED",
            message=errors[0] if errors else "File could not be imported",
            details={"errors": errors, "filename": filename}
        )


class ImportSessionNotFoundError(NotFoundError):
    """Import session expired, cancelled, or never existed."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Import session",
            identifier=session_id,
            code="IMPORT_SESSION_NOT_FOUND"
        )


class DraftNotFoundError(NotFoundError):
    """Draft id not present in the current preview."""

    def __init__(self, draft_id: str):
        super().__init__(
            resource="Draft",
            identifier=draft_id,
            code="DRAFT_NOT_FOUND"
        )


class InvalidImportStateError(ConflictError):
    """Action not allowed in the session's current step."""

    def __init__(self, action: str, current_step: str):
        super().__init__(
            code="INVALID_IMPORT_STATE",
            message=f"Cannot {action} while import is in '{current_step}' step",
            details={"action": action, "current_step": current_step}
        )


class ImportInProgressError(ConflictError):
    """A commit is already outstanding for this session."""

    def __init__(self, session_id: Optional[str] = None):
        super().__init__(
            code="IMPORT_IN_PROGRESS",
            message="An import is already in progress",
            details={"session_id": session_id}
        )
