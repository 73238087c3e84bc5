"""
Inventory import workflow.

Drives one CSV import from upload to committed products:

    upload -> preview -> importing -> done
                 |
                 +-> upload   (pick a different file)

Each step is its own state object carrying only what that step needs.
Nothing is written until commit(), which sends every selected valid draft
to ProductService.bulk_insert in a single call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional, Union
import structlog

from parsers.csv_parser import (
    DetectedColumns,
    ParsedProduct,
    decode_upload,
    detect_file_type,
    parse_inventory_csv,
    parse_price,
)
from models.product import NAME_MAX_LENGTH, ProductImportRecord
from services.product_service import ProductService, get_product_service
from utils.text_utils import clean_optional_text
from exceptions import (
    AppError,
    DraftNotFoundError,
    ImportInProgressError,
    InvalidImportStateError,
)

logger = structlog.get_logger(__name__)


NOT_CSV_ERROR = "Please upload a CSV file. You can export to CSV from Excel or Google Sheets."
NO_VALID_SELECTED_ERROR = "No valid products selected"
NAME_REQUIRED_ERROR = "Name is required"
PRICE_REQUIRED_ERROR = "Valid price is required"
NAME_TOO_LONG_ERROR = f"Name must be at most {NAME_MAX_LENGTH} characters"


class ImportStep(str, Enum):
    """Steps of the import workflow."""
    UPLOAD = "upload"
    PREVIEW = "preview"
    IMPORTING = "importing"
    DONE = "done"


# ===================
# DRAFTS
# ===================

def validate_draft_fields(name: str, price: str) -> list[str]:
    """
    Check the fields a product cannot be created without.

    Price text goes through the same currency-aware parsing as the CSV
    import, so "$12.50" typed into a draft is as valid as it was in the file.
    """
    errors: list[str] = []
    if not name.strip():
        errors.append(NAME_REQUIRED_ERROR)
    elif len(name.strip()) > NAME_MAX_LENGTH:
        errors.append(NAME_TOO_LONG_ERROR)
    price_value = parse_price(price)
    if price_value is None or price_value <= 0:
        errors.append(PRICE_REQUIRED_ERROR)
    return errors


def format_price(price: Optional[float]) -> str:
    """Render a parsed price back into editable text ("12.5", "40")."""
    if price is None:
        return ""
    text = repr(price)
    return text[:-2] if text.endswith(".0") else text


@dataclass
class Draft:
    """Editable staging copy of one parsed row."""
    id: str
    row_index: int
    name: str
    price: str
    description: str
    image_url: str
    is_valid: bool
    errors: list[str]
    selected: bool

    @classmethod
    def from_parsed(cls, product: ParsedProduct, position: int) -> "Draft":
        """
        Stage a parsed row.

        Parse errors come first, followed by every draft rule the row breaks,
        so all problems show up at once. Valid drafts start selected.
        """
        price_text = format_price(product.price)
        errors = list(product.errors)
        for error in validate_draft_fields(product.name, price_text):
            if error not in errors:
                errors.append(error)
        is_valid = not errors
        return cls(
            id=f"draft-{position}",
            row_index=product.row_index,
            name=product.name,
            price=price_text,
            description=product.description or "",
            image_url=product.image_url or "",
            is_valid=is_valid,
            errors=errors,
            selected=is_valid,
        )

    def revalidate(self) -> None:
        self.errors = validate_draft_fields(self.name, self.price)
        self.is_valid = not self.errors

    def to_record(self) -> ProductImportRecord:
        return ProductImportRecord(
            name=self.name.strip(),
            price=parse_price(self.price),
            description=clean_optional_text(self.description),
            image_url=clean_optional_text(self.image_url),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "row_index": self.row_index,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image_url": self.image_url,
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "selected": self.selected,
        }


# ===================
# STATES
# ===================

@dataclass
class UploadState:
    """Waiting for a file. errors holds why the last file was rejected."""
    step: ClassVar[ImportStep] = ImportStep.UPLOAD
    errors: list[str] = field(default_factory=list)


@dataclass
class PreviewState:
    """Drafts staged for review. error holds the last failed commit's message."""
    step: ClassVar[ImportStep] = ImportStep.PREVIEW
    drafts: list[Draft]
    warnings: list[str] = field(default_factory=list)
    detected_columns: DetectedColumns = field(default_factory=DetectedColumns)
    error: Optional[str] = None


@dataclass
class ImportingState:
    """Commit outstanding. Holds the preview to return to on failure."""
    step: ClassVar[ImportStep] = ImportStep.IMPORTING
    preview: PreviewState

    @property
    def drafts(self) -> list[Draft]:
        return self.preview.drafts


@dataclass
class DoneState:
    """Commit succeeded."""
    step: ClassVar[ImportStep] = ImportStep.DONE
    imported_count: int


ImportState = Union[UploadState, PreviewState, ImportingState, DoneState]


# ===================
# ORCHESTRATOR
# ===================

class ImportOrchestrator:
    """
    One import session for one business.

    Args:
        business_id: Business the products will be created in
        owner_id: User running the import
        product_service: Persistence used at commit; defaults to the shared ProductService
    """

    def __init__(
        self,
        business_id: str,
        owner_id: str,
        product_service: Optional[ProductService] = None,
    ):
        self.business_id = business_id
        self.owner_id = owner_id
        self._product_service = product_service
        self.state: ImportState = UploadState()

    @property
    def step(self) -> ImportStep:
        return self.state.step

    @property
    def drafts(self) -> list[Draft]:
        if isinstance(self.state, (PreviewState, ImportingState)):
            return self.state.drafts
        return []

    @property
    def valid_count(self) -> int:
        return sum(1 for d in self.drafts if d.is_valid)

    @property
    def selected_count(self) -> int:
        return sum(1 for d in self.drafts if d.selected and d.is_valid)

    # ===================
    # UPLOAD
    # ===================

    def accept_file(self, filename: str, content: Union[str, bytes]) -> ImportState:
        """
        Parse an uploaded file and stage its rows.

        Rejected files (wrong extension, fewer than two lines) leave the
        session in the upload step with the reasons in state.errors.
        """
        self._require(UploadState, "upload a file")

        logger.info(
            "import_file_received",
            business_id=self.business_id,
            filename=filename
        )

        if detect_file_type(filename) != "csv":
            logger.warning("import_file_rejected", filename=filename, reason="not_csv")
            self.state = UploadState(errors=[NOT_CSV_ERROR])
            return self.state

        text = decode_upload(content) if isinstance(content, bytes) else content
        result = parse_inventory_csv(text)

        if not result.success:
            logger.warning("import_file_rejected", filename=filename, reason="parse_failed")
            self.state = UploadState(errors=list(result.errors))
            return self.state

        drafts = [Draft.from_parsed(p, idx) for idx, p in enumerate(result.products)]
        self.state = PreviewState(
            drafts=drafts,
            warnings=list(result.errors),
            detected_columns=result.detected_columns,
        )

        logger.info(
            "import_preview_ready",
            business_id=self.business_id,
            drafts=len(drafts),
            valid=self.valid_count
        )

        return self.state

    def reset(self) -> ImportState:
        """Drop the staged drafts and go back to the upload step."""
        self._require(PreviewState, "upload a different file")
        logger.info("import_reset", business_id=self.business_id)
        self.state = UploadState()
        return self.state

    # ===================
    # EDITING
    # ===================

    def update_draft(
        self,
        draft_id: str,
        name: Optional[str] = None,
        price: Optional[str] = None,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Draft:
        """
        Edit a draft and re-validate it from its current values.

        Selection is not changed here, even if the draft becomes invalid;
        commit() only takes drafts that are both selected and valid.
        """
        draft = self._find_draft(draft_id, "edit drafts")

        if name is not None:
            draft.name = name
        if price is not None:
            draft.price = price
        if description is not None:
            draft.description = description
        if image_url is not None:
            draft.image_url = image_url

        draft.revalidate()

        logger.debug(
            "draft_updated",
            draft_id=draft_id,
            is_valid=draft.is_valid
        )

        return draft

    def set_selected(self, draft_id: str, selected: bool) -> Draft:
        """Select or deselect a draft. Selecting an invalid draft does nothing."""
        draft = self._find_draft(draft_id, "change selection")

        if selected and not draft.is_valid:
            logger.debug("invalid_draft_not_selected", draft_id=draft_id)
            return draft

        draft.selected = selected
        return draft

    def select_all(self) -> None:
        """Select every valid draft; invalid drafts are left alone."""
        preview = self._require(PreviewState, "change selection")
        for draft in preview.drafts:
            if draft.is_valid:
                draft.selected = True

    def deselect_all(self) -> None:
        preview = self._require(PreviewState, "change selection")
        for draft in preview.drafts:
            draft.selected = False

    # ===================
    # COMMIT
    # ===================

    def commit(self) -> ImportState:
        """
        Insert every selected valid draft as one batch.

        Returns:
            DoneState on success. On an empty selection or a failed insert,
            the same PreviewState (drafts untouched) with error set.

        Raises:
            ImportInProgressError: If a commit is already outstanding
            InvalidImportStateError: If there is nothing staged
        """
        if isinstance(self.state, ImportingState):
            raise ImportInProgressError()

        preview = self._require(PreviewState, "import")
        chosen = [d for d in preview.drafts if d.selected and d.is_valid]

        if not chosen:
            preview.error = NO_VALID_SELECTED_ERROR
            logger.info("import_nothing_selected", business_id=self.business_id)
            return preview

        records = [d.to_record() for d in chosen]
        preview.error = None
        self.state = ImportingState(preview=preview)

        logger.info(
            "import_commit_started",
            business_id=self.business_id,
            count=len(records)
        )

        try:
            inserted = self._products().bulk_insert(self.business_id, self.owner_id, records)
        except AppError as e:
            logger.warning(
                "import_commit_failed",
                business_id=self.business_id,
                code=e.code,
                error=e.message
            )
            preview.error = e.message
            self.state = preview
            return self.state
        except Exception as e:
            logger.error(
                "import_commit_failed",
                business_id=self.business_id,
                error=str(e),
                error_type=type(e).__name__
            )
            preview.error = str(e)
            self.state = preview
            return self.state

        logger.info(
            "import_commit_complete",
            business_id=self.business_id,
            requested=len(records),
            inserted=inserted
        )

        self.state = DoneState(imported_count=inserted)
        return self.state

    # ===================
    # SERIALIZATION
    # ===================

    def to_dict(self) -> dict:
        """Snapshot of the session for API responses."""
        state = self.state
        preview = state.preview if isinstance(state, ImportingState) else state

        return {
            "business_id": self.business_id,
            "step": self.step.value,
            "errors": list(state.errors) if isinstance(state, UploadState) else [],
            "warnings": list(preview.warnings) if isinstance(preview, PreviewState) else [],
            "detected_columns": (
                preview.detected_columns.to_dict() if isinstance(preview, PreviewState) else None
            ),
            "drafts": [d.to_dict() for d in self.drafts],
            "error": preview.error if isinstance(preview, PreviewState) else None,
            "valid_count": self.valid_count,
            "selected_count": self.selected_count,
            "imported_count": state.imported_count if isinstance(state, DoneState) else None,
        }

    # ===================
    # HELPERS
    # ===================

    def _require(self, state_type: type, action: str):
        if not isinstance(self.state, state_type):
            raise InvalidImportStateError(action, self.step.value)
        return self.state

    def _find_draft(self, draft_id: str, action: str) -> Draft:
        preview = self._require(PreviewState, action)
        for draft in preview.drafts:
            if draft.id == draft_id:
                return draft
        raise DraftNotFoundError(draft_id)

    def _products(self) -> ProductService:
        if self._product_service is None:
            self._product_service = get_product_service()
        return self._product_service
