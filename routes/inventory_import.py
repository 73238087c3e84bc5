"""
Inventory import API routes.

A session is created by uploading a CSV, edited in the preview step, and
discarded after a successful commit or a cancel.
"""

from fastapi import APIRouter, File, Form, Header, UploadFile
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.inventory_import import (
    DraftSelection,
    DraftUpdate,
    ImportSessionResponse,
)
from services import preview_cache_service
from services.business_service import get_business_service
from services.import_service import ImportOrchestrator, ImportStep
from exceptions import (
    AppError,
    ImportFileRejectedError,
    ImportSessionNotFoundError,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/imports", tags=["Inventory Import"])

# Sync handlers: the Supabase client blocks


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
# HELPERS
# ===================

def _get_session(session_id: str, owner_id: str) -> ImportOrchestrator:
    """Load a live session belonging to owner_id."""
    orchestrator = preview_cache_service.retrieve_preview(session_id)
    if orchestrator is None or orchestrator.owner_id != owner_id:
        raise ImportSessionNotFoundError(session_id)
    return orchestrator


def _session_response(
    session_id: Optional[str],
    orchestrator: ImportOrchestrator
) -> ImportSessionResponse:
    return ImportSessionResponse(session_id=session_id, **orchestrator.to_dict())


def _accept_upload(orchestrator: ImportOrchestrator, file: UploadFile) -> None:
    """Feed an uploaded file to the session; raise if it was rejected."""
    content = file.file.read()
    orchestrator.accept_file(file.filename or "", content)

    if orchestrator.step != ImportStep.PREVIEW:
        raise ImportFileRejectedError(orchestrator.state.errors, file.filename)


# ===================
# ROUTES
# ===================

@router.post("", response_model=ImportSessionResponse, status_code=201)
def start_import(
    business_id: str = Form(..., description="Business to import into"),
    file: UploadFile = File(..., description="CSV export"),
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """
    Upload a CSV and stage its rows for review.

    Raises:
        404: Business not found or not owned by caller
        422: Not a CSV, or fewer than a header and one data row
    """
    logger.info(
        "import_upload_started",
        business_id=business_id,
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        get_business_service().get_owned(business_id, owner_id)

        orchestrator = ImportOrchestrator(business_id, owner_id)
        _accept_upload(orchestrator, file)

        session_id = preview_cache_service.store_preview(orchestrator)

        logger.info(
            "import_session_created",
            session_id=session_id,
            drafts=len(orchestrator.drafts)
        )

        return _session_response(session_id, orchestrator)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=ImportSessionResponse)
def get_import(session_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Get the current state of an import session."""
    try:
        return _session_response(session_id, _get_session(session_id, owner_id))
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/file", response_model=ImportSessionResponse)
def upload_file(
    session_id: str,
    file: UploadFile = File(...),
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """
    Upload a file into a session that is back in the upload step.

    Raises:
        409: Session is not in the upload step
        422: File rejected (session stays in upload)
    """
    try:
        orchestrator = _get_session(session_id, owner_id)
        _accept_upload(orchestrator, file)
        return _session_response(session_id, orchestrator)
    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}/drafts/{draft_id}", response_model=ImportSessionResponse)
def update_draft(
    session_id: str,
    draft_id: str,
    data: DraftUpdate,
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """Edit a draft; it is re-validated immediately."""
    try:
        orchestrator = _get_session(session_id, owner_id)
        orchestrator.update_draft(draft_id, **data.model_dump(exclude_none=True))
        return _session_response(session_id, orchestrator)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/drafts/{draft_id}/select", response_model=ImportSessionResponse)
def select_draft(
    session_id: str,
    draft_id: str,
    data: DraftSelection,
    owner_id: str = Header(..., alias="X-Owner-Id"),
):
    """Select or deselect one draft. Invalid drafts cannot be selected."""
    try:
        orchestrator = _get_session(session_id, owner_id)
        orchestrator.set_selected(draft_id, data.selected)
        return _session_response(session_id, orchestrator)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/select-all", response_model=ImportSessionResponse)
def select_all(session_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Select every valid draft."""
    try:
        orchestrator = _get_session(session_id, owner_id)
        orchestrator.select_all()
        return _session_response(session_id, orchestrator)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/deselect-all", response_model=ImportSessionResponse)
def deselect_all(session_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Deselect every draft."""
    try:
        orchestrator = _get_session(session_id, owner_id)
        orchestrator.deselect_all()
        return _session_response(session_id, orchestrator)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/reset", response_model=ImportSessionResponse)
def reset_import(session_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Discard the staged drafts to upload a different file."""
    try:
        orchestrator = _get_session(session_id, owner_id)
        orchestrator.reset()
        return _session_response(session_id, orchestrator)
    except Exception as e:
        return handle_error(e)


@router.post("/{session_id}/commit", response_model=ImportSessionResponse)
def commit_import(session_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """
    Create products from every selected valid draft.

    A failed or empty commit returns the preview with `error` set and the
    drafts unchanged. A successful one ends the session.

    Raises:
        409: Nothing staged, or a commit is already running
    """
    try:
        orchestrator = _get_session(session_id, owner_id)
        orchestrator.commit()

        if orchestrator.step == ImportStep.DONE:
            preview_cache_service.delete_preview(session_id)
            logger.info(
                "import_session_completed",
                session_id=session_id,
                imported=orchestrator.state.imported_count
            )
            return _session_response(None, orchestrator)

        return _session_response(session_id, orchestrator)

    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}", status_code=204)
def cancel_import(session_id: str, owner_id: str = Header(..., alias="X-Owner-Id")):
    """Cancel an import session without writing anything."""
    try:
        _get_session(session_id, owner_id)
        preview_cache_service.delete_preview(session_id)
        logger.info("import_session_cancelled", session_id=session_id)
        return None  # 204 No Content
    except Exception as e:
        return handle_error(e)
