"""
Temporary storage for import sessions.
Keeps staged imports in memory with TTL expiration until confirmed or cancelled.
Single-process only; sessions do not survive a restart.
"""
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

import structlog

from config import settings

logger = structlog.get_logger(__name__)

_cache: dict[str, tuple[datetime, Any]] = {}


def store_preview(data: Any, ttl_minutes: Optional[int] = None) -> str:
    """Store a session, return its preview_id."""
    ttl = ttl_minutes if ttl_minutes is not None else settings.import_preview_ttl_minutes
    preview_id = str(uuid.uuid4())
    expires_at = datetime.now() + timedelta(minutes=ttl)
    _cache[preview_id] = (expires_at, data)
    _cleanup_expired()
    logger.debug("preview_stored", preview_id=preview_id, ttl_minutes=ttl)
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[Any]:
    """Retrieve a session by preview_id. Returns None if expired/not found."""
    entry = _cache.get(preview_id)
    if entry is None:
        return None
    expires_at, data = entry
    if datetime.now() > expires_at:
        del _cache[preview_id]
        logger.info("preview_expired", preview_id=preview_id)
        return None
    return data


def delete_preview(preview_id: str) -> None:
    """Remove a session after commit or cancel."""
    _cache.pop(preview_id, None)


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now()
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
