from __future__ import annotations

import logging
from typing import Any

from app.routevault.models import LogEntry, StoreDocument, User, time_id, utcnow_iso
from app.routevault.security import Claims

LOG_LIMIT = 1000

logger = logging.getLogger(__name__)


def record_event(
    doc: StoreDocument,
    *,
    actor: Claims | User | None,
    action: str,
    details: dict[str, Any] | None = None,
) -> LogEntry:
    """
    Append-only audit event helper. Newest entries go first; the tail is dropped
    once the log holds more than LOG_LIMIT entries.
    """
    entry = LogEntry(
        id=time_id(e.id for e in doc.logs[:1]),
        timestamp=utcnow_iso(),
        action=action,
        user=actor.username if actor else None,
        user_id=actor.id if actor else None,
        role=actor.role.value if actor else None,
        details=dict(details or {}),
    )
    doc.logs.insert(0, entry)
    if len(doc.logs) > LOG_LIMIT:
        del doc.logs[LOG_LIMIT:]
    logger.info("audit: %s (%s) - %s", entry.user, entry.role, action)
    return entry


def list_events(doc: StoreDocument) -> list[LogEntry]:
    return list(doc.logs)
