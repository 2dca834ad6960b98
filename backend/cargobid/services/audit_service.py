# Overview: Service-layer operations for the audit log; append-only writes and reads.

from __future__ import annotations

from ..extensions import db
from ..models import AuditLog
"""
Audit Log Invariants

- Append-only: rows are never updated or deleted.
- Entries are written inside the same DB transaction as the action they record;
  the caller commits.
- user_id is the authenticated actor, or None for system actions.
"""


def record_audit(user_id: int | None, action: str, details: str | None = None) -> AuditLog:
    entry = AuditLog(user_id=user_id, action=action, details=details)
    db.session.add(entry)
    db.session.flush()  # ensures entry.id is assigned without committing
    return entry


def list_audit_logs(
    *,
    action: str | None = None,
    user_id: int | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[AuditLog], int]:
    """Newest first. Returns (entries, total matching)."""
    query = db.session.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action.upper())
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)

    total = query.count()
    entries = (
        query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return entries, total
