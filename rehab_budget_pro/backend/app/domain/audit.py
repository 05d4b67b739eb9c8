# backend/app/domain/audit.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models import AuditEvent

# Bumped on every write; recording them would make every update look like a change.
VOLATILE_FIELDS = frozenset({"created_at", "updated_at"})


def changed_fields(before: dict[str, Any], after: dict[str, Any]) -> list[str]:
    keys = (set(before) | set(after)) - VOLATILE_FIELDS
    return sorted(k for k in keys if before.get(k) != after.get(k))


def _as_json(snap: Optional[dict[str, Any]], keys: Optional[list[str]] = None) -> Optional[str]:
    if snap is None:
        return None
    if keys is not None:
        snap = {k: snap.get(k) for k in keys}
    else:
        snap = {k: v for k, v in snap.items() if k not in VOLATILE_FIELDS}
    return json.dumps(snap, sort_keys=True, default=str)


def audit_write(
    db: Session,
    *,
    org_id: int,
    actor_user_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: Any,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    commit: bool = False,
) -> AuditEvent:
    """
    Persist one audit row for a budget/deal mutation.

    Inserts keep the full `after` snapshot and deletes the full `before`.
    Updates keep only the fields whose value changed, on both sides, so a
    reviewer sees "arv: 300000 -> 325000" rather than two whole rows.

    Flushes nothing and commits only when asked: the caller's entity write,
    change event and audit row share one transaction.
    """
    keys = changed_fields(before, after) if before is not None and after is not None else None
    row = AuditEvent(
        org_id=int(org_id),
        actor_user_id=int(actor_user_id) if actor_user_id is not None else None,
        action=str(action),
        entity_type=str(entity_type),
        entity_id=str(entity_id),
        before_json=_as_json(before, keys),
        after_json=_as_json(after, keys),
        created_at=datetime.utcnow(),
    )
    db.add(row)
    if commit:
        db.commit()
        db.refresh(row)
    return row
