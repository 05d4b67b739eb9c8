# backend/app/domain/events.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models import ChangeEvent

CHANGE_ACTIONS = ("insert", "update", "delete")
CHANGE_ENTITIES = (
    "project",
    "budget_item",
    "vendor",
    "draw",
    "budget_template",
    "vendor_tag",
    "vendor_contact",
    "journal_page",
)


def emit_change_event(
    db: Session,
    *,
    org_id: int,
    actor_user_id: Optional[int],
    entity_type: str,
    entity_id: Any,
    action: str,
    project_id: Optional[int] = None,
    payload: Optional[dict[str, Any]] = None,
) -> ChangeEvent:
    """
    Append one row to the change feed.

    NOTE:
    - Does NOT commit. Adds + flushes only (the id is assigned on flush).
    - Callers commit together with the entity write.
    """
    if entity_type not in CHANGE_ENTITIES:
        raise ValueError(f"unknown change entity_type: {entity_type!r}")
    if action not in CHANGE_ACTIONS:
        raise ValueError(f"unknown change action: {action!r}")

    ev = ChangeEvent(
        org_id=int(org_id),
        actor_user_id=int(actor_user_id) if actor_user_id is not None else None,
        project_id=int(project_id) if project_id is not None else None,
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        payload_json=json.dumps(payload or {}, ensure_ascii=False, default=str),
        created_at=datetime.utcnow(),
    )
    db.add(ev)
    db.flush()
    return ev
