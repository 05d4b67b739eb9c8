# backend/app/services/events_facade.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from ..domain.audit import audit_write
from ..domain.events import emit_change_event
from ..models import ChangeEvent

log = logging.getLogger(__name__)


def snapshot(row: Any) -> dict[str, Any]:
    """Column values of an ORM row, for audit before/after and change payloads."""
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


def _loads(s: Optional[str], default: Any) -> Any:
    if not s:
        return default
    try:
        return json.loads(s)
    except ValueError:
        return default


@dataclass(frozen=True)
class ChangeEventOut:
    id: int
    org_id: int
    project_id: Optional[int]
    actor_user_id: Optional[int]
    entity_type: str
    entity_id: str
    action: str
    payload: dict[str, Any]
    created_at: Optional[datetime]


class ChangeFeed:
    """
    Routers call record() once per persisted mutation: one change event,
    one audit row, one log line. Nothing here commits.

    Routers import:
        from ..services.events_facade import feed
    """

    def record(
        self,
        db: Session,
        *,
        org_id: int,
        actor_user_id: Optional[int],
        entity_type: str,
        entity_id: Any,
        action: str,
        project_id: Optional[int] = None,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
    ) -> ChangeEvent:
        ev = emit_change_event(
            db,
            org_id=org_id,
            actor_user_id=actor_user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            project_id=project_id,
            payload=after if after is not None else before,
        )
        audit_write(
            db,
            org_id=org_id,
            actor_user_id=actor_user_id,
            action=f"{entity_type}.{action}",
            entity_type=entity_type,
            entity_id=entity_id,
            before=before,
            after=after,
        )
        log.info(
            "%s %s id=%s",
            entity_type,
            action,
            entity_id,
            extra={
                "org_id": org_id,
                "user_id": actor_user_id,
                "project_id": project_id,
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "action": action,
            },
        )
        return ev

    def list(
        self,
        db: Session,
        *,
        org_id: int,
        since_id: int = 0,
        project_id: Optional[int] = None,
        limit: int = 500,
    ) -> list[ChangeEventOut]:
        q = (
            select(ChangeEvent)
            .where(ChangeEvent.org_id == org_id, ChangeEvent.id > int(since_id))
            .order_by(ChangeEvent.id.asc())
        )
        if project_id is not None:
            q = q.where(ChangeEvent.project_id == int(project_id))

        rows = db.scalars(q.limit(int(limit))).all()
        return [
            ChangeEventOut(
                id=int(r.id),
                org_id=int(r.org_id),
                project_id=r.project_id,
                actor_user_id=r.actor_user_id,
                entity_type=str(r.entity_type),
                entity_id=str(r.entity_id),
                action=str(r.action),
                payload=_loads(r.payload_json, {}),
                created_at=r.created_at,
            )
            for r in rows
        ]


feed = ChangeFeed()
