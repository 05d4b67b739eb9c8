# backend/app/routers/changes.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_principal
from ..db import get_db
from ..schemas import ChangeEventOut
from ..services.events_facade import feed

router = APIRouter(prefix="/changes", tags=["changes"])


@router.get("", response_model=list[ChangeEventOut])
def list_changes(
    since_id: int = Query(default=0, ge=0),
    project_id: int | None = Query(default=None),
    limit: int = Query(default=500, ge=1, le=5000),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    """
    Poll for changes after `since_id` (ascending). Clients keep the last id
    they saw, re-fetch the affected project and re-run the economics.
    """
    rows = feed.list(db, org_id=p.org_id, since_id=since_id, project_id=project_id, limit=limit)
    return [asdict(r) for r in rows]
