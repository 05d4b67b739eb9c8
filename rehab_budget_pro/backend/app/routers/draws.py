# backend/app/routers/draws.py
from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import reject_nulls
from ..domain.lifecycle import ensure_draw_transition
from ..models import Draw
from ..schemas import DrawCreate, DrawOut, DrawRollupOut, DrawStatusChange, DrawUpdate
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_draw, must_get_project, must_get_vendor
from ..services.rollups import next_draw_number_for, project_draw_rollup

router = APIRouter(prefix="/draws", tags=["draws"])


def _record(db: Session, p, row: Draw, action: str, before=None, after=None) -> None:
    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="draw",
        entity_id=row.id,
        action=action,
        project_id=row.project_id,
        before=before,
        after=after,
    )


@router.post("", response_model=DrawOut)
def create_draw(payload: DrawCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    must_get_project(db, org_id=p.org_id, project_id=payload.project_id)
    if payload.vendor_id is not None:
        must_get_vendor(db, org_id=p.org_id, vendor_id=payload.vendor_id)

    data = payload.model_dump(exclude_none=True)
    data.setdefault("date_requested", date.today())
    if data["status"] == "paid":
        data.setdefault("date_paid", date.today())

    row = Draw(
        org_id=p.org_id,
        draw_number=next_draw_number_for(db, org_id=p.org_id, project_id=payload.project_id),
        **data,
    )
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.get("", response_model=list[DrawOut])
def list_draws(project_id: int = Query(...), db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_project(db, org_id=p.org_id, project_id=project_id)
    return db.scalars(
        select(Draw)
        .where(Draw.org_id == p.org_id, Draw.project_id == project_id)
        .order_by(Draw.draw_number.asc())
    ).all()


@router.get("/rollup", response_model=DrawRollupOut)
def get_draw_rollup(project_id: int = Query(...), db: Session = Depends(get_db), p=Depends(get_principal)):
    project = must_get_project(db, org_id=p.org_id, project_id=project_id)
    return asdict(project_draw_rollup(db, org_id=p.org_id, project=project))


@router.get("/{draw_id}", response_model=DrawOut)
def get_draw(draw_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_draw(db, org_id=p.org_id, draw_id=draw_id)


@router.patch("/{draw_id}", response_model=DrawOut)
def update_draw(draw_id: int, payload: DrawUpdate, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_draw(db, org_id=p.org_id, draw_id=draw_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("vendor_id") is not None:
        must_get_vendor(db, org_id=p.org_id, vendor_id=changes["vendor_id"])
    reject_nulls(changes, ("amount",))
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.post("/{draw_id}/status", response_model=DrawOut)
def change_draw_status(
    draw_id: int,
    payload: DrawStatusChange,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_draw(db, org_id=p.org_id, draw_id=draw_id)
    before = snapshot(row)

    target = ensure_draw_transition(row.status, payload.status)
    if target == row.status:
        return row

    row.status = target
    if target == "paid":
        row.date_paid = payload.date_paid or row.date_paid or date.today()
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{draw_id}", response_model=dict)
def delete_draw(draw_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_draw(db, org_id=p.org_id, draw_id=draw_id)
    before = snapshot(row)

    db.delete(row)
    db.flush()

    _record(db, p, row, "delete", before=before)
    db.commit()
    return {"ok": True, "id": draw_id}
