# backend/app/routers/vendor_contacts.py
from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import reject_nulls
from ..models import VendorContact
from ..schemas import VendorContactCreate, VendorContactOut, VendorContactUpdate
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_project, must_get_vendor, must_get_vendor_contact

router = APIRouter(prefix="/vendor-contacts", tags=["vendors"])


def _record(db: Session, p, row: VendorContact, action: str, before=None, after=None) -> None:
    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="vendor_contact",
        entity_id=row.id,
        action=action,
        project_id=row.project_id,
        before=before,
        after=after,
    )


@router.post("", response_model=VendorContactOut)
def log_vendor_contact(payload: VendorContactCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    must_get_vendor(db, org_id=p.org_id, vendor_id=payload.vendor_id)
    if payload.project_id is not None:
        must_get_project(db, org_id=p.org_id, project_id=payload.project_id)

    data = payload.model_dump(exclude_none=True)
    data.setdefault("contact_date", datetime.utcnow())

    row = VendorContact(org_id=p.org_id, **data)
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.get("", response_model=list[VendorContactOut])
def list_vendor_contacts(
    vendor_id: int | None = Query(default=None),
    project_id: int | None = Query(default=None),
    contact_type: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    q = select(VendorContact).where(VendorContact.org_id == p.org_id)
    if vendor_id is not None:
        q = q.where(VendorContact.vendor_id == vendor_id)
    if project_id is not None:
        q = q.where(VendorContact.project_id == project_id)
    if contact_type:
        q = q.where(VendorContact.contact_type == contact_type)
    # newest first
    return db.scalars(q.order_by(VendorContact.contact_date.desc(), VendorContact.id.desc()).limit(limit)).all()


@router.get("/follow-ups", response_model=list[VendorContactOut])
def list_pending_follow_ups(
    due_by: date | None = Query(default=None, description="only follow-ups due on or before this date"),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    q = select(VendorContact).where(
        VendorContact.org_id == p.org_id,
        VendorContact.follow_up_date.is_not(None),
        VendorContact.follow_up_completed.is_(False),
    )
    if due_by is not None:
        q = q.where(VendorContact.follow_up_date <= due_by)
    return db.scalars(q.order_by(VendorContact.follow_up_date.asc(), VendorContact.id.asc())).all()


@router.get("/{contact_id}", response_model=VendorContactOut)
def get_vendor_contact(contact_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_vendor_contact(db, org_id=p.org_id, contact_id=contact_id)


@router.patch("/{contact_id}", response_model=VendorContactOut)
def update_vendor_contact(
    contact_id: int,
    payload: VendorContactUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_vendor_contact(db, org_id=p.org_id, contact_id=contact_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, ("contact_type", "contact_date", "follow_up_completed"))
    if changes.get("project_id") is not None:
        must_get_project(db, org_id=p.org_id, project_id=changes["project_id"])
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{contact_id}", response_model=dict)
def delete_vendor_contact(contact_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_vendor_contact(db, org_id=p.org_id, contact_id=contact_id)
    before = snapshot(row)

    db.delete(row)
    db.flush()

    _record(db, p, row, "delete", before=before)
    db.commit()
    return {"ok": True, "id": contact_id}
