# backend/app/routers/vendors.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import reject_nulls
from ..models import BudgetItem, Draw, Vendor, VendorTag, VendorTagAssignment
from ..schemas import VendorCreate, VendorOut, VendorSummaryOut, VendorTagOut, VendorTagsSet, VendorUpdate
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_vendor, must_get_vendor_tag
from ..services.rollups import vendor_summary
from .vendor_tags import tag_out, vendor_counts

router = APIRouter(prefix="/vendors", tags=["vendors"])


def _tags_of(db: Session, vendor_id: int) -> list[VendorTagOut]:
    tags = db.scalars(
        select(VendorTag)
        .join(VendorTagAssignment, VendorTagAssignment.tag_id == VendorTag.id)
        .where(VendorTagAssignment.vendor_id == vendor_id)
        .order_by(VendorTag.name.asc())
    ).all()
    counts = vendor_counts(db, [int(t.id) for t in tags])
    return [tag_out(t, counts.get(int(t.id), 0)) for t in tags]


@router.post("", response_model=VendorOut)
def create_vendor(payload: VendorCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = Vendor(org_id=p.org_id, **payload.model_dump(exclude_none=True))
    db.add(row)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="vendor",
        entity_id=row.id,
        action="insert",
        after=snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("", response_model=list[VendorOut])
def list_vendors(
    trade: str | None = Query(default=None),
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
    tag_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    q = select(Vendor).where(Vendor.org_id == p.org_id)
    if tag_id is not None:
        q = q.where(Vendor.id.in_(select(VendorTagAssignment.vendor_id).where(VendorTagAssignment.tag_id == tag_id)))
    if trade:
        q = q.where(Vendor.trade == trade)
    if status:
        q = q.where(Vendor.status == status)
    if search:
        like = f"%{search.strip().lower()}%"
        q = q.where(
            or_(
                func.lower(Vendor.name).like(like),
                func.lower(func.coalesce(Vendor.contact_name, "")).like(like),
            )
        )
    return db.scalars(q.order_by(Vendor.name.asc(), Vendor.id.asc())).all()


@router.get("/{vendor_id}", response_model=VendorOut)
def get_vendor(vendor_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_vendor(db, org_id=p.org_id, vendor_id=vendor_id)


@router.get("/{vendor_id}/summary", response_model=VendorSummaryOut)
def get_vendor_summary(vendor_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_vendor(db, org_id=p.org_id, vendor_id=vendor_id)
    return vendor_summary(db, org_id=p.org_id, vendor_id=vendor_id)


@router.get("/{vendor_id}/tags", response_model=list[VendorTagOut])
def get_vendor_tags(vendor_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    must_get_vendor(db, org_id=p.org_id, vendor_id=vendor_id)
    return _tags_of(db, vendor_id)


@router.put("/{vendor_id}/tags", response_model=list[VendorTagOut])
def set_vendor_tags(
    vendor_id: int,
    payload: VendorTagsSet,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_vendor(db, org_id=p.org_id, vendor_id=vendor_id)
    wanted = list(dict.fromkeys(payload.tag_ids))
    for tag_id in wanted:
        must_get_vendor_tag(db, org_id=p.org_id, tag_id=tag_id)

    current = {int(a.tag_id): a for a in row.tag_assignments}
    before = {"tag_ids": sorted(current)}
    for tag_id, assignment in current.items():
        if tag_id not in wanted:
            row.tag_assignments.remove(assignment)
    for tag_id in wanted:
        if tag_id not in current:
            row.tag_assignments.append(VendorTagAssignment(tag_id=tag_id))
    db.flush()

    after = {"tag_ids": sorted(wanted)}
    if before != after:
        feed.record(
            db,
            org_id=p.org_id,
            actor_user_id=p.user_id,
            entity_type="vendor",
            entity_id=vendor_id,
            action="update",
            before=before,
            after=after,
        )
    db.commit()
    return _tags_of(db, vendor_id)


@router.patch("/{vendor_id}", response_model=VendorOut)
def update_vendor(
    vendor_id: int,
    payload: VendorUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_vendor(db, org_id=p.org_id, vendor_id=vendor_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, ("name", "trade", "status", "licensed", "insured", "w9_on_file"))
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="vendor",
        entity_id=row.id,
        action="update",
        before=before,
        after=snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{vendor_id}", response_model=dict)
def delete_vendor(vendor_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_vendor(db, org_id=p.org_id, vendor_id=vendor_id)
    before = snapshot(row)

    # budget items and draws keep their money; they just lose the vendor link
    linked = [
        *db.scalars(select(BudgetItem).where(BudgetItem.org_id == p.org_id, BudgetItem.vendor_id == vendor_id)),
        *db.scalars(select(Draw).where(Draw.org_id == p.org_id, Draw.vendor_id == vendor_id)),
    ]
    for dep in linked:
        dep_before = snapshot(dep)
        dep.vendor_id = None
        db.flush()
        feed.record(
            db,
            org_id=p.org_id,
            actor_user_id=p.user_id,
            entity_type="budget_item" if isinstance(dep, BudgetItem) else "draw",
            entity_id=dep.id,
            action="update",
            project_id=dep.project_id,
            before=dep_before,
            after=snapshot(dep),
        )

    db.delete(row)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="vendor",
        entity_id=vendor_id,
        action="delete",
        before=before,
    )
    db.commit()
    return {"ok": True, "id": vendor_id}
