# backend/app/routers/vendor_tags.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.catalog import DEFAULT_TAG_COLOR
from ..domain.errors import reject_nulls
from ..models import VendorTag, VendorTagAssignment
from ..schemas import VendorTagCreate, VendorTagOut, VendorTagUpdate
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_vendor_tag

router = APIRouter(prefix="/vendor-tags", tags=["vendors"])


def vendor_counts(db: Session, tag_ids: list[int]) -> dict[int, int]:
    if not tag_ids:
        return {}
    rows = db.execute(
        select(VendorTagAssignment.tag_id, func.count(VendorTagAssignment.id))
        .where(VendorTagAssignment.tag_id.in_(tag_ids))
        .group_by(VendorTagAssignment.tag_id)
    ).all()
    return {int(tag_id): int(n) for tag_id, n in rows}


def tag_out(row: VendorTag, vendor_count: int = 0) -> VendorTagOut:
    return VendorTagOut.model_validate({**snapshot(row), "vendor_count": vendor_count})


def _ensure_unique_name(db: Session, *, org_id: int, name: str, exclude_id: int | None = None) -> None:
    q = select(VendorTag.id).where(VendorTag.org_id == org_id, func.lower(VendorTag.name) == name.strip().lower())
    if exclude_id is not None:
        q = q.where(VendorTag.id != exclude_id)
    if db.scalar(q) is not None:
        raise HTTPException(status_code=409, detail=f"vendor tag {name!r} already exists")


def _record(db: Session, p, row: VendorTag, action: str, before=None, after=None) -> None:
    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="vendor_tag",
        entity_id=row.id,
        action=action,
        before=before,
        after=after,
    )


@router.post("", response_model=VendorTagOut)
def create_vendor_tag(payload: VendorTagCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    _ensure_unique_name(db, org_id=p.org_id, name=payload.name)
    row = VendorTag(
        org_id=p.org_id,
        name=payload.name.strip(),
        color=payload.color or DEFAULT_TAG_COLOR,
        description=payload.description,
    )
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return tag_out(row)


@router.get("", response_model=list[VendorTagOut])
def list_vendor_tags(db: Session = Depends(get_db), p=Depends(get_principal)):
    rows = db.scalars(select(VendorTag).where(VendorTag.org_id == p.org_id).order_by(VendorTag.name.asc())).all()
    counts = vendor_counts(db, [int(r.id) for r in rows])
    return [tag_out(r, counts.get(int(r.id), 0)) for r in rows]


@router.patch("/{tag_id}", response_model=VendorTagOut)
def update_vendor_tag(
    tag_id: int,
    payload: VendorTagUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_vendor_tag(db, org_id=p.org_id, tag_id=tag_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, ("name", "color"))
    if "name" in changes:
        _ensure_unique_name(db, org_id=p.org_id, name=changes["name"], exclude_id=tag_id)
        changes["name"] = changes["name"].strip()
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return tag_out(row, vendor_counts(db, [tag_id]).get(tag_id, 0))


@router.delete("/{tag_id}", response_model=dict)
def delete_vendor_tag(tag_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_vendor_tag(db, org_id=p.org_id, tag_id=tag_id)
    before = snapshot(row)

    # assignments go with the tag (relationship cascade); vendors stay
    db.delete(row)
    db.flush()

    _record(db, p, row, "delete", before=before)
    db.commit()
    return {"ok": True, "id": tag_id}
