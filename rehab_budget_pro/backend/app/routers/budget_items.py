# backend/app/routers/budget_items.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.economics import line_variance
from ..domain.errors import DomainValidationError, reject_nulls
from ..domain.lifecycle import ensure_item_transition
from ..models import BudgetItem
from ..schemas import BudgetItemCreate, BudgetItemOut, BudgetItemUpdate, ReorderIn, StatusChange
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_budget_item, must_get_project, must_get_vendor

router = APIRouter(prefix="/budget-items", tags=["budget-items"])


def item_out(row: BudgetItem) -> BudgetItemOut:
    return BudgetItemOut.model_validate({**snapshot(row), **asdict(line_variance(row))})


def next_sort_order(db: Session, *, org_id: int, project_id: int) -> int:
    cur = db.scalar(
        select(func.max(BudgetItem.sort_order)).where(
            BudgetItem.org_id == org_id, BudgetItem.project_id == project_id
        )
    )
    return int(cur) + 1 if cur is not None else 0


def _record(db: Session, p, row: BudgetItem, action: str, before=None, after=None) -> None:
    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="budget_item",
        entity_id=row.id,
        action=action,
        project_id=row.project_id,
        before=before,
        after=after,
    )


@router.post("", response_model=BudgetItemOut)
def create_budget_item(payload: BudgetItemCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    must_get_project(db, org_id=p.org_id, project_id=payload.project_id)
    if payload.vendor_id is not None:
        must_get_vendor(db, org_id=p.org_id, vendor_id=payload.vendor_id)

    data = payload.model_dump(exclude_none=True)
    if payload.underwriting_amount is None:
        data["underwriting_amount"] = round(payload.qty * payload.rate, 2)
    if payload.sort_order is None:
        data["sort_order"] = next_sort_order(db, org_id=p.org_id, project_id=payload.project_id)

    row = BudgetItem(org_id=p.org_id, **data)
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return item_out(row)


@router.get("", response_model=list[BudgetItemOut])
def list_budget_items(
    project_id: int = Query(...),
    category: str | None = Query(default=None),
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    must_get_project(db, org_id=p.org_id, project_id=project_id)
    q = select(BudgetItem).where(BudgetItem.org_id == p.org_id, BudgetItem.project_id == project_id)
    if category:
        q = q.where(BudgetItem.category == category)
    if status:
        q = q.where(BudgetItem.status == status)
    rows = db.scalars(q.order_by(BudgetItem.sort_order.asc(), BudgetItem.id.asc())).all()
    return [item_out(r) for r in rows]


@router.get("/{item_id}", response_model=BudgetItemOut)
def get_budget_item(item_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return item_out(must_get_budget_item(db, org_id=p.org_id, item_id=item_id))


@router.patch("/{item_id}", response_model=BudgetItemOut)
def update_budget_item(
    item_id: int,
    payload: BudgetItemUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_budget_item(db, org_id=p.org_id, item_id=item_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("vendor_id") is not None:
        must_get_vendor(db, org_id=p.org_id, vendor_id=changes["vendor_id"])
    reject_nulls(changes, ("category", "item", "qty", "rate", "underwriting_amount", "forecast_amount", "unit"))

    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return item_out(row)


@router.post("/{item_id}/status", response_model=BudgetItemOut)
def change_budget_item_status(
    item_id: int,
    payload: StatusChange,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_budget_item(db, org_id=p.org_id, item_id=item_id)
    before = snapshot(row)

    target = ensure_item_transition(row.status, payload.status)
    if target == row.status:
        return item_out(row)

    row.status = target
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return item_out(row)


@router.post("/reorder", response_model=list[BudgetItemOut])
def reorder_budget_items(payload: ReorderIn, db: Session = Depends(get_db), p=Depends(require_operator)):
    must_get_project(db, org_id=p.org_id, project_id=payload.project_id)
    rows = db.scalars(
        select(BudgetItem).where(BudgetItem.org_id == p.org_id, BudgetItem.project_id == payload.project_id)
    ).all()
    by_id = {int(r.id): r for r in rows}

    if len(set(payload.item_ids)) != len(payload.item_ids):
        raise DomainValidationError("item_ids contains duplicates")
    unknown = [i for i in payload.item_ids if i not in by_id]
    if unknown:
        raise DomainValidationError(f"item_ids not in project {payload.project_id}: {unknown}")

    # listed ids first, in the given order; the rest keep their relative order after them
    rest = sorted((r for r in rows if int(r.id) not in set(payload.item_ids)), key=lambda r: (r.sort_order, r.id))
    ordered = [by_id[i] for i in payload.item_ids] + rest
    for idx, row in enumerate(ordered):
        if row.sort_order != idx:
            before = snapshot(row)
            row.sort_order = idx
            db.flush()
            _record(db, p, row, "update", before=before, after=snapshot(row))

    db.commit()
    return [item_out(r) for r in ordered]


@router.delete("/{item_id}", response_model=dict)
def delete_budget_item(item_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_get_budget_item(db, org_id=p.org_id, item_id=item_id)
    before = snapshot(row)

    db.delete(row)
    db.flush()

    _record(db, p, row, "delete", before=before)
    db.commit()
    return {"ok": True, "id": item_id}
