# backend/app/routers/cost_reference.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..models import BudgetItem, CostReference
from ..schemas import BudgetItemOut, CostReferenceApply, CostReferenceCreate, CostReferenceOut
from ..services.cost_reference import reference_line_amount, search_cost_reference, tier_rate
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_cost_reference, must_get_project, must_get_vendor
from .budget_items import item_out, next_sort_order

router = APIRouter(prefix="/cost-reference", tags=["cost-reference"])


@router.get("", response_model=list[CostReferenceOut])
def list_cost_reference(
    category: str | None = Query(default=None),
    market: str | None = Query(default=None),
    search: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    return search_cost_reference(db, category=category, market=market, search=search, limit=limit)


@router.post("", response_model=CostReferenceOut)
def create_cost_reference(payload: CostReferenceCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = CostReference(**payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.post("/{ref_id}/apply", response_model=BudgetItemOut)
def apply_cost_reference(
    ref_id: int,
    payload: CostReferenceApply,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    """Create a budget item priced from a reference row (rate = tier rate, underwriting = qty x rate)."""
    ref = must_get_cost_reference(db, ref_id=ref_id)
    must_get_project(db, org_id=p.org_id, project_id=payload.project_id)
    if payload.vendor_id is not None:
        must_get_vendor(db, org_id=p.org_id, vendor_id=payload.vendor_id)

    row = BudgetItem(
        org_id=p.org_id,
        project_id=payload.project_id,
        vendor_id=payload.vendor_id,
        category=ref.category,
        item=ref.item,
        description=ref.description,
        room_area=payload.room_area,
        qty=payload.qty,
        unit=ref.unit,
        rate=tier_rate(ref, payload.tier),
        underwriting_amount=reference_line_amount(ref, payload.qty, payload.tier),
        forecast_amount=0.0,
        sort_order=next_sort_order(db, org_id=p.org_id, project_id=payload.project_id),
        notes=f"from cost reference #{ref.id} ({payload.tier}, {ref.market})",
    )
    db.add(row)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="budget_item",
        entity_id=row.id,
        action="insert",
        project_id=row.project_id,
        after=snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return item_out(row)
