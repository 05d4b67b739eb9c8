# backend/app/routers/templates.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator
from ..db import get_db
from ..domain.errors import DomainValidationError, reject_nulls
from ..domain.templates import copy_name, lines_from_budget_items, plan_apply, template_summary
from ..models import BudgetItem, BudgetTemplate, BudgetTemplateItem
from ..schemas import (
    ApplyTemplateIn,
    ApplyTemplateOut,
    SaveAsTemplateIn,
    TemplateCreate,
    TemplateDetailOut,
    TemplateOut,
    TemplateUpdate,
)
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_project, must_get_template, must_own_template

router = APIRouter(prefix="/templates", tags=["templates"])

TEMPLATE_LINE_FIELDS = (
    "category",
    "item",
    "description",
    "qty",
    "unit",
    "rate",
    "default_amount",
    "cost_type",
    "default_priority",
    "suggested_trade",
    "sort_order",
)


def template_out(row: BudgetTemplate, *, with_items: bool = False) -> TemplateOut:
    data = {**snapshot(row), **asdict(template_summary(row.items))}
    if with_items:
        return TemplateDetailOut.model_validate({**data, "items": [snapshot(it) for it in row.items]})
    return TemplateOut.model_validate(data)


def _record(db: Session, p, row: BudgetTemplate, action: str, before=None, after=None) -> None:
    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="budget_template",
        entity_id=row.id,
        action=action,
        before=before,
        after=after,
    )


def _record_item(db: Session, p, row: BudgetItem, action: str, before=None, after=None) -> None:
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


def _add_lines(row: BudgetTemplate, lines: list[dict]) -> None:
    for idx, line in enumerate(lines):
        if line.get("sort_order") is None:
            line = {**line, "sort_order": idx * 10}
        row.items.append(BudgetTemplateItem(**line))


@router.get("", response_model=list[TemplateOut])
def list_templates(
    scope: str = Query(default="all", description="all|system|user"),
    scope_level: str | None = Query(default=None),
    property_type: str | None = Query(default=None),
    search: str | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    if scope == "system":
        q = select(BudgetTemplate).where(BudgetTemplate.org_id.is_(None))
    elif scope == "user":
        q = select(BudgetTemplate).where(BudgetTemplate.org_id == p.org_id)
    else:
        q = select(BudgetTemplate).where(or_(BudgetTemplate.org_id == p.org_id, BudgetTemplate.org_id.is_(None)))

    if not include_inactive:
        q = q.where(BudgetTemplate.is_active.is_(True))
    if scope_level:
        q = q.where(BudgetTemplate.scope_level == scope_level)
    if property_type:
        q = q.where(BudgetTemplate.property_type == property_type)
    if search:
        like = f"%{search.strip().lower()}%"
        q = q.where(
            or_(
                func.lower(BudgetTemplate.name).like(like),
                func.lower(func.coalesce(BudgetTemplate.description, "")).like(like),
            )
        )

    rows = db.scalars(
        q.order_by(desc(BudgetTemplate.is_favorite), desc(BudgetTemplate.times_used), BudgetTemplate.name.asc())
    ).all()
    return [template_out(r) for r in rows]


@router.post("", response_model=TemplateDetailOut)
def create_template(payload: TemplateCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    data = payload.model_dump(exclude={"items"}, exclude_none=True)
    row = BudgetTemplate(org_id=p.org_id, template_type="user", **data)
    _add_lines(row, [it.model_dump() for it in payload.items])
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return template_out(row, with_items=True)


@router.post("/from-project", response_model=TemplateDetailOut)
def save_project_as_template(payload: SaveAsTemplateIn, db: Session = Depends(get_db), p=Depends(require_operator)):
    must_get_project(db, org_id=p.org_id, project_id=payload.project_id)
    items = db.scalars(
        select(BudgetItem).where(BudgetItem.org_id == p.org_id, BudgetItem.project_id == payload.project_id)
    ).all()

    if payload.item_ids is not None:
        by_id = {int(it.id): it for it in items}
        unknown = [i for i in payload.item_ids if i not in by_id]
        if unknown:
            raise DomainValidationError(f"item_ids not in project {payload.project_id}: {unknown}")
        items = [by_id[i] for i in dict.fromkeys(payload.item_ids)]
    if not items:
        raise DomainValidationError("no budget items to save")

    row = BudgetTemplate(
        org_id=p.org_id,
        template_type="user",
        name=payload.name,
        description=payload.description,
        property_type=payload.property_type,
        scope_level=payload.scope_level,
    )
    _add_lines(row, lines_from_budget_items(items, include_amounts=payload.include_amounts))
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return template_out(row, with_items=True)


@router.get("/{template_id}", response_model=TemplateDetailOut)
def get_template(template_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return template_out(must_get_template(db, org_id=p.org_id, template_id=template_id), with_items=True)


@router.patch("/{template_id}", response_model=TemplateOut)
def update_template(
    template_id: int,
    payload: TemplateUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_own_template(db, org_id=p.org_id, template_id=template_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, ("name", "is_favorite", "is_active"))
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    _record(db, p, row, "update", before=before, after=snapshot(row))
    db.commit()
    db.refresh(row)
    return template_out(row)


@router.delete("/{template_id}", response_model=dict)
def delete_template(template_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    row = must_own_template(db, org_id=p.org_id, template_id=template_id)
    before = snapshot(row)

    # template lines go with it (relationship cascade)
    db.delete(row)
    db.flush()

    _record(db, p, row, "delete", before=before)
    db.commit()
    return {"ok": True, "id": template_id}


@router.post("/{template_id}/duplicate", response_model=TemplateDetailOut)
def duplicate_template(template_id: int, db: Session = Depends(get_db), p=Depends(require_operator)):
    src = must_get_template(db, org_id=p.org_id, template_id=template_id)

    row = BudgetTemplate(
        org_id=p.org_id,
        template_type="user",
        name=copy_name(src.name),
        description=src.description,
        property_type=src.property_type,
        scope_level=src.scope_level,
    )
    _add_lines(row, [{k: getattr(it, k) for k in TEMPLATE_LINE_FIELDS} for it in src.items])
    db.add(row)
    db.flush()

    _record(db, p, row, "insert", after=snapshot(row))
    db.commit()
    db.refresh(row)
    return template_out(row, with_items=True)


@router.post("/{template_id}/apply", response_model=ApplyTemplateOut)
def apply_template(
    template_id: int,
    payload: ApplyTemplateIn,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    tpl = must_get_template(db, org_id=p.org_id, template_id=template_id)
    project = must_get_project(db, org_id=p.org_id, project_id=payload.project_id)
    existing = db.scalars(
        select(BudgetItem).where(BudgetItem.org_id == p.org_id, BudgetItem.project_id == project.id)
    ).all()

    plan = plan_apply(tpl.items, existing, mode=payload.mode, include_amounts=payload.include_amounts)

    if plan.clear_existing:
        for it in existing:
            before = snapshot(it)
            db.delete(it)
            db.flush()
            _record_item(db, p, it, "delete", before=before)

    by_id = {int(it.id): it for it in existing}
    for item_id, changes in plan.updates:
        it = by_id[item_id]
        before = snapshot(it)
        for k, v in changes.items():
            setattr(it, k, v)
        db.flush()
        _record_item(db, p, it, "update", before=before, after=snapshot(it))

    for data in plan.inserts:
        it = BudgetItem(org_id=p.org_id, project_id=int(project.id), **data)
        db.add(it)
        db.flush()
        _record_item(db, p, it, "insert", after=snapshot(it))

    before = snapshot(tpl)
    tpl.times_used = int(tpl.times_used or 0) + 1
    db.flush()
    _record(db, p, tpl, "update", before=before, after=snapshot(tpl))

    db.commit()
    return {
        "template_id": template_id,
        "project_id": int(project.id),
        "mode": plan.mode,
        "added": plan.added,
        "updated": plan.updated,
        "skipped": plan.skipped,
    }
