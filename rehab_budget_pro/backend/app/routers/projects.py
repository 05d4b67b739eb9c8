# backend/app/routers/projects.py
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from ..auth import get_principal, require_operator, require_owner
from ..config import settings
from ..db import get_db
from ..domain.economics import category_rollups
from ..domain.errors import reject_nulls
from ..models import BudgetItem, JournalPage, Project, VendorContact
from ..schemas import (
    CategoryRollupOut,
    DealEconomicsOut,
    ProjectCreate,
    ProjectOut,
    ProjectUpdate,
    VendorRollupOut,
)
from ..services.events_facade import feed, snapshot
from ..services.ownership import must_get_project
from ..services.rollups import project_economics

router = APIRouter(prefix="/projects", tags=["projects"])

PROJECT_REQUIRED_FIELDS = (
    "name",
    "property_type",
    "status",
    "closing_costs",
    "holding_costs_monthly",
    "hold_months",
    "selling_cost_percent",
    "contingency_percent",
)


@router.post("", response_model=ProjectOut)
def create_project(payload: ProjectCreate, db: Session = Depends(get_db), p=Depends(require_operator)):
    data = payload.model_dump(exclude_none=True)
    data.setdefault("state", settings.default_state)
    data.setdefault("contingency_percent", settings.default_contingency_percent)
    data.setdefault("selling_cost_percent", settings.default_selling_cost_percent)
    data.setdefault("hold_months", settings.default_hold_months)

    row = Project(org_id=p.org_id, **data)
    db.add(row)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="project",
        entity_id=row.id,
        action="insert",
        project_id=row.id,
        after=snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("", response_model=list[ProjectOut])
def list_projects(
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    q = select(Project).where(Project.org_id == p.org_id)
    if status:
        q = q.where(Project.status == status)
    return db.scalars(q.order_by(desc(Project.updated_at), desc(Project.id))).all()


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    return must_get_project(db, org_id=p.org_id, project_id=project_id)


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    p=Depends(require_operator),
):
    row = must_get_project(db, org_id=p.org_id, project_id=project_id)
    before = snapshot(row)

    changes = payload.model_dump(exclude_unset=True)
    reject_nulls(changes, PROJECT_REQUIRED_FIELDS)
    for k, v in changes.items():
        setattr(row, k, v)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="project",
        entity_id=row.id,
        action="update",
        project_id=row.id,
        before=before,
        after=snapshot(row),
    )
    db.commit()
    db.refresh(row)
    return row


@router.delete("/{project_id}", response_model=dict)
def delete_project(project_id: int, db: Session = Depends(get_db), p=Depends(require_owner)):
    row = must_get_project(db, org_id=p.org_id, project_id=project_id)
    before = snapshot(row)

    # contact log entries and journal pages outlive the project; they lose the link
    for model, entity_type in ((VendorContact, "vendor_contact"), (JournalPage, "journal_page")):
        deps = db.scalars(select(model).where(model.org_id == p.org_id, model.project_id == project_id)).all()
        for dep in deps:
            dep_before = snapshot(dep)
            dep.project_id = None
            db.flush()
            feed.record(
                db,
                org_id=p.org_id,
                actor_user_id=p.user_id,
                entity_type=entity_type,
                entity_id=dep.id,
                action="update",
                project_id=project_id,
                before=dep_before,
                after=snapshot(dep),
            )

    # budget items and draws go with the project (relationship cascade)
    db.delete(row)
    db.flush()

    feed.record(
        db,
        org_id=p.org_id,
        actor_user_id=p.user_id,
        entity_type="project",
        entity_id=project_id,
        action="delete",
        project_id=project_id,
        before=before,
    )
    db.commit()
    return {"ok": True, "id": project_id}


@router.get("/{project_id}/economics", response_model=DealEconomicsOut)
def get_economics(project_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    project = must_get_project(db, org_id=p.org_id, project_id=project_id)
    econ = project_economics(db, org_id=p.org_id, project=project)
    return {"project_id": project_id, "engine_version": settings.engine_version, **econ.to_dict()}


@router.get("/{project_id}/categories", response_model=list[CategoryRollupOut])
def get_categories(
    project_id: int,
    non_empty: bool = Query(default=False),
    db: Session = Depends(get_db),
    p=Depends(get_principal),
):
    must_get_project(db, org_id=p.org_id, project_id=project_id)
    items = db.scalars(
        select(BudgetItem).where(BudgetItem.org_id == p.org_id, BudgetItem.project_id == project_id)
    ).all()
    rows = category_rollups(items)
    if non_empty:
        rows = [r for r in rows if r.item_count > 0]
    return [asdict(r) for r in rows]


@router.get("/{project_id}/vendors/rollup", response_model=list[VendorRollupOut])
def get_vendor_rollup(project_id: int, db: Session = Depends(get_db), p=Depends(get_principal)):
    project = must_get_project(db, org_id=p.org_id, project_id=project_id)
    econ = project_economics(db, org_id=p.org_id, project=project)
    return [asdict(v) for v in econ.vendors]
