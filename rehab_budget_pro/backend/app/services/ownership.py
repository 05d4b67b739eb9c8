# backend/app/services/ownership.py
from __future__ import annotations

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..models import (
    BudgetItem,
    BudgetTemplate,
    CostReference,
    Draw,
    JournalPage,
    Project,
    Vendor,
    VendorContact,
    VendorTag,
)


def must_get_project(db: Session, *, org_id: int, project_id: int) -> Project:
    row = db.scalar(select(Project).where(Project.id == project_id, Project.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="project not found")
    return row


def must_get_budget_item(db: Session, *, org_id: int, item_id: int) -> BudgetItem:
    row = db.scalar(select(BudgetItem).where(BudgetItem.id == item_id, BudgetItem.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="budget item not found")
    return row


def must_get_vendor(db: Session, *, org_id: int, vendor_id: int) -> Vendor:
    row = db.scalar(select(Vendor).where(Vendor.id == vendor_id, Vendor.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="vendor not found")
    return row


def must_get_draw(db: Session, *, org_id: int, draw_id: int) -> Draw:
    row = db.scalar(select(Draw).where(Draw.id == draw_id, Draw.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="draw not found")
    return row


def must_get_cost_reference(db: Session, *, ref_id: int) -> CostReference:
    # shared reference data: not org-scoped
    row = db.get(CostReference, ref_id)
    if not row:
        raise HTTPException(status_code=404, detail="cost reference not found")
    return row


def must_get_template(db: Session, *, org_id: int, template_id: int) -> BudgetTemplate:
    # an org sees its own templates plus the shipped system ones (org_id NULL)
    row = db.scalar(
        select(BudgetTemplate).where(
            BudgetTemplate.id == template_id,
            or_(BudgetTemplate.org_id == org_id, BudgetTemplate.org_id.is_(None)),
        )
    )
    if not row:
        raise HTTPException(status_code=404, detail="template not found")
    return row


def must_own_template(db: Session, *, org_id: int, template_id: int) -> BudgetTemplate:
    row = must_get_template(db, org_id=org_id, template_id=template_id)
    if row.org_id is None:
        raise HTTPException(status_code=403, detail="system templates are read-only; duplicate it first")
    return row


def must_get_vendor_tag(db: Session, *, org_id: int, tag_id: int) -> VendorTag:
    row = db.scalar(select(VendorTag).where(VendorTag.id == tag_id, VendorTag.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="vendor tag not found")
    return row


def must_get_vendor_contact(db: Session, *, org_id: int, contact_id: int) -> VendorContact:
    row = db.scalar(select(VendorContact).where(VendorContact.id == contact_id, VendorContact.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="vendor contact not found")
    return row


def must_get_journal_page(db: Session, *, org_id: int, page_id: int) -> JournalPage:
    row = db.scalar(select(JournalPage).where(JournalPage.id == page_id, JournalPage.org_id == org_id))
    if not row:
        raise HTTPException(status_code=404, detail="journal page not found")
    return row
