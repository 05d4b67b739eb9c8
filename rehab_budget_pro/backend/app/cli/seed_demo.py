# backend/app/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.db import SessionLocal, init_db
from app.domain.template_library import system_templates
from app.models import (
    AppUser,
    BudgetItem,
    BudgetTemplate,
    BudgetTemplateItem,
    CostReference,
    OrgMembership,
    Organization,
    Project,
)


@dataclass(frozen=True)
class SeedResult:
    org_slug: str
    user_email: str
    cost_reference_rows: int
    project_id: Optional[int]
    system_templates: int = 0


# (category, item, description, unit, low, mid, high, notes); Minneapolis market
DEMO_COST_REFERENCE: tuple[tuple, ...] = (
    ("soft_costs", "Permits - Building", "General building permit", "ea", 200, 500, 1500, "Varies by scope"),
    ("soft_costs", "Dumpster - 20yd", "Demo/construction debris", "ea", 350, 450, 600, "7-day rental"),
    ("demo", "Full Gut Demo", "Complete interior demo", "sf", 3.00, 5.00, 8.00, "To studs, includes haul"),
    ("demo", "Kitchen Demo", "Cabinets, counters, flooring", "ls", 800, 1500, 2500, "Average kitchen"),
    ("structural", "Subfloor Repair", "Plywood replacement", "sf", 3.00, 5.00, 8.00, '3/4" plywood'),
    ("plumbing", "Water Heater - Tank", "50 gal standard", "ea", 1200, 1800, 2800, "Installed"),
    ("plumbing", "Rough-In - Bathroom", "Single bath rough", "ea", 1500, 2500, 4000, "New location"),
    ("hvac", "Furnace - High Efficiency", "95%+ efficiency", "ea", 4000, 5500, 7500, "Installed"),
    ("electrical", "Panel Upgrade", "100A to 200A", "ea", 1500, 2500, 4000, "With permit"),
    ("electrical", "GFCI Outlet", "Kitchen, bath, exterior", "ea", 100, 150, 225, "Installed"),
    ("insulation_drywall", "Drywall Complete", "Hang + finish", "sf", 2.00, 3.00, 4.50, "Turnkey"),
    ("interior_paint", "Paint - Walls", "Two coats, standard", "sf", 1.50, 2.50, 4.00, "Prep, prime, paint"),
    ("flooring", "LVP/LVT", "Luxury vinyl plank", "sf", 4.00, 6.50, 10.00, "Material + install"),
    ("flooring", "Hardwood - Refinish", "Sand and 3 coats", "sf", 3.00, 4.50, 7.00, "Existing floors"),
    ("tile", "Backsplash", "Kitchen standard", "sf", 15.00, 25.00, 40.00, "Subway to mosaic"),
    ("kitchen", "Cabinets - Stock", "Big box basic", "lf", 100, 175, 250, "Per linear foot"),
    ("kitchen", "Countertops - Quartz", "Mid-grade installed", "sf", 55, 85, 125, "Fabricated + install"),
    ("kitchen", "Appliance Package", "Range, fridge, DW, micro", "ls", 2000, 3500, 6000, "Mid-grade set"),
    ("bathrooms", "Full Bath Remodel", "Tub, vanity, toilet, tile", "ls", 8000, 15000, 30000, "Complete gut reno"),
    ("bathrooms", "Vanity - 36\"", "With top and faucet", "ea", 350, 600, 1200, "Installed"),
    ("doors_windows", "Entry Door - Steel", "Prehung with frame", "ea", 400, 800, 1500, "Installed"),
)

DEMO_PROJECT_NAME = "Demo Flip - 1234 Elm St"


def _get_or_create_org(db: Session, slug: str, name: str) -> Organization:
    row = db.scalar(select(Organization).where(Organization.slug == slug))
    if row:
        return row
    row = Organization(slug=slug, name=name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _get_or_create_user(db: Session, email: str, display_name: str) -> AppUser:
    row = db.scalar(select(AppUser).where(AppUser.email == email))
    if row:
        return row
    row = AppUser(email=email, display_name=display_name)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def _ensure_membership(db: Session, org_id: int, user_id: int, role: str = "owner") -> None:
    existing = db.scalar(
        select(OrgMembership).where(OrgMembership.org_id == int(org_id), OrgMembership.user_id == int(user_id))
    )
    if existing:
        return
    db.add(OrgMembership(org_id=int(org_id), user_id=int(user_id), role=str(role)))
    db.commit()


def _ensure_cost_reference(db: Session, market: str = "minneapolis") -> int:
    added = 0
    for category, item, description, unit, low, mid, high, notes in DEMO_COST_REFERENCE:
        exists = db.scalar(
            select(CostReference.id).where(
                CostReference.category == category,
                CostReference.item == item,
                CostReference.market == market,
            )
        )
        if exists:
            continue
        db.add(
            CostReference(
                category=category,
                item=item,
                description=description,
                unit=unit,
                low=float(low),
                mid=float(mid),
                high=float(high),
                market=market,
                notes=notes,
            )
        )
        added += 1
    db.commit()
    return added


def ensure_system_templates(db: Session) -> int:
    """Insert the shipped templates that are missing (matched by name). Returns how many exist."""
    for spec in system_templates():
        exists = db.scalar(
            select(BudgetTemplate.id).where(BudgetTemplate.org_id.is_(None), BudgetTemplate.name == spec.name)
        )
        if exists:
            continue
        row = BudgetTemplate(**spec.to_row_kwargs())
        row.items = [BudgetTemplateItem(**kw) for kw in spec.item_kwargs()]
        db.add(row)
    db.commit()
    return len(db.scalars(select(BudgetTemplate.id).where(BudgetTemplate.org_id.is_(None))).all())


def _ensure_demo_project(db: Session, org_id: int) -> Project:
    """
    arv 300k, purchase 150k, one 40k/45k line. Expected economics:
    underwriting w/ contingency 44k, total investment 227k, profit 73k,
    ROI ~32.16%, MAO 166k, spread +16k.
    """
    row = db.scalar(select(Project).where(Project.org_id == org_id, Project.name == DEMO_PROJECT_NAME))
    if row:
        return row

    row = Project(
        org_id=org_id,
        name=DEMO_PROJECT_NAME,
        address="1234 Elm St",
        city="Minneapolis",
        state=settings.default_state,
        zip="55401",
        beds=3,
        baths=1.5,
        sqft=1450,
        year_built=1956,
        property_type="sfh",
        arv=300000.0,
        purchase_price=150000.0,
        closing_costs=5000.0,
        holding_costs_monthly=1000.0,
        hold_months=4.0,
        selling_cost_percent=8.0,
        contingency_percent=10.0,
        status="analyzing",
    )
    db.add(row)
    db.flush()

    db.add(
        BudgetItem(
            org_id=org_id,
            project_id=int(row.id),
            category="kitchen",
            item="Kitchen remodel",
            qty=1.0,
            unit="ls",
            rate=40000.0,
            underwriting_amount=40000.0,
            forecast_amount=45000.0,
            actual_amount=None,
            sort_order=0,
        )
    )
    db.commit()
    db.refresh(row)
    return row


def seed_demo(
    *,
    org_slug: str = "demo",
    org_name: str = "Demo Org",
    user_email: str = "demo@rehabpro.local",
    user_name: str = "Demo",
    create_sample_project: bool = True,
    db: Optional[Session] = None,
) -> SeedResult:
    """Idempotent: re-running finds the existing rows instead of duplicating them."""
    owns_session = db is None
    if owns_session:
        init_db()
        db = SessionLocal()
    try:
        org = _get_or_create_org(db, org_slug, org_name)
        user = _get_or_create_user(db, user_email, user_name)
        _ensure_membership(db, int(org.id), int(user.id), role="owner")

        _ensure_cost_reference(db)
        ref_rows = len(db.scalars(select(CostReference.id)).all())
        templates = ensure_system_templates(db)

        project_id = None
        if create_sample_project:
            project_id = int(_ensure_demo_project(db, int(org.id)).id)

        return SeedResult(
            org_slug=str(org.slug),
            user_email=str(user.email),
            cost_reference_rows=ref_rows,
            project_id=project_id,
            system_templates=templates,
        )
    finally:
        if owns_session:
            db.close()
