# backend/app/services/rollups.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..domain.economics import (
    DealEconomics,
    DrawRollup,
    analyze_project,
    budget_totals,
    baseline_total,
    draw_rollup,
    next_draw_number,
    thresholds_from_settings,
    vendor_rollups,
    with_contingency,
)
from ..domain.portfolio import PortfolioRollup, portfolio_rollup
from ..models import BudgetItem, Draw, Project, VendorContact


def _items(db: Session, *, org_id: int, project_id: int) -> list[BudgetItem]:
    return list(
        db.scalars(
            select(BudgetItem)
            .where(BudgetItem.org_id == org_id, BudgetItem.project_id == project_id)
            .order_by(BudgetItem.sort_order.asc(), BudgetItem.id.asc())
        ).all()
    )


def _draws(db: Session, *, org_id: int, project_id: int) -> list[Draw]:
    return list(
        db.scalars(
            select(Draw)
            .where(Draw.org_id == org_id, Draw.project_id == project_id)
            .order_by(Draw.draw_number.asc())
        ).all()
    )


def project_economics(db: Session, *, org_id: int, project: Project) -> DealEconomics:
    return analyze_project(
        project,
        _items(db, org_id=org_id, project_id=int(project.id)),
        _draws(db, org_id=org_id, project_id=int(project.id)),
        thresholds=thresholds_from_settings(),
    )


def project_draw_rollup(db: Session, *, org_id: int, project: Project) -> DrawRollup:
    totals = budget_totals(_items(db, org_id=org_id, project_id=int(project.id)))
    budget = with_contingency(baseline_total(totals), float(project.contingency_percent or 0.0))
    return draw_rollup(_draws(db, org_id=org_id, project_id=int(project.id)), budget)


def next_draw_number_for(db: Session, *, org_id: int, project_id: int) -> int:
    return next_draw_number(_draws(db, org_id=org_id, project_id=project_id))


def org_portfolio(db: Session, *, org_id: int) -> PortfolioRollup:
    projects = db.scalars(select(Project).where(Project.org_id == org_id).order_by(Project.id.asc())).all()
    items = db.scalars(select(BudgetItem).where(BudgetItem.org_id == org_id)).all()

    by_project: dict[int, list[BudgetItem]] = {int(p.id): [] for p in projects}
    for it in items:
        by_project.setdefault(int(it.project_id), []).append(it)

    return portfolio_rollup(
        [(p, by_project[int(p.id)]) for p in projects],
        thresholds=thresholds_from_settings(),
    )


def vendor_summary(db: Session, *, org_id: int, vendor_id: int) -> dict[str, Any]:
    """Budget / actual / item count across all projects, paid and pending draws, contact history."""
    items = db.scalars(
        select(BudgetItem).where(BudgetItem.org_id == org_id, BudgetItem.vendor_id == vendor_id)
    ).all()
    draws = db.scalars(select(Draw).where(Draw.org_id == org_id, Draw.vendor_id == vendor_id)).all()
    contacts = db.scalars(
        select(VendorContact).where(VendorContact.org_id == org_id, VendorContact.vendor_id == vendor_id)
    ).all()

    roll: Optional[Any] = vendor_rollups(items).get(vendor_id)
    rollup = draw_rollup(draws, 0.0)
    return {
        "vendor_id": vendor_id,
        "budget": roll.budget if roll else 0.0,
        "actual": roll.actual if roll else 0.0,
        "item_count": roll.item_count if roll else 0,
        "project_count": len({int(it.project_id) for it in items}),
        "draws_paid": rollup.total_paid,
        "draws_pending": rollup.total_pending,
        "draw_count": rollup.draw_count,
        "total_contacts": len(contacts),
        "last_contact_date": max((c.contact_date for c in contacts), default=None),
        # a follow-up is pending once it has a date and is not ticked off
        "pending_follow_ups": sum(1 for c in contacts if c.follow_up_date and not c.follow_up_completed),
    }
