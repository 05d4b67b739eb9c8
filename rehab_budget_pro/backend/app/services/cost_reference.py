# backend/app/services/cost_reference.py
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..domain.economics import finite, get_field
from ..domain.errors import DomainValidationError
from ..models import CostReference

PRICE_TIERS = ("low", "mid", "high")


def reference_line_amount(ref: Any, qty: float, tier: str = "mid") -> float:
    """
    qty x tier rate for a cost-reference row. A tier with no published rate
    prices at 0 rather than borrowing a neighbouring tier.
    """
    key = (tier or "mid").strip().lower()
    if key not in PRICE_TIERS:
        raise DomainValidationError(f"unknown price tier: {tier!r}")
    rate = finite(get_field(ref, key))
    return round(finite(qty) * rate, 2)


def tier_rate(ref: Any, tier: str = "mid") -> float:
    return reference_line_amount(ref, 1.0, tier)


def search_cost_reference(
    db: Session,
    *,
    category: Optional[str] = None,
    market: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 200,
) -> list[CostReference]:
    q = select(CostReference)
    if category:
        q = q.where(CostReference.category == category.strip().lower())
    if market:
        q = q.where(func.lower(CostReference.market) == market.strip().lower())
    if search:
        like = f"%{search.strip().lower()}%"
        q = q.where(
            or_(
                func.lower(CostReference.item).like(like),
                func.lower(func.coalesce(CostReference.description, "")).like(like),
            )
        )
    q = q.order_by(CostReference.category.asc(), CostReference.item.asc()).limit(int(limit))
    return list(db.scalars(q).all())
