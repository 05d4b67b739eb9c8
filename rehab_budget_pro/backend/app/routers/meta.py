# backend/app/routers/meta.py
from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Query

from ..config import settings
from ..domain.catalog import catalog_payload
from ..domain.rehab_estimator import SCOPE_DESCRIPTIONS, estimate_rehab
from ..schemas import RehabEstimateOut

router = APIRouter(tags=["meta"])


@router.get("/meta/health", response_model=dict)
def health():
    return {"ok": True, "engine_version": settings.engine_version}


@router.get("/meta/catalog", response_model=dict)
def catalog():
    return catalog_payload()


@router.get("/estimate", response_model=RehabEstimateOut | None)
def estimate(
    sqft: float | None = Query(default=None),
    year_built: int | None = Query(default=None),
    scope: str = Query(default="moderate"),
):
    """Quick $/sqft rehab range; null when sqft is missing or not positive."""
    est = estimate_rehab(sqft, year_built, scope=scope, as_of_year=date.today().year)
    if est is None:
        return None
    return {**asdict(est), "description": SCOPE_DESCRIPTIONS[est.scope]}
