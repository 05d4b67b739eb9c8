# backend/app/domain/rehab_estimator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import DomainValidationError

# $/sqft ranges per rehab scope, aggregated from the cost reference guide.
REHAB_COSTS_PER_SQFT: dict[str, dict[str, float]] = {
    "cosmetic": {"low": 15.0, "mid": 25.0, "high": 40.0},
    "moderate": {"low": 35.0, "mid": 55.0, "high": 80.0},
    "full_gut": {"low": 70.0, "mid": 100.0, "high": 150.0},
}

SCOPE_DESCRIPTIONS: dict[str, str] = {
    "cosmetic": "Paint, flooring, fixtures, minor repairs. No structural or mechanical work.",
    "moderate": "Kitchen/bath updates, some plumbing/electrical, flooring throughout, paint.",
    "full_gut": "Down to studs. New mechanicals, kitchen, baths, windows, everything.",
}


@dataclass(frozen=True)
class RehabEstimate:
    scope: str
    sqft: float
    age_multiplier: float
    low: int
    mid: int
    high: int
    per_sqft_low: int
    per_sqft_mid: int
    per_sqft_high: int


def age_multiplier(year_built: Optional[int], as_of_year: int) -> float:
    # older homes need more systems work
    if not year_built:
        return 1.0
    age = int(as_of_year) - int(year_built)
    if age < 20:
        return 0.9
    if age < 40:
        return 1.0
    if age < 60:
        return 1.1
    if age < 80:
        return 1.2
    return 1.3


def estimate_rehab(
    sqft: Optional[float],
    year_built: Optional[int],
    *,
    scope: str = "moderate",
    as_of_year: int,
) -> Optional[RehabEstimate]:
    key = (scope or "").strip().lower()
    costs = REHAB_COSTS_PER_SQFT.get(key)
    if costs is None:
        raise DomainValidationError(f"unknown rehab scope: {scope!r}")

    if not sqft or float(sqft) <= 0:
        return None

    mult = age_multiplier(year_built, as_of_year)
    sf = float(sqft)
    return RehabEstimate(
        scope=key,
        sqft=sf,
        age_multiplier=mult,
        low=round(sf * costs["low"] * mult),
        mid=round(sf * costs["mid"] * mult),
        high=round(sf * costs["high"] * mult),
        per_sqft_low=round(costs["low"] * mult),
        per_sqft_mid=round(costs["mid"] * mult),
        per_sqft_high=round(costs["high"] * mult),
    )
