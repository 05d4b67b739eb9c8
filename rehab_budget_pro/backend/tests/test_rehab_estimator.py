# backend/tests/test_rehab_estimator.py
from __future__ import annotations

import pytest

from app.domain.errors import DomainValidationError
from app.domain.rehab_estimator import age_multiplier, estimate_rehab


def test_moderate_estimate_for_1956_house():
    # 70 years old in 2026 -> 1.2x
    est = estimate_rehab(1450, 1956, scope="moderate", as_of_year=2026)
    assert est is not None
    assert est.age_multiplier == 1.2
    assert est.low == round(1450 * 35 * 1.2)
    assert est.mid == round(1450 * 55 * 1.2)
    assert est.high == round(1450 * 80 * 1.2)
    assert est.per_sqft_mid == 66


def test_age_multiplier_bands():
    assert age_multiplier(None, 2026) == 1.0
    assert age_multiplier(2015, 2026) == 0.9
    assert age_multiplier(1990, 2026) == 1.0
    assert age_multiplier(1975, 2026) == 1.1
    assert age_multiplier(1950, 2026) == 1.2
    assert age_multiplier(1920, 2026) == 1.3


def test_no_estimate_without_square_footage():
    assert estimate_rehab(None, 1980, as_of_year=2026) is None
    assert estimate_rehab(0, 1980, as_of_year=2026) is None
    assert estimate_rehab(-10, 1980, as_of_year=2026) is None


def test_unknown_scope_rejected():
    with pytest.raises(DomainValidationError):
        estimate_rehab(1000, 1980, scope="luxury", as_of_year=2026)


def test_scopes_are_ordered_by_cost():
    cosmetic = estimate_rehab(1000, None, scope="cosmetic", as_of_year=2026)
    moderate = estimate_rehab(1000, None, scope="moderate", as_of_year=2026)
    gut = estimate_rehab(1000, None, scope="full_gut", as_of_year=2026)
    assert cosmetic.mid < moderate.mid < gut.mid
    assert gut.mid == 100000
