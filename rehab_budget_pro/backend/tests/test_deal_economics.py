# backend/tests/test_deal_economics.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import pytest

from app.domain.catalog import BUDGET_CATEGORIES
from app.domain.economics import (
    Thresholds,
    analyze_project,
    budget_totals,
    category_rollups,
    draw_rollup,
    line_variance,
    max_allowable_offer,
    next_draw_number,
    progress,
    roi_band,
    variance_alert,
    vendor_rollups,
)


@dataclass
class P:
    arv: Optional[float] = None
    purchase_price: Optional[float] = None
    closing_costs: Optional[float] = None
    holding_costs_monthly: Optional[float] = None
    hold_months: Optional[float] = None
    selling_cost_percent: Optional[float] = None
    contingency_percent: Optional[float] = None


@dataclass
class I:
    category: str = "kitchen"
    underwriting_amount: Optional[float] = 0.0
    forecast_amount: Optional[float] = 0.0
    actual_amount: Optional[float] = None
    status: str = "not_started"
    vendor_id: Optional[int] = None


@dataclass
class D:
    amount: float
    status: str
    draw_number: int


def _scenario_project(**overrides) -> P:
    base = dict(
        arv=300000,
        purchase_price=150000,
        closing_costs=5000,
        holding_costs_monthly=1000,
        hold_months=4,
        selling_cost_percent=8,
        contingency_percent=10,
    )
    base.update(overrides)
    return P(**base)


def test_category_totals_add_up_to_project_totals():
    items = [
        I(category="kitchen", underwriting_amount=12000, forecast_amount=13500, actual_amount=9000),
        I(category="kitchen", underwriting_amount=3000, forecast_amount=0, actual_amount=None),
        I(category="plumbing", underwriting_amount=4500.5, forecast_amount=5000, actual_amount=5100.25),
        I(category="flooring", underwriting_amount=7000, forecast_amount=6800, actual_amount=None),
        I(category="demo", underwriting_amount=1800, forecast_amount=2100, actual_amount=2200),
    ]
    totals = budget_totals(items)
    cats = category_rollups(items)

    assert sum(c.underwriting_total for c in cats) == pytest.approx(totals.underwriting_total)
    assert sum(c.forecast_total for c in cats) == pytest.approx(totals.forecast_total)
    assert sum(c.actual_total for c in cats) == pytest.approx(totals.actual_total)


def test_empty_budget_is_all_zeros_and_profit_is_carrying_only():
    project = _scenario_project()
    econ = analyze_project(project, [])

    assert econ.underwriting_total == 0
    assert econ.forecast_total == 0
    assert econ.actual_total == 0
    assert econ.underwriting_contingency == 0
    assert econ.forecast_contingency == 0

    # 300000 - (150000 + 5000 + 4000 + 24000)
    for s in econ.scenarios.values():
        assert s.gross_profit == 117000.0

    assert [c.category for c in econ.categories] == [k for k, _ in BUDGET_CATEGORIES]
    assert all(c.underwriting_total == 0 and c.item_count == 0 for c in econ.categories)


def test_zero_contingency_leaves_phase_totals_unchanged():
    project = _scenario_project(contingency_percent=0)
    items = [I(underwriting_amount=40000, forecast_amount=45000)]
    econ = analyze_project(project, items)

    assert econ.underwriting_with_contingency == econ.underwriting_total == 40000
    assert econ.forecast_with_contingency == econ.forecast_total == 45000


def test_actual_scenario_never_carries_contingency():
    project = _scenario_project(contingency_percent=15)
    items = [
        I(underwriting_amount=10000, forecast_amount=11000, actual_amount=12000),
        I(underwriting_amount=5000, forecast_amount=0, actual_amount=3000),
    ]
    econ = analyze_project(project, items)

    assert econ.actual_total == 15000
    assert econ.scenarios["actual"].rehab_budget == 15000
    assert econ.scenarios["underwriting"].rehab_budget == pytest.approx(15000 * 1.15)
    assert econ.scenarios["forecast"].rehab_budget == pytest.approx(11000 * 1.15)


def test_roi_is_zero_when_total_investment_is_zero():
    project = P(arv=0, purchase_price=0, closing_costs=0, holding_costs_monthly=0, hold_months=0)
    econ = analyze_project(project, [])

    for s in econ.scenarios.values():
        assert s.total_investment == 0
        assert s.roi == 0
        assert math.isfinite(s.roi)


def test_concrete_flip_scenario():
    project = _scenario_project()
    items = [I(underwriting_amount=40000, forecast_amount=45000, actual_amount=None)]
    econ = analyze_project(project, items)

    assert econ.underwriting_total == 40000
    assert econ.underwriting_with_contingency == 44000
    assert econ.holding_costs_total == 4000
    assert econ.selling_costs == 24000

    uw = econ.scenarios["underwriting"]
    assert uw.total_investment == 227000
    assert uw.gross_profit == 73000
    assert uw.roi == pytest.approx(32.16, abs=0.01)
    assert uw.roi_band == "good"

    assert econ.mao.mao == 166000
    assert econ.mao.spread == 16000
    assert econ.mao.status == "under"

    # forecast > 0 and no actual spend yet
    assert econ.active_phase == "forecast"
    assert econ.active.rehab_budget == 49500
    assert econ.active.total_investment == 232500
    assert econ.active.roi == pytest.approx(29.03, abs=0.01)


def test_draw_remaining_goes_negative_on_overrun():
    draws = [
        D(amount=30000, status="paid", draw_number=1),
        D(amount=20000, status="approved", draw_number=2),
        D(amount=10000, status="pending", draw_number=3),
    ]
    r = draw_rollup(draws, 49500)

    assert r.total_paid == 30000
    assert r.total_pending == 30000
    assert r.remaining == -10500
    assert r.next_draw_number == 4


def test_vendor_budget_prefers_forecast_over_underwriting():
    items = [I(underwriting_amount=300, forecast_amount=500, actual_amount=None, vendor_id=7)]
    roll = vendor_rollups(items)

    assert roll[7].budget == 500
    assert roll[7].actual == 0
    assert roll[7].item_count == 1


def test_vendor_budget_falls_back_to_underwriting_and_skips_unassigned():
    items = [
        I(underwriting_amount=300, forecast_amount=0, actual_amount=250, vendor_id=7),
        I(underwriting_amount=800, forecast_amount=900, actual_amount=None, vendor_id=7),
        I(underwriting_amount=1000, forecast_amount=0, actual_amount=None, vendor_id=None),
    ]
    roll = vendor_rollups(items)

    assert set(roll) == {7}
    assert roll[7].budget == 1200
    assert roll[7].actual == 250
    assert roll[7].item_count == 2


def test_active_phase_priority_actual_then_forecast_then_underwriting():
    project = _scenario_project()
    assert analyze_project(project, [I(underwriting_amount=100)]).active_phase == "underwriting"
    assert analyze_project(project, [I(underwriting_amount=100, forecast_amount=120)]).active_phase == "forecast"
    assert (
        analyze_project(project, [I(underwriting_amount=100, forecast_amount=120, actual_amount=5)]).active_phase
        == "actual"
    )
    # an explicit $0 actual does not switch the phase
    assert analyze_project(project, [I(underwriting_amount=100, actual_amount=0)]).active_phase == "underwriting"


def test_mao_uses_underwriting_even_when_forecast_is_higher():
    project = _scenario_project()
    econ = analyze_project(project, [I(underwriting_amount=40000, forecast_amount=90000, actual_amount=95000)])
    assert econ.mao.mao == 166000


def test_mao_multiplier_is_configurable_and_status_flips_over():
    r = max_allowable_offer(300000, 44000, 150000, arv_multiplier=0.65)
    assert r.mao == 151000
    assert r.spread == 1000

    over = max_allowable_offer(300000, 44000, 170000)
    assert over.spread == -4000
    assert over.status == "over"


def test_variances_and_alert_levels():
    project = _scenario_project()
    econ = analyze_project(project, [I(underwriting_amount=40000, forecast_amount=45000, actual_amount=47000)])
    v = econ.variances

    assert v.forecast_vs_underwriting == 5000
    assert v.forecast_vs_underwriting_percent == 12.5
    assert v.forecast_vs_underwriting_alert == "critical"

    assert v.baseline_phase == "forecast"
    assert v.actual_vs_baseline == 2000
    assert v.actual_vs_baseline_percent == pytest.approx(4.44, abs=0.01)
    assert v.actual_vs_baseline_alert == "ok"

    assert v.actual_vs_underwriting == 7000
    assert v.actual_vs_underwriting_percent == 17.5


def test_variance_percent_is_zero_without_underwriting():
    econ = analyze_project(_scenario_project(), [I(underwriting_amount=0, forecast_amount=500)])
    assert econ.variances.forecast_vs_underwriting == 500
    assert econ.variances.forecast_vs_underwriting_percent == 0


def test_variance_alert_only_flags_overruns():
    th = Thresholds()
    assert variance_alert(-50.0, th) == "ok"
    assert variance_alert(5.0, th) == "ok"
    assert variance_alert(5.01, th) == "warning"
    assert variance_alert(10.5, th) == "critical"


def test_roi_band_thresholds():
    th = Thresholds()
    assert roi_band(15.0, th) == "good"
    assert roi_band(14.99, th) == "caution"
    assert roi_band(10.0, th) == "caution"
    assert roi_band(9.99, th) == "poor"
    assert roi_band(-20.0, th) == "poor"


def test_missing_and_non_finite_inputs_count_as_zero():
    project = P(arv=float("nan"), purchase_price=None, contingency_percent=float("inf"))
    items = [I(underwriting_amount=None, forecast_amount=float("nan"), actual_amount=None)]
    econ = analyze_project(project, items)

    values = [
        econ.underwriting_total,
        econ.forecast_total,
        econ.underwriting_with_contingency,
        econ.selling_costs,
        econ.mao.mao,
        *(s.roi for s in econ.scenarios.values()),
    ]
    assert all(math.isfinite(v) for v in values)
    assert econ.underwriting_total == 0


def test_line_variance_is_null_until_actual_is_recorded():
    lv = line_variance(I(underwriting_amount=1000, forecast_amount=1200, actual_amount=None))
    assert lv.forecast_variance == 200
    assert lv.actual_variance is None
    assert lv.total_variance is None

    lv2 = line_variance(I(underwriting_amount=1000, forecast_amount=1200, actual_amount=1100))
    assert lv2.actual_variance == -100
    assert lv2.total_variance == 100


def test_category_rollup_keeps_unknown_categories_and_status_counts():
    items = [
        I(category="kitchen", underwriting_amount=100, status="complete"),
        I(category="kitchen", underwriting_amount=100, status="in_progress"),
        I(category="pool", underwriting_amount=250, status="not_started"),
    ]
    cats = category_rollups(items)
    by = {c.category: c for c in cats}

    assert len(cats) == len(BUDGET_CATEGORIES) + 1
    assert cats[-1].category == "pool"
    assert by["pool"].underwriting_total == 250
    assert by["kitchen"].completed_count == 1
    assert by["kitchen"].in_progress_count == 1
    assert by["kitchen"].label == "Kitchen"


def test_progress_percent_complete():
    items = [I(status="complete"), I(status="complete"), I(status="in_progress"), I(status="cancelled")]
    pr = progress(items)
    assert pr.total_items == 4
    assert pr.completed_items == 2
    assert pr.percent_complete == 50.0
    assert progress([]).percent_complete == 0.0


def test_draw_rollup_budget_uses_baseline_with_contingency():
    project = _scenario_project()
    items = [I(underwriting_amount=40000, forecast_amount=45000)]
    draws = [D(amount=10000, status="paid", draw_number=1)]
    econ = analyze_project(project, items, draws)

    assert econ.draws is not None
    assert econ.draws.total_budget == 49500
    assert econ.draws.remaining == 39500


def test_next_draw_number_starts_at_one_and_fills_above_max():
    assert next_draw_number([]) == 1
    assert next_draw_number([D(amount=1, status="paid", draw_number=3), D(amount=1, status="paid", draw_number=1)]) == 4


def test_dict_inputs_are_accepted():
    project = {"arv": 300000, "purchase_price": 150000, "contingency_percent": 10}
    items = [{"category": "kitchen", "underwriting_amount": 40000, "forecast_amount": 0}]
    econ = analyze_project(project, items)
    assert econ.underwriting_with_contingency == 44000
    assert econ.to_dict()["mao"]["mao"] == 166000


def test_draw_rollup_reports_percent_paid():
    draws = [
        D(amount=30000, status="paid", draw_number=1),
        D(amount=20000, status="approved", draw_number=2),
    ]
    assert draw_rollup(draws, 49500).percent_paid == pytest.approx(60.61, abs=0.01)
    # no budget yet: 0 rather than a division error
    assert draw_rollup(draws, 0).percent_paid == 0.0


def test_next_draw_number_tolerates_junk_numbers():
    draws = [
        D(amount=1, status="paid", draw_number="n/a"),
        D(amount=1, status="paid", draw_number=2),
        D(amount=1, status="paid", draw_number=float("nan")),
    ]
    assert next_draw_number(draws) == 3
