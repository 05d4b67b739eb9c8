# backend/app/domain/economics.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from typing import Any, Iterable, Mapping, Optional

from ..config import settings
from .catalog import BUDGET_CATEGORIES, OPEN_DRAW_STATUSES

# Deal economics for one project: budget roll-ups across the three phases
# (underwriting / forecast / actual), contingency, carrying costs, per-phase
# profit + ROI, MAO, draw and vendor roll-ups.
#
# Pure: inputs are read with getattr (ORM rows, dataclasses) or key lookup
# (dicts); nothing is mutated. Unset numbers count as 0 and every output is
# finite.

PHASE_UNDERWRITING = "underwriting"
PHASE_FORECAST = "forecast"
PHASE_ACTUAL = "actual"
PHASES = (PHASE_UNDERWRITING, PHASE_FORECAST, PHASE_ACTUAL)


@dataclass(frozen=True)
class Thresholds:
    mao_arv_multiplier: float = 0.70
    roi_good: float = 15.0
    roi_fair: float = 10.0
    variance_warning: float = 5.0
    variance_critical: float = 10.0


def thresholds_from_settings() -> Thresholds:
    return Thresholds(
        mao_arv_multiplier=float(settings.mao_arv_multiplier),
        roi_good=float(settings.roi_threshold_good),
        roi_fair=float(settings.roi_threshold_fair),
        variance_warning=float(settings.variance_warning_percent),
        variance_critical=float(settings.variance_critical_percent),
    )


# -----------------------------
# Field access
# -----------------------------
def get_field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def finite(x: Any) -> float:
    if x is None:
        return 0.0
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v) or math.isinf(v):
        return 0.0
    return v


def num_field(obj: Any, name: str) -> float:
    return finite(get_field(obj, name))


def _opt_num(obj: Any, name: str) -> Optional[float]:
    v = get_field(obj, name)
    if v is None:
        return None
    return finite(v)


def _status(obj: Any) -> str:
    return str(get_field(obj, "status", "") or "").strip().lower()


def category_key(item: Any) -> str:
    return str(get_field(item, "category", "") or "").strip().lower() or "uncategorized"


def _money(x: float) -> float:
    return round(float(x), 2)


def _pct(x: float) -> float:
    return round(float(x), 2)


def percent_of(delta: float, base: float) -> float:
    # base <= 0 yields 0 instead of a division error
    if base > 0:
        return delta / base * 100.0
    return 0.0


# -----------------------------
# Budget roll-up
# -----------------------------
@dataclass(frozen=True)
class BudgetTotals:
    underwriting_total: float
    forecast_total: float
    actual_total: float
    items_with_actual: int


def baseline_amount(item: Any) -> float:
    """Forecast when set (> 0), otherwise underwriting."""
    forecast = num_field(item, "forecast_amount")
    return forecast if forecast > 0 else num_field(item, "underwriting_amount")


def budget_totals(items: Iterable[Any]) -> BudgetTotals:
    uw = 0.0
    fc = 0.0
    act = 0.0
    with_actual = 0
    for it in items:
        uw += num_field(it, "underwriting_amount")
        fc += num_field(it, "forecast_amount")
        a = _opt_num(it, "actual_amount")
        if a is not None:
            act += a
            with_actual += 1
    return BudgetTotals(
        underwriting_total=uw,
        forecast_total=fc,
        actual_total=act,
        items_with_actual=with_actual,
    )


def active_phase(totals: BudgetTotals) -> str:
    if totals.actual_total > 0:
        return PHASE_ACTUAL
    if totals.forecast_total > 0:
        return PHASE_FORECAST
    return PHASE_UNDERWRITING


def baseline_total(totals: BudgetTotals) -> float:
    return totals.forecast_total if totals.forecast_total > 0 else totals.underwriting_total


@dataclass(frozen=True)
class LineVariance:
    forecast_variance: float
    actual_variance: Optional[float]
    total_variance: Optional[float]


def line_variance(item: Any) -> LineVariance:
    uw = num_field(item, "underwriting_amount")
    fc = num_field(item, "forecast_amount")
    act = _opt_num(item, "actual_amount")
    return LineVariance(
        forecast_variance=_money(fc - uw),
        actual_variance=None if act is None else _money(act - fc),
        total_variance=None if act is None else _money(act - uw),
    )


@dataclass(frozen=True)
class CategoryRollup:
    category: str
    label: str
    item_count: int
    underwriting_total: float
    forecast_total: float
    actual_total: float
    forecast_variance_total: float
    actual_variance_total: float
    total_variance_total: float
    completed_count: int
    in_progress_count: int
    not_started_count: int


def category_rollups(items: Iterable[Any]) -> list[CategoryRollup]:
    """
    One row per known category, in catalog order, zero-filled when a
    category has no items. Items carrying an unknown category are appended
    after the known ones so no money silently drops out of the sum.
    """
    buckets: dict[str, list[Any]] = {k: [] for k, _ in BUDGET_CATEGORIES}
    labels = dict(BUDGET_CATEGORIES)
    for it in items:
        cat = category_key(it)
        buckets.setdefault(cat, []).append(it)

    out: list[CategoryRollup] = []
    for cat, rows in buckets.items():
        t = budget_totals(rows)
        fv = 0.0
        av = 0.0
        tv = 0.0
        for r in rows:
            lv = line_variance(r)
            fv += lv.forecast_variance
            av += lv.actual_variance or 0.0
            tv += lv.total_variance or 0.0
        statuses = [_status(r) for r in rows]
        out.append(
            CategoryRollup(
                category=cat,
                label=labels.get(cat, cat.replace("_", " ").title()),
                item_count=len(rows),
                underwriting_total=_money(t.underwriting_total),
                forecast_total=_money(t.forecast_total),
                actual_total=_money(t.actual_total),
                forecast_variance_total=_money(fv),
                actual_variance_total=_money(av),
                total_variance_total=_money(tv),
                completed_count=statuses.count("complete"),
                in_progress_count=statuses.count("in_progress"),
                not_started_count=statuses.count("not_started"),
            )
        )
    return out


@dataclass(frozen=True)
class Progress:
    total_items: int
    completed_items: int
    in_progress_items: int
    percent_complete: float


def progress(items: Iterable[Any]) -> Progress:
    statuses = [_status(it) for it in items]
    total = len(statuses)
    done = statuses.count("complete")
    return Progress(
        total_items=total,
        completed_items=done,
        in_progress_items=statuses.count("in_progress"),
        percent_complete=_pct(done / total * 100.0) if total else 0.0,
    )


# -----------------------------
# Contingency / variances
# -----------------------------
def contingency_amount(phase_total: float, contingency_percent: float) -> float:
    return finite(phase_total) * (finite(contingency_percent) / 100.0)


def with_contingency(phase_total: float, contingency_percent: float) -> float:
    return finite(phase_total) + contingency_amount(phase_total, contingency_percent)


def variance_alert(variance_percent: float, thresholds: Thresholds) -> str:
    # only overruns alert; coming in under budget is "ok"
    if variance_percent > thresholds.variance_critical:
        return "critical"
    if variance_percent > thresholds.variance_warning:
        return "warning"
    return "ok"


@dataclass(frozen=True)
class Variances:
    forecast_vs_underwriting: float
    forecast_vs_underwriting_percent: float
    forecast_vs_underwriting_alert: str
    baseline_phase: str
    actual_vs_baseline: float
    actual_vs_baseline_percent: float
    actual_vs_baseline_alert: str
    actual_vs_underwriting: float
    actual_vs_underwriting_percent: float


def variances(totals: BudgetTotals, thresholds: Thresholds) -> Variances:
    uw = totals.underwriting_total
    fc_delta = totals.forecast_total - uw
    fc_pct = percent_of(fc_delta, uw)

    baseline = baseline_total(totals)
    base_phase = PHASE_FORECAST if totals.forecast_total > 0 else PHASE_UNDERWRITING
    act_delta = totals.actual_total - baseline
    act_pct = percent_of(act_delta, baseline)

    act_uw_delta = totals.actual_total - uw

    return Variances(
        forecast_vs_underwriting=_money(fc_delta),
        forecast_vs_underwriting_percent=_pct(fc_pct),
        forecast_vs_underwriting_alert=variance_alert(fc_pct, thresholds),
        baseline_phase=base_phase,
        actual_vs_baseline=_money(act_delta),
        actual_vs_baseline_percent=_pct(act_pct),
        actual_vs_baseline_alert=variance_alert(act_pct, thresholds),
        actual_vs_underwriting=_money(act_uw_delta),
        actual_vs_underwriting_percent=_pct(percent_of(act_uw_delta, uw)),
    )


# -----------------------------
# Carrying costs / scenarios
# -----------------------------
@dataclass(frozen=True)
class CarryingCosts:
    holding_costs_total: float
    selling_costs: float


def carrying_costs(project: Any) -> CarryingCosts:
    return CarryingCosts(
        holding_costs_total=num_field(project, "holding_costs_monthly") * num_field(project, "hold_months"),
        selling_costs=num_field(project, "arv") * (num_field(project, "selling_cost_percent") / 100.0),
    )


def roi_band(roi: float, thresholds: Thresholds) -> str:
    if roi >= thresholds.roi_good:
        return "good"
    if roi >= thresholds.roi_fair:
        return "caution"
    return "poor"


@dataclass(frozen=True)
class Scenario:
    phase: str
    rehab_budget: float
    total_investment: float
    gross_profit: float
    roi: float
    roi_band: str


def scenario(
    project: Any,
    rehab_budget: float,
    *,
    phase: str,
    carrying: Optional[CarryingCosts] = None,
    thresholds: Optional[Thresholds] = None,
) -> Scenario:
    th = thresholds or Thresholds()
    cc = carrying or carrying_costs(project)

    total_investment = (
        num_field(project, "purchase_price")
        + finite(rehab_budget)
        + num_field(project, "closing_costs")
        + cc.holding_costs_total
        + cc.selling_costs
    )
    gross_profit = num_field(project, "arv") - total_investment
    roi = gross_profit / total_investment * 100.0 if total_investment > 0 else 0.0

    return Scenario(
        phase=phase,
        rehab_budget=_money(rehab_budget),
        total_investment=_money(total_investment),
        gross_profit=_money(gross_profit),
        roi=_pct(roi),
        roi_band=roi_band(roi, th),
    )


@dataclass(frozen=True)
class MaoResult:
    mao: float
    spread: float
    status: str  # under|over
    arv_multiplier: float


def max_allowable_offer(
    arv: float,
    underwriting_with_contingency: float,
    purchase_price: float,
    *,
    arv_multiplier: float = 0.70,
) -> MaoResult:
    """
    70% rule, always against the underwriting budget with contingency:
        mao    = arv * multiplier - underwriting_with_contingency
        spread = mao - purchase_price   (>= 0 means bought under MAO)
    """
    mao = finite(arv) * finite(arv_multiplier) - finite(underwriting_with_contingency)
    spread = mao - finite(purchase_price)
    return MaoResult(
        mao=_money(mao),
        spread=_money(spread),
        status="under" if spread >= 0 else "over",
        arv_multiplier=float(arv_multiplier),
    )


# -----------------------------
# Draws / vendors
# -----------------------------
@dataclass(frozen=True)
class DrawRollup:
    total_budget: float
    total_paid: float
    total_pending: float
    remaining: float
    percent_paid: float
    draw_count: int
    next_draw_number: int


def next_draw_number(draws: Iterable[Any]) -> int:
    # junk numbers count as 0 rather than raising
    numbers = [int(finite(n)) for n in (get_field(d, "draw_number") for d in draws) if n is not None]
    return max(numbers) + 1 if numbers else 1


def draw_rollup(draws: Iterable[Any], total_budget_with_contingency: float) -> DrawRollup:
    """remaining may go negative: that is an overrun signal, not an error."""
    rows = list(draws)
    paid = sum(num_field(d, "amount") for d in rows if _status(d) == "paid")
    pending = sum(num_field(d, "amount") for d in rows if _status(d) in OPEN_DRAW_STATUSES)
    budget = finite(total_budget_with_contingency)
    return DrawRollup(
        total_budget=_money(budget),
        total_paid=_money(paid),
        total_pending=_money(pending),
        remaining=_money(budget - paid - pending),
        percent_paid=_pct(percent_of(paid, budget)),
        draw_count=len(rows),
        next_draw_number=next_draw_number(rows),
    )


@dataclass(frozen=True)
class VendorRollup:
    vendor_id: Any
    budget: float
    actual: float
    item_count: int


def vendor_rollups(items: Iterable[Any]) -> dict[Any, VendorRollup]:
    acc: dict[Any, list[float]] = {}
    for it in items:
        vid = get_field(it, "vendor_id")
        if vid is None:
            continue
        row = acc.setdefault(vid, [0.0, 0.0, 0])
        row[0] += baseline_amount(it)
        row[1] += num_field(it, "actual_amount")
        row[2] += 1
    return {
        vid: VendorRollup(vendor_id=vid, budget=_money(b), actual=_money(a), item_count=int(n))
        for vid, (b, a, n) in acc.items()
    }


# -----------------------------
# Full project analysis
# -----------------------------
@dataclass(frozen=True)
class DealEconomics:
    contingency_percent: float

    underwriting_total: float
    forecast_total: float
    actual_total: float

    underwriting_contingency: float
    forecast_contingency: float
    underwriting_with_contingency: float
    forecast_with_contingency: float

    baseline_total: float
    baseline_with_contingency: float

    holding_costs_total: float
    selling_costs: float

    active_phase: str
    variances: Variances
    scenarios: dict[str, Scenario]
    active: Scenario
    mao: MaoResult
    progress: Progress

    categories: list[CategoryRollup] = field(default_factory=list)
    vendors: list[VendorRollup] = field(default_factory=list)
    draws: Optional[DrawRollup] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def analyze_project(
    project: Any,
    items: Iterable[Any],
    draws: Optional[Iterable[Any]] = None,
    *,
    thresholds: Optional[Thresholds] = None,
) -> DealEconomics:
    th = thresholds or Thresholds()
    rows = list(items)

    totals = budget_totals(rows)
    pct = num_field(project, "contingency_percent")

    uw_cont = contingency_amount(totals.underwriting_total, pct)
    fc_cont = contingency_amount(totals.forecast_total, pct)
    uw_with = totals.underwriting_total + uw_cont
    fc_with = totals.forecast_total + fc_cont

    baseline = baseline_total(totals)
    baseline_with = with_contingency(baseline, pct)

    cc = carrying_costs(project)

    # actual spend is real money already committed: no contingency on it
    scenarios = {
        PHASE_UNDERWRITING: scenario(project, uw_with, phase=PHASE_UNDERWRITING, carrying=cc, thresholds=th),
        PHASE_FORECAST: scenario(project, fc_with, phase=PHASE_FORECAST, carrying=cc, thresholds=th),
        PHASE_ACTUAL: scenario(project, totals.actual_total, phase=PHASE_ACTUAL, carrying=cc, thresholds=th),
    }
    phase = active_phase(totals)

    mao = max_allowable_offer(
        num_field(project, "arv"),
        uw_with,
        num_field(project, "purchase_price"),
        arv_multiplier=th.mao_arv_multiplier,
    )

    return DealEconomics(
        contingency_percent=pct,
        underwriting_total=_money(totals.underwriting_total),
        forecast_total=_money(totals.forecast_total),
        actual_total=_money(totals.actual_total),
        underwriting_contingency=_money(uw_cont),
        forecast_contingency=_money(fc_cont),
        underwriting_with_contingency=_money(uw_with),
        forecast_with_contingency=_money(fc_with),
        baseline_total=_money(baseline),
        baseline_with_contingency=_money(baseline_with),
        holding_costs_total=_money(cc.holding_costs_total),
        selling_costs=_money(cc.selling_costs),
        active_phase=phase,
        variances=variances(totals, th),
        scenarios=scenarios,
        active=scenarios[phase],
        mao=mao,
        progress=progress(rows),
        categories=category_rollups(rows),
        vendors=list(vendor_rollups(rows).values()),
        draws=draw_rollup(draws, baseline_with) if draws is not None else None,
    )
