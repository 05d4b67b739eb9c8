# backend/app/domain/portfolio.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Iterable, Optional

from .catalog import BUDGET_CATEGORIES, CLOSED_PROJECT_STATUSES, PROJECT_STATUSES
from .economics import Thresholds, analyze_project, baseline_amount, category_key, finite, get_field, num_field


@dataclass(frozen=True)
class ProjectCard:
    project_id: Any
    name: str
    status: str
    arv: float
    purchase_price: float
    rehab_budget: float
    rehab_actual: float
    active_phase: str
    roi: float
    roi_band: str
    mao: float
    rehab_progress: float


@dataclass(frozen=True)
class CategorySpend:
    category: str
    budget: float
    actual: float
    project_count: int


@dataclass(frozen=True)
class PortfolioRollup:
    projects: list[ProjectCard]
    total_arv: float
    capital_deployed: float
    average_roi: float
    project_counts: dict[str, int]
    category_spends: list[CategorySpend]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def project_card(project: Any, items: list[Any], thresholds: Thresholds) -> ProjectCard:
    econ = analyze_project(project, items, thresholds=thresholds)
    budget = econ.baseline_with_contingency
    actual = econ.actual_total
    if budget > 0:
        rehab_progress = min(100.0, max(0.0, actual / budget * 100.0))
    else:
        rehab_progress = 0.0
    return ProjectCard(
        project_id=get_field(project, "id"),
        name=str(get_field(project, "name", "") or ""),
        status=str(get_field(project, "status", "lead") or "lead"),
        arv=round(num_field(project, "arv"), 2),
        purchase_price=round(num_field(project, "purchase_price"), 2),
        rehab_budget=budget,
        rehab_actual=actual,
        active_phase=econ.active_phase,
        roi=econ.active.roi,
        roi_band=econ.active.roi_band,
        mao=econ.mao.mao,
        rehab_progress=round(rehab_progress, 1),
    )


def portfolio_rollup(
    projects: Iterable[tuple[Any, list[Any]]],
    *,
    thresholds: Optional[Thresholds] = None,
) -> PortfolioRollup:
    """
    Portfolio dashboard figures over (project, budget_items) pairs.

    - total_arv / capital_deployed cover active projects only (not sold/dead)
    - average_roi prefers realised deals (sold); falls back to active ones
    - category_spends use each item's baseline (forecast if set, else underwriting)
    """
    th = thresholds or Thresholds()
    pairs = list(projects)

    cards = [project_card(p, items, th) for p, items in pairs]
    active = [c for c in cards if c.status not in CLOSED_PROJECT_STATUSES]
    sold = [c for c in cards if c.status == "sold"]

    total_arv = sum(c.arv for c in active)
    capital_deployed = sum(c.purchase_price + c.rehab_actual for c in active)
    average_roi = _mean([c.roi for c in sold]) if sold else _mean([c.roi for c in active])

    counts: dict[str, int] = {s: 0 for s in PROJECT_STATUSES}
    for c in cards:
        counts[c.status] = counts.get(c.status, 0) + 1
    counts["total"] = len(cards)

    spend: dict[str, list] = {}
    for p, items in pairs:
        pid = get_field(p, "id")
        for it in items:
            cat = category_key(it)
            row = spend.setdefault(cat, [0.0, 0.0, set()])
            row[0] += baseline_amount(it)
            row[1] += finite(get_field(it, "actual_amount"))
            row[2].add(pid)

    order = {k: i for i, (k, _) in enumerate(BUDGET_CATEGORIES)}
    category_spends = [
        CategorySpend(category=cat, budget=round(b, 2), actual=round(a, 2), project_count=len(pids))
        for cat, (b, a, pids) in sorted(spend.items(), key=lambda kv: order.get(kv[0], len(order)))
    ]

    return PortfolioRollup(
        projects=cards,
        total_arv=round(total_arv, 2),
        capital_deployed=round(capital_deployed, 2),
        average_roi=round(average_roi, 2),
        project_counts=counts,
        category_spends=category_spends,
    )
