# backend/app/domain/templates.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .catalog import TEMPLATE_APPLY_MODES
from .economics import finite, get_field
from .errors import DomainValidationError


def line_key(category: Any, item: Any) -> str:
    """Identity used to match template lines against existing budget lines."""
    return f"{category or ''}:{str(item or '').lower()}"


@dataclass(frozen=True)
class ApplyPlan:
    """
    What applying a template to a project would do.

    `inserts` are budget-item field dicts (no project / org ids).
    `updates` pairs an existing budget item id with the fields to overwrite.
    """

    mode: str
    include_amounts: bool
    clear_existing: bool
    inserts: list[dict[str, Any]] = field(default_factory=list)
    updates: list[tuple[int, dict[str, Any]]] = field(default_factory=list)
    skipped: int = 0

    @property
    def added(self) -> int:
        return len(self.inserts)

    @property
    def updated(self) -> int:
        return len(self.updates)


def _sorted_lines(lines: Iterable[Any]) -> list[Any]:
    return sorted(lines, key=lambda x: (int(finite(get_field(x, "sort_order"))), int(finite(get_field(x, "id")))))


def plan_apply(
    template_items: Iterable[Any],
    existing_items: Iterable[Any],
    *,
    mode: str = "skip",
    include_amounts: bool = False,
) -> ApplyPlan:
    """
    skip:    lines the project already has are left alone and counted as skipped
    merge:   with include_amounts, existing lines take the template's qty / rate /
             amount (underwriting); without it they are skipped
    replace: the project's lines are cleared first and every template line is added
             at the template's own sort order

    New lines elsewhere are appended after the project's highest sort order in
    steps of 10. Without include_amounts new lines carry qty, rate and
    underwriting of 0 so the budget is filled in by hand.
    """
    if mode not in TEMPLATE_APPLY_MODES:
        raise DomainValidationError(f"mode must be one of {list(TEMPLATE_APPLY_MODES)}, got {mode!r}")

    lines = _sorted_lines(template_items)
    if not lines:
        raise DomainValidationError("template has no items")

    existing = [] if mode == "replace" else list(existing_items)
    by_key = {line_key(get_field(x, "category"), get_field(x, "item")): x for x in existing}
    max_sort = max((int(finite(get_field(x, "sort_order"))) for x in existing), default=0)

    inserts: list[dict[str, Any]] = []
    updates: list[tuple[int, dict[str, Any]]] = []
    skipped = 0
    for idx, line in enumerate(lines):
        qty = finite(get_field(line, "qty")) if include_amounts else 0.0
        rate = finite(get_field(line, "rate")) if include_amounts else 0.0
        amount = finite(get_field(line, "default_amount")) if include_amounts else 0.0

        hit = by_key.get(line_key(get_field(line, "category"), get_field(line, "item")))
        if hit is not None:
            if mode == "merge" and include_amounts:
                updates.append((int(get_field(hit, "id")), {"underwriting_amount": amount, "qty": qty, "rate": rate}))
            else:
                skipped += 1
            continue

        if mode == "replace":
            sort_order = int(finite(get_field(line, "sort_order")))
        else:
            sort_order = max_sort + 10 + idx * 10

        inserts.append(
            {
                "category": get_field(line, "category"),
                "item": get_field(line, "item"),
                "description": get_field(line, "description"),
                "qty": qty,
                "unit": get_field(line, "unit") or "ls",
                "rate": rate,
                "underwriting_amount": amount,
                "forecast_amount": 0.0,
                "actual_amount": None,
                "cost_type": get_field(line, "cost_type") or "both",
                "status": "not_started",
                "priority": get_field(line, "default_priority") or "medium",
                "sort_order": sort_order,
            }
        )

    return ApplyPlan(
        mode=mode,
        include_amounts=bool(include_amounts),
        clear_existing=mode == "replace",
        inserts=inserts,
        updates=updates,
        skipped=skipped,
    )


def lines_from_budget_items(items: Iterable[Any], *, include_amounts: bool = False) -> list[dict[str, Any]]:
    """Template lines for "save project as template", renumbered 0, 10, 20... in budget order."""
    out: list[dict[str, Any]] = []
    for idx, it in enumerate(_sorted_lines(items)):
        out.append(
            {
                "category": get_field(it, "category"),
                "item": get_field(it, "item"),
                "description": get_field(it, "description"),
                "qty": finite(get_field(it, "qty")) if include_amounts else 0.0,
                "unit": get_field(it, "unit") or "ls",
                "rate": finite(get_field(it, "rate")) if include_amounts else 0.0,
                "default_amount": finite(get_field(it, "underwriting_amount")) if include_amounts else 0.0,
                "cost_type": get_field(it, "cost_type") or "both",
                "default_priority": get_field(it, "priority") or "medium",
                "suggested_trade": None,
                "sort_order": idx * 10,
            }
        )
    return out


@dataclass(frozen=True)
class TemplateSummary:
    item_count: int
    category_count: int
    total_estimate: float
    categories: list[str]


def template_summary(items: Iterable[Any]) -> TemplateSummary:
    rows = list(items)
    categories: list[str] = []
    for it in _sorted_lines(rows):
        cat = get_field(it, "category")
        if cat and cat not in categories:
            categories.append(cat)
    total = sum(finite(get_field(it, "default_amount")) for it in rows)
    return TemplateSummary(
        item_count=len(rows),
        category_count=len(categories),
        total_estimate=round(total, 2),
        categories=categories,
    )


def copy_name(name: Optional[str]) -> str:
    return f"{(name or 'Untitled').strip()} (Copy)"
