# backend/tests/test_budget_templates.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest

from app.domain.errors import DomainValidationError
from app.domain.template_library import system_templates
from app.domain.templates import lines_from_budget_items, line_key, plan_apply, template_summary


@dataclass
class T:
    category: str
    item: str
    sort_order: int
    qty: Optional[float] = None
    rate: Optional[float] = None
    default_amount: Optional[float] = None
    unit: str = "ls"
    cost_type: str = "both"
    default_priority: str = "medium"
    description: Optional[str] = None
    id: int = 0


@dataclass
class B:
    id: int
    category: str
    item: str
    sort_order: int
    qty: float = 1.0
    rate: float = 0.0
    underwriting_amount: float = 0.0
    unit: str = "ea"
    cost_type: str = "both"
    priority: str = "medium"
    description: Optional[str] = None


TEMPLATE = [
    T("kitchen", "Cabinets", 1100, qty=20, rate=175, default_amount=3500, unit="lf"),
    T("soft_costs", "Permits & Inspections", 100, qty=1, rate=500, default_amount=500, default_priority="high"),
    T("finishing", "Final Clean", 1700, qty=1, rate=400, default_amount=400, cost_type="labor"),
]


def test_line_key_ignores_item_case():
    assert line_key("kitchen", "Cabinets") == line_key("kitchen", "cabinets")
    assert line_key("kitchen", "Cabinets") != line_key("bathrooms", "Cabinets")


def test_skip_keeps_existing_lines_and_appends_after_them():
    existing = [B(1, "kitchen", "cabinets", sort_order=4, underwriting_amount=9000)]

    plan = plan_apply(TEMPLATE, existing, mode="skip", include_amounts=True)

    assert (plan.added, plan.updated, plan.skipped) == (2, 0, 1)
    # template order is by sort_order: permits (idx 0), cabinets (idx 1, skipped), clean (idx 2)
    assert [(r["item"], r["sort_order"]) for r in plan.inserts] == [
        ("Permits & Inspections", 14),
        ("Final Clean", 34),
    ]
    assert plan.inserts[0]["priority"] == "high"
    assert plan.inserts[0]["underwriting_amount"] == 500
    assert plan.inserts[1]["cost_type"] == "labor"
    assert all(r["status"] == "not_started" and r["actual_amount"] is None for r in plan.inserts)


def test_merge_overwrites_amounts_only_with_include_amounts():
    existing = [B(7, "kitchen", "CABINETS", sort_order=0, qty=10, rate=150, underwriting_amount=1500)]

    merged = plan_apply(TEMPLATE, existing, mode="merge", include_amounts=True)
    assert merged.updates == [(7, {"underwriting_amount": 3500.0, "qty": 20.0, "rate": 175.0})]
    assert (merged.added, merged.updated, merged.skipped) == (2, 1, 0)

    untouched = plan_apply(TEMPLATE, existing, mode="merge", include_amounts=False)
    assert untouched.updates == []
    assert untouched.skipped == 1


def test_replace_clears_and_keeps_template_sort_order():
    existing = [B(1, "kitchen", "Cabinets", sort_order=0)]

    plan = plan_apply(TEMPLATE, existing, mode="replace", include_amounts=False)

    assert plan.clear_existing is True
    assert (plan.added, plan.updated, plan.skipped) == (3, 0, 0)
    assert [r["sort_order"] for r in plan.inserts] == [100, 1100, 1700]
    # without amounts the lines are placeholders
    assert {(r["qty"], r["rate"], r["underwriting_amount"]) for r in plan.inserts} == {(0.0, 0.0, 0.0)}


def test_empty_project_starts_at_ten():
    plan = plan_apply(TEMPLATE, [], mode="skip")
    assert [r["sort_order"] for r in plan.inserts] == [10, 20, 30]


def test_missing_template_amounts_become_zero():
    plan = plan_apply([T("demo", "Haul-off", 0)], [], mode="skip", include_amounts=True)
    assert plan.inserts[0]["qty"] == 0.0
    assert plan.inserts[0]["underwriting_amount"] == 0.0


def test_bad_mode_and_empty_template_are_rejected():
    with pytest.raises(DomainValidationError):
        plan_apply(TEMPLATE, [], mode="overwrite")
    with pytest.raises(DomainValidationError):
        plan_apply([], [], mode="skip")


def test_lines_from_budget_items_renumbers_in_budget_order():
    items = [
        B(3, "kitchen", "Countertops", sort_order=5, qty=30, rate=85, underwriting_amount=2550, unit="sf"),
        B(1, "demo", "Kitchen Demo", sort_order=1, qty=1, rate=1500, underwriting_amount=1500, priority="high"),
    ]

    with_amounts = lines_from_budget_items(items, include_amounts=True)
    assert [(x["item"], x["sort_order"]) for x in with_amounts] == [("Kitchen Demo", 0), ("Countertops", 10)]
    assert with_amounts[0]["default_priority"] == "high"
    assert with_amounts[1]["default_amount"] == 2550

    bare = lines_from_budget_items(items)
    assert {x["default_amount"] for x in bare} == {0.0}
    assert bare[1]["unit"] == "sf"


def test_template_summary_counts_categories_in_order():
    s = template_summary(TEMPLATE)
    assert s.item_count == 3
    assert s.category_count == 3
    assert s.categories == ["soft_costs", "kitchen", "finishing"]
    assert s.total_estimate == 4400


def test_system_templates_use_known_categories_and_units():
    from app.domain.catalog import CATEGORY_KEYS, COST_TYPES, SCOPE_LEVELS, UNIT_TYPES

    shipped = system_templates()
    assert [t.scope_level for t in shipped] == ["light", "medium", "gut", "heavy"]
    for tpl in shipped:
        assert tpl.scope_level in SCOPE_LEVELS
        keys = [line_key(c, i) for c, i, _, _, _ in tpl.lines]
        assert len(keys) == len(set(keys)), tpl.name
        for category, _, unit, cost_type, _ in tpl.lines:
            assert category in CATEGORY_KEYS
            assert unit in UNIT_TYPES
            assert cost_type in COST_TYPES
