# backend/app/domain/catalog.py
from __future__ import annotations

# Fixed enumerations shared by the store, the calculator and the API.
# Order of BUDGET_CATEGORIES is the display / rollup order.

BUDGET_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("soft_costs", "Soft Costs"),
    ("demo", "Demo"),
    ("structural", "Structural/Framing"),
    ("plumbing", "Plumbing"),
    ("hvac", "HVAC"),
    ("electrical", "Electrical"),
    ("insulation_drywall", "Insulation/Drywall"),
    ("interior_paint", "Interior Paint"),
    ("flooring", "Flooring"),
    ("tile", "Tile"),
    ("kitchen", "Kitchen"),
    ("bathrooms", "Bathrooms"),
    ("doors_windows", "Doors/Windows"),
    ("interior_trim", "Interior Trim"),
    ("exterior", "Exterior"),
    ("landscaping", "Landscaping"),
    ("finishing", "Finishing Touches"),
    ("contingency", "Contingency"),
)

CATEGORY_KEYS: tuple[str, ...] = tuple(k for k, _ in BUDGET_CATEGORIES)
_CATEGORY_LABELS = dict(BUDGET_CATEGORIES)

UNIT_TYPES = ("sf", "lf", "ea", "ls", "sq", "hr", "day", "week", "month", "load", "ton", "set", "opening")

COST_TYPES = ("labor", "materials", "both")

PRIORITIES = ("high", "medium", "low")

ITEM_STATUSES = ("not_started", "in_progress", "complete", "on_hold", "cancelled")

PROJECT_STATUSES = ("lead", "analyzing", "under_contract", "in_rehab", "listed", "sold", "dead")

# Projects in these statuses are excluded from "active" portfolio figures.
CLOSED_PROJECT_STATUSES = ("sold", "dead")

PROPERTY_TYPES = ("sfh", "duplex", "triplex", "fourplex", "townhouse", "condo")

VENDOR_TRADES = (
    "general_contractor",
    "plumber",
    "electrician",
    "hvac",
    "roofer",
    "drywall",
    "painter",
    "flooring",
    "tile",
    "cabinets",
    "countertops",
    "framing",
    "siding",
    "landscaper",
    "concrete",
    "fencing",
    "windows_doors",
    "cleaning",
    "inspector",
    "appraiser",
    "other",
)

VENDOR_STATUSES = ("active", "inactive", "do_not_use")

VENDOR_RELIABILITY = ("excellent", "good", "fair", "poor")

PRICE_LEVELS = ("$", "$$", "$$$")

DRAW_STATUSES = ("pending", "approved", "paid")

# Draw statuses that count as committed-but-unpaid money.
OPEN_DRAW_STATUSES = ("pending", "approved")

DRAW_MILESTONES = ("project_start", "demo_complete", "rough_in", "drywall", "finishes", "final")

PAYMENT_METHODS = ("check", "zelle", "venmo", "wire", "cash", "credit_card", "other")

TEMPLATE_TYPES = ("system", "user")

SCOPE_LEVELS = ("light", "medium", "heavy", "gut")

# How a template treats lines the project already has (matched on category + item name).
TEMPLATE_APPLY_MODES = ("skip", "merge", "replace")

CONTACT_TYPES = (
    "phone_call",
    "text_message",
    "email",
    "in_person",
    "site_visit",
    "quote_request",
    "quote_received",
    "job_assigned",
    "job_completed",
    "payment",
    "other",
)

JOURNAL_PAGE_TYPES = ("note", "meeting", "checklist", "idea", "research", "site_visit")

DEFAULT_TAG_COLOR = "#6366f1"


def category_label(value: str) -> str:
    return _CATEGORY_LABELS.get(value, value.replace("_", " ").title())


def catalog_payload() -> dict[str, list]:
    return {
        "budget_categories": [{"value": k, "label": v} for k, v in BUDGET_CATEGORIES],
        "unit_types": list(UNIT_TYPES),
        "cost_types": list(COST_TYPES),
        "priorities": list(PRIORITIES),
        "item_statuses": list(ITEM_STATUSES),
        "project_statuses": list(PROJECT_STATUSES),
        "property_types": list(PROPERTY_TYPES),
        "vendor_trades": list(VENDOR_TRADES),
        "vendor_statuses": list(VENDOR_STATUSES),
        "draw_statuses": list(DRAW_STATUSES),
        "draw_milestones": list(DRAW_MILESTONES),
        "payment_methods": list(PAYMENT_METHODS),
        "template_types": list(TEMPLATE_TYPES),
        "scope_levels": list(SCOPE_LEVELS),
        "template_apply_modes": list(TEMPLATE_APPLY_MODES),
        "contact_types": list(CONTACT_TYPES),
        "journal_page_types": list(JOURNAL_PAGE_TYPES),
    }
