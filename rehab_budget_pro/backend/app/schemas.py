# backend/app/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, ConfigDict, model_validator

from .domain.catalog import (
    CATEGORY_KEYS,
    CONTACT_TYPES,
    COST_TYPES,
    DRAW_MILESTONES,
    DRAW_STATUSES,
    ITEM_STATUSES,
    JOURNAL_PAGE_TYPES,
    PAYMENT_METHODS,
    PRICE_LEVELS,
    PRIORITIES,
    PROJECT_STATUSES,
    PROPERTY_TYPES,
    SCOPE_LEVELS,
    TEMPLATE_APPLY_MODES,
    UNIT_TYPES,
    VENDOR_RELIABILITY,
    VENDOR_STATUSES,
    VENDOR_TRADES,
)


def _one_of(model: BaseModel, field: str, allowed: tuple[str, ...]) -> None:
    v = getattr(model, field, None)
    if v is not None and v not in allowed:
        raise ValueError(f"{field} must be one of {list(allowed)}, got {v!r}")


# -------------------- Projects --------------------

class ProjectBase(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None

    beds: Optional[float] = Field(default=None, ge=0)
    baths: Optional[float] = Field(default=None, ge=0)
    sqft: Optional[int] = Field(default=None, ge=0)
    year_built: Optional[int] = Field(default=None, ge=1700, le=2100)
    property_type: Optional[str] = None

    arv: Optional[float] = Field(default=None, ge=0)
    purchase_price: Optional[float] = Field(default=None, ge=0)
    closing_costs: Optional[float] = Field(default=None, ge=0)
    holding_costs_monthly: Optional[float] = Field(default=None, ge=0)

    status: Optional[str] = None
    contract_date: Optional[date] = None
    close_date: Optional[date] = None
    rehab_start_date: Optional[date] = None
    target_complete_date: Optional[date] = None
    list_date: Optional[date] = None
    sale_date: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "property_type", PROPERTY_TYPES)
        _one_of(self, "status", PROJECT_STATUSES)
        return self


class ProjectCreate(ProjectBase):
    name: str = Field(min_length=1, max_length=200)
    # omitted -> settings.default_* (see routers/projects.py)
    state: Optional[str] = Field(default=None, max_length=2)
    hold_months: Optional[float] = Field(default=None, ge=0)
    selling_cost_percent: Optional[float] = Field(default=None, ge=0, le=100)
    contingency_percent: Optional[float] = Field(default=None, ge=0, le=100)


class ProjectUpdate(ProjectBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    state: Optional[str] = Field(default=None, max_length=2)
    hold_months: Optional[float] = Field(default=None, ge=0)
    selling_cost_percent: Optional[float] = Field(default=None, ge=0, le=100)
    contingency_percent: Optional[float] = Field(default=None, ge=0, le=100)


class ProjectOut(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    beds: Optional[float] = None
    baths: Optional[float] = None
    sqft: Optional[int] = None
    year_built: Optional[int] = None
    property_type: str

    arv: Optional[float] = None
    purchase_price: Optional[float] = None
    closing_costs: float
    holding_costs_monthly: float
    hold_months: float
    selling_cost_percent: float
    contingency_percent: float

    status: str
    contract_date: Optional[date] = None
    close_date: Optional[date] = None
    rehab_start_date: Optional[date] = None
    target_complete_date: Optional[date] = None
    list_date: Optional[date] = None
    sale_date: Optional[date] = None
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Budget items --------------------

class BudgetItemBase(BaseModel):
    vendor_id: Optional[int] = None
    description: Optional[str] = None
    room_area: Optional[str] = None
    unit: Optional[str] = None
    cost_type: Optional[str] = None
    priority: Optional[str] = None
    sort_order: Optional[int] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "category", CATEGORY_KEYS)
        _one_of(self, "unit", UNIT_TYPES)
        _one_of(self, "cost_type", COST_TYPES)
        _one_of(self, "priority", PRIORITIES)
        return self


class BudgetItemCreate(BudgetItemBase):
    project_id: int
    category: str
    item: str = Field(min_length=1, max_length=255)
    qty: float = Field(default=1.0, ge=0)
    rate: float = Field(default=0.0, ge=0)

    # omitted -> qty * rate
    underwriting_amount: Optional[float] = Field(default=None, ge=0)
    forecast_amount: float = Field(default=0.0, ge=0)
    actual_amount: Optional[float] = Field(default=None, ge=0)


class BudgetItemUpdate(BudgetItemBase):
    category: Optional[str] = None
    item: Optional[str] = Field(default=None, min_length=1, max_length=255)
    qty: Optional[float] = Field(default=None, ge=0)
    rate: Optional[float] = Field(default=None, ge=0)
    underwriting_amount: Optional[float] = Field(default=None, ge=0)
    forecast_amount: Optional[float] = Field(default=None, ge=0)
    # explicit null clears the actual (back to "not yet spent")
    actual_amount: Optional[float] = Field(default=None, ge=0)


class BudgetItemOut(BaseModel):
    id: int
    project_id: int
    vendor_id: Optional[int] = None
    category: str
    item: str
    description: Optional[str] = None
    room_area: Optional[str] = None
    qty: float
    unit: str
    rate: float
    underwriting_amount: float
    forecast_amount: float
    actual_amount: Optional[float] = None
    cost_type: str
    status: str
    priority: str
    sort_order: int
    notes: Optional[str] = None

    forecast_variance: float = 0.0
    actual_variance: Optional[float] = None
    total_variance: Optional[float] = None

    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class StatusChange(BaseModel):
    status: str = Field(min_length=1)


class ReorderIn(BaseModel):
    project_id: int
    item_ids: list[int] = Field(min_length=1)


# -------------------- Vendors --------------------

class VendorBase(BaseModel):
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    licensed: Optional[bool] = None
    insured: Optional[bool] = None
    w9_on_file: Optional[bool] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    reliability: Optional[str] = None
    price_level: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "trade", VENDOR_TRADES)
        _one_of(self, "reliability", VENDOR_RELIABILITY)
        _one_of(self, "price_level", PRICE_LEVELS)
        _one_of(self, "status", VENDOR_STATUSES)
        return self


class VendorCreate(VendorBase):
    name: str = Field(min_length=1, max_length=200)
    trade: str


class VendorUpdate(VendorBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    trade: Optional[str] = None


class VendorOut(BaseModel):
    id: int
    name: str
    trade: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    licensed: bool
    insured: bool
    w9_on_file: bool
    rating: Optional[int] = None
    reliability: Optional[str] = None
    price_level: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class VendorSummaryOut(BaseModel):
    vendor_id: int
    budget: float
    actual: float
    item_count: int
    project_count: int
    draws_paid: float
    draws_pending: float
    draw_count: int
    total_contacts: int = 0
    last_contact_date: Optional[datetime] = None
    pending_follow_ups: int = 0


# -------------------- Draws --------------------

class DrawBase(BaseModel):
    vendor_id: Optional[int] = None
    milestone: Optional[str] = None
    description: Optional[str] = None
    percent_complete: Optional[float] = Field(default=None, ge=0, le=100)
    date_requested: Optional[date] = None
    date_paid: Optional[date] = None
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "milestone", DRAW_MILESTONES)
        _one_of(self, "payment_method", PAYMENT_METHODS)
        return self


class DrawCreate(DrawBase):
    project_id: int
    amount: float = Field(gt=0)
    status: str = "pending"

    @model_validator(mode="after")
    def _check_status(self):
        _one_of(self, "status", DRAW_STATUSES)
        return self


class DrawUpdate(DrawBase):
    # status changes go through POST /draws/{id}/status
    amount: Optional[float] = Field(default=None, gt=0)


class DrawOut(BaseModel):
    id: int
    project_id: int
    vendor_id: Optional[int] = None
    draw_number: int
    milestone: Optional[str] = None
    description: Optional[str] = None
    percent_complete: Optional[float] = None
    amount: float
    date_requested: Optional[date] = None
    date_paid: Optional[date] = None
    status: str
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class DrawStatusChange(StatusChange):
    date_paid: Optional[date] = None


class DrawRollupOut(BaseModel):
    total_budget: float
    total_paid: float
    total_pending: float
    remaining: float
    percent_paid: float
    draw_count: int
    next_draw_number: int


# -------------------- Cost reference --------------------

class CostReferenceCreate(BaseModel):
    category: str
    item: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    unit: str = "ea"
    low: Optional[float] = Field(default=None, ge=0)
    mid: Optional[float] = Field(default=None, ge=0)
    high: Optional[float] = Field(default=None, ge=0)
    market: str = "minneapolis"
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check(self):
        _one_of(self, "category", CATEGORY_KEYS)
        _one_of(self, "unit", UNIT_TYPES)
        rates = [r for r in (self.low, self.mid, self.high) if r is not None]
        if rates != sorted(rates):
            raise ValueError("cost reference rates must satisfy low <= mid <= high")
        return self


class CostReferenceOut(CostReferenceCreate):
    id: int
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class CostReferenceApply(BaseModel):
    project_id: int
    qty: float = Field(default=1.0, ge=0)
    tier: str = "mid"
    room_area: Optional[str] = None
    vendor_id: Optional[int] = None


# -------------------- Calculator outputs --------------------

class ScenarioOut(BaseModel):
    phase: str
    rehab_budget: float
    total_investment: float
    gross_profit: float
    roi: float
    roi_band: str


class MaoOut(BaseModel):
    mao: float
    spread: float
    status: str
    arv_multiplier: float


class VariancesOut(BaseModel):
    forecast_vs_underwriting: float
    forecast_vs_underwriting_percent: float
    forecast_vs_underwriting_alert: str
    baseline_phase: str
    actual_vs_baseline: float
    actual_vs_baseline_percent: float
    actual_vs_baseline_alert: str
    actual_vs_underwriting: float
    actual_vs_underwriting_percent: float


class ProgressOut(BaseModel):
    total_items: int
    completed_items: int
    in_progress_items: int
    percent_complete: float


class CategoryRollupOut(BaseModel):
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


class VendorRollupOut(BaseModel):
    vendor_id: Any
    budget: float
    actual: float
    item_count: int


class DealEconomicsOut(BaseModel):
    project_id: int
    engine_version: str

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
    variances: VariancesOut
    scenarios: dict[str, ScenarioOut]
    active: ScenarioOut
    mao: MaoOut
    progress: ProgressOut

    categories: list[CategoryRollupOut] = Field(default_factory=list)
    vendors: list[VendorRollupOut] = Field(default_factory=list)
    draws: Optional[DrawRollupOut] = None


# -------------------- Estimator / dashboard / feed --------------------

class RehabEstimateOut(BaseModel):
    scope: str
    description: str
    sqft: float
    age_multiplier: float
    low: int
    mid: int
    high: int
    per_sqft_low: int
    per_sqft_mid: int
    per_sqft_high: int


class ProjectCardOut(BaseModel):
    project_id: int
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


class CategorySpendOut(BaseModel):
    category: str
    budget: float
    actual: float
    project_count: int


class PortfolioOut(BaseModel):
    projects: list[ProjectCardOut]
    total_arv: float
    capital_deployed: float
    average_roi: float
    project_counts: dict[str, int]
    category_spends: list[CategorySpendOut]


class ChangeEventOut(BaseModel):
    id: int
    project_id: Optional[int] = None
    actor_user_id: Optional[int] = None
    entity_type: str
    entity_id: str
    action: str
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# -------------------- Budget templates --------------------

class TemplateItemIn(BaseModel):
    category: str
    item: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    qty: Optional[float] = Field(default=None, ge=0)
    unit: str = "ls"
    rate: Optional[float] = Field(default=None, ge=0)
    default_amount: Optional[float] = Field(default=None, ge=0)
    cost_type: str = "both"
    default_priority: str = "medium"
    suggested_trade: Optional[str] = None
    # omitted -> position in the list x 10
    sort_order: Optional[int] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "category", CATEGORY_KEYS)
        _one_of(self, "unit", UNIT_TYPES)
        _one_of(self, "cost_type", COST_TYPES)
        _one_of(self, "default_priority", PRIORITIES)
        _one_of(self, "suggested_trade", VENDOR_TRADES)
        return self


class TemplateItemOut(BaseModel):
    id: int
    category: str
    item: str
    description: Optional[str] = None
    qty: Optional[float] = None
    unit: str
    rate: Optional[float] = None
    default_amount: Optional[float] = None
    cost_type: str
    default_priority: str
    suggested_trade: Optional[str] = None
    sort_order: int
    model_config = ConfigDict(from_attributes=True)


class TemplateBase(BaseModel):
    description: Optional[str] = None
    property_type: Optional[str] = None
    scope_level: Optional[str] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "property_type", PROPERTY_TYPES)
        _one_of(self, "scope_level", SCOPE_LEVELS)
        return self


class TemplateCreate(TemplateBase):
    name: str = Field(min_length=1, max_length=200)
    is_favorite: bool = False
    items: list[TemplateItemIn] = Field(default_factory=list)


class TemplateUpdate(TemplateBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    is_favorite: Optional[bool] = None
    is_active: Optional[bool] = None


class TemplateOut(BaseModel):
    id: int
    org_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    template_type: str
    property_type: Optional[str] = None
    scope_level: Optional[str] = None
    times_used: int
    is_favorite: bool
    is_active: bool

    item_count: int = 0
    category_count: int = 0
    total_estimate: float = 0.0
    categories: list[str] = Field(default_factory=list)

    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TemplateDetailOut(TemplateOut):
    items: list[TemplateItemOut] = Field(default_factory=list)


class SaveAsTemplateIn(TemplateBase):
    project_id: int
    name: str = Field(min_length=1, max_length=200)
    # omitted -> every line of the project
    item_ids: Optional[list[int]] = None
    include_amounts: bool = False


class ApplyTemplateIn(BaseModel):
    project_id: int
    mode: str = "skip"
    include_amounts: bool = False

    @model_validator(mode="after")
    def _check_mode(self):
        _one_of(self, "mode", TEMPLATE_APPLY_MODES)
        return self


class ApplyTemplateOut(BaseModel):
    template_id: int
    project_id: int
    mode: str
    added: int
    updated: int
    skipped: int


# -------------------- Vendor tags / contacts --------------------

_HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


class VendorTagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    color: Optional[str] = Field(default=None, pattern=_HEX_COLOR)
    description: Optional[str] = None


class VendorTagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    color: Optional[str] = Field(default=None, pattern=_HEX_COLOR)
    description: Optional[str] = None


class VendorTagOut(BaseModel):
    id: int
    name: str
    color: str
    description: Optional[str] = None
    vendor_count: int = 0
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class VendorTagsSet(BaseModel):
    tag_ids: list[int] = Field(default_factory=list)


class VendorContactBase(BaseModel):
    project_id: Optional[int] = None
    subject: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "contact_type", CONTACT_TYPES)
        return self


class VendorContactCreate(VendorContactBase):
    vendor_id: int
    contact_type: str
    # omitted -> now
    contact_date: Optional[datetime] = None
    follow_up_completed: bool = False


class VendorContactUpdate(VendorContactBase):
    contact_type: Optional[str] = None
    contact_date: Optional[datetime] = None
    follow_up_completed: Optional[bool] = None


class VendorContactOut(BaseModel):
    id: int
    vendor_id: int
    project_id: Optional[int] = None
    contact_type: str
    contact_date: datetime
    subject: Optional[str] = None
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None
    follow_up_completed: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# -------------------- Journal --------------------

class JournalPageBase(BaseModel):
    project_id: Optional[int] = None
    content: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=40)

    @model_validator(mode="after")
    def _check_enums(self):
        _one_of(self, "page_type", JOURNAL_PAGE_TYPES)
        return self


class JournalPageCreate(JournalPageBase):
    title: str = Field(default="Untitled", min_length=1, max_length=255)
    page_type: str = "note"
    is_pinned: bool = False


class JournalPageUpdate(JournalPageBase):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    page_type: Optional[str] = None
    is_pinned: Optional[bool] = None
    is_archived: Optional[bool] = None


class JournalPageOut(BaseModel):
    id: int
    project_id: Optional[int] = None
    title: str
    content: Optional[str] = None
    icon: Optional[str] = None
    page_type: str
    is_pinned: bool
    is_archived: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)
