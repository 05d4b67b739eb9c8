from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _has_table(conn, name: str) -> bool:
    return sa.inspect(conn).has_table(name)


def _ts(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(), nullable=False, server_default=sa.func.now())


def upgrade():
    conn = op.get_bind()

    # ---- tenancy ----
    if not _has_table(conn, "organizations"):
        op.create_table(
            "organizations",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("slug", sa.String(80), nullable=False, unique=True, index=True),
            sa.Column("name", sa.String(160), nullable=False),
            _ts("created_at"),
        )

    if not _has_table(conn, "app_users"):
        op.create_table(
            "app_users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(200), nullable=False, unique=True, index=True),
            sa.Column("display_name", sa.String(160), nullable=True),
            _ts("created_at"),
        )

    if not _has_table(conn, "org_memberships"):
        op.create_table(
            "org_memberships",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=False, index=True),
            sa.Column("role", sa.String(20), nullable=False, server_default="owner"),
            _ts("created_at"),
            sa.UniqueConstraint("org_id", "user_id", name="uq_org_memberships_org_user"),
        )

    if not _has_table(conn, "audit_events"):
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
            sa.Column("action", sa.String(80), nullable=False),
            sa.Column("entity_type", sa.String(80), nullable=False),
            sa.Column("entity_id", sa.String(80), nullable=False),
            sa.Column("before_json", sa.Text(), nullable=True),
            sa.Column("after_json", sa.Text(), nullable=True),
            _ts("created_at"),
        )

    if not _has_table(conn, "change_events"):
        op.create_table(
            "change_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("project_id", sa.Integer(), nullable=True, index=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("app_users.id"), nullable=True),
            sa.Column("entity_type", sa.String(40), nullable=False),
            sa.Column("entity_id", sa.String(80), nullable=False),
            sa.Column("action", sa.String(20), nullable=False),
            sa.Column("payload_json", sa.Text(), nullable=True),
            _ts("created_at"),
        )
        op.create_index("ix_change_events_org_id_id", "change_events", ["org_id", "id"])

    # ---- budgeting ----
    if not _has_table(conn, "projects"):
        op.create_table(
            "projects",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("address", sa.String(255), nullable=True),
            sa.Column("city", sa.String(120), nullable=True),
            sa.Column("state", sa.String(2), nullable=True, server_default="MN"),
            sa.Column("zip", sa.String(10), nullable=True),
            sa.Column("beds", sa.Float(), nullable=True),
            sa.Column("baths", sa.Float(), nullable=True),
            sa.Column("sqft", sa.Integer(), nullable=True),
            sa.Column("year_built", sa.Integer(), nullable=True),
            sa.Column("property_type", sa.String(20), nullable=False, server_default="sfh"),
            sa.Column("arv", sa.Float(), nullable=True),
            sa.Column("purchase_price", sa.Float(), nullable=True),
            sa.Column("closing_costs", sa.Float(), nullable=False, server_default="0"),
            sa.Column("holding_costs_monthly", sa.Float(), nullable=False, server_default="0"),
            sa.Column("hold_months", sa.Float(), nullable=False, server_default="4"),
            sa.Column("selling_cost_percent", sa.Float(), nullable=False, server_default="8"),
            sa.Column("contingency_percent", sa.Float(), nullable=False, server_default="10"),
            sa.Column("status", sa.String(20), nullable=False, server_default="lead", index=True),
            sa.Column("contract_date", sa.Date(), nullable=True),
            sa.Column("close_date", sa.Date(), nullable=True),
            sa.Column("rehab_start_date", sa.Date(), nullable=True),
            sa.Column("target_complete_date", sa.Date(), nullable=True),
            sa.Column("list_date", sa.Date(), nullable=True),
            sa.Column("sale_date", sa.Date(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _ts("created_at"),
            _ts("updated_at"),
        )

    if not _has_table(conn, "vendors"):
        op.create_table(
            "vendors",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("trade", sa.String(40), nullable=False, index=True),
            sa.Column("contact_name", sa.String(160), nullable=True),
            sa.Column("phone", sa.String(40), nullable=True),
            sa.Column("email", sa.String(200), nullable=True),
            sa.Column("website", sa.String(255), nullable=True),
            sa.Column("address", sa.String(255), nullable=True),
            sa.Column("licensed", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("insured", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("w9_on_file", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("rating", sa.Integer(), nullable=True),
            sa.Column("reliability", sa.String(20), nullable=True),
            sa.Column("price_level", sa.String(3), nullable=True),
            sa.Column("status", sa.String(20), nullable=False, server_default="active", index=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _ts("created_at"),
            _ts("updated_at"),
            sa.CheckConstraint("rating IS NULL OR (rating >= 1 AND rating <= 5)", name="ck_vendors_rating"),
        )

    if not _has_table(conn, "budget_items"):
        op.create_table(
            "budget_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("category", sa.String(40), nullable=False, index=True),
            sa.Column("item", sa.String(255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("room_area", sa.String(120), nullable=True),
            sa.Column("qty", sa.Float(), nullable=False, server_default="1"),
            sa.Column("unit", sa.String(20), nullable=False, server_default="ea"),
            sa.Column("rate", sa.Float(), nullable=False, server_default="0"),
            sa.Column("underwriting_amount", sa.Float(), nullable=False, server_default="0"),
            sa.Column("forecast_amount", sa.Float(), nullable=False, server_default="0"),
            sa.Column("actual_amount", sa.Float(), nullable=True),
            sa.Column("cost_type", sa.String(20), nullable=False, server_default="both"),
            sa.Column("status", sa.String(20), nullable=False, server_default="not_started", index=True),
            sa.Column("priority", sa.String(10), nullable=False, server_default="medium"),
            sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("notes", sa.Text(), nullable=True),
            _ts("created_at"),
            _ts("updated_at"),
        )

    if not _has_table(conn, "draws"):
        op.create_table(
            "draws",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("draw_number", sa.Integer(), nullable=False),
            sa.Column("milestone", sa.String(40), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("percent_complete", sa.Float(), nullable=True),
            sa.Column("amount", sa.Float(), nullable=False),
            sa.Column("date_requested", sa.Date(), nullable=True),
            sa.Column("date_paid", sa.Date(), nullable=True),
            sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
            sa.Column("payment_method", sa.String(20), nullable=True),
            sa.Column("reference_number", sa.String(80), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _ts("created_at"),
            _ts("updated_at"),
            sa.UniqueConstraint("project_id", "draw_number", name="uq_draws_project_draw_number"),
        )

    # ---- shared reference data ----
    if not _has_table(conn, "cost_reference"):
        op.create_table(
            "cost_reference",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("category", sa.String(40), nullable=False, index=True),
            sa.Column("item", sa.String(255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("unit", sa.String(20), nullable=False, server_default="ea"),
            sa.Column("low", sa.Float(), nullable=True),
            sa.Column("mid", sa.Float(), nullable=True),
            sa.Column("high", sa.Float(), nullable=True),
            sa.Column("market", sa.String(80), nullable=False, server_default="minneapolis"),
            sa.Column("notes", sa.Text(), nullable=True),
            _ts("updated_at"),
        )


def downgrade():
    for name in (
        "cost_reference",
        "draws",
        "budget_items",
        "vendors",
        "projects",
        "change_events",
        "audit_events",
        "org_memberships",
        "app_users",
        "organizations",
    ):
        op.drop_table(name)
