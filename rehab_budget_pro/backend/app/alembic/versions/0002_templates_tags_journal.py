"""budget templates, vendor tags and contact history, journal pages

Revision ID: 0002_templates_tags_journal
Revises: 0001_init
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa


revision = "0002_templates_tags_journal"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def _has_table(conn, name: str) -> bool:
    return sa.inspect(conn).has_table(name)


def _ts(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(), nullable=False, server_default=sa.func.now())


def upgrade():
    conn = op.get_bind()

    # ---- budget templates (org_id NULL = system template) ----
    if not _has_table(conn, "budget_templates"):
        op.create_table(
            "budget_templates",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=True, index=True),
            sa.Column("name", sa.String(200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("template_type", sa.String(10), nullable=False, server_default="user"),
            sa.Column("property_type", sa.String(20), nullable=True),
            sa.Column("scope_level", sa.String(10), nullable=True),
            sa.Column("times_used", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            _ts("created_at"),
            _ts("updated_at"),
        )

    if not _has_table(conn, "budget_template_items"):
        op.create_table(
            "budget_template_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "template_id",
                sa.Integer(),
                sa.ForeignKey("budget_templates.id", ondelete="CASCADE"),
                nullable=False,
                index=True,
            ),
            sa.Column("category", sa.String(40), nullable=False),
            sa.Column("item", sa.String(255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("qty", sa.Float(), nullable=True),
            sa.Column("unit", sa.String(20), nullable=False, server_default="ls"),
            sa.Column("rate", sa.Float(), nullable=True),
            sa.Column("default_amount", sa.Float(), nullable=True),
            sa.Column("cost_type", sa.String(20), nullable=False, server_default="both"),
            sa.Column("default_priority", sa.String(10), nullable=False, server_default="medium"),
            sa.Column("suggested_trade", sa.String(40), nullable=True),
            sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
            _ts("created_at"),
        )

    # ---- vendor tags / contact history ----
    if not _has_table(conn, "vendor_tags"):
        op.create_table(
            "vendor_tags",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("name", sa.String(80), nullable=False),
            sa.Column("color", sa.String(20), nullable=False, server_default="#6366f1"),
            sa.Column("description", sa.Text(), nullable=True),
            _ts("created_at"),
            sa.UniqueConstraint("org_id", "name", name="uq_vendor_tags_org_name"),
        )

    if not _has_table(conn, "vendor_tag_assignments"):
        op.create_table(
            "vendor_tag_assignments",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("tag_id", sa.Integer(), sa.ForeignKey("vendor_tags.id", ondelete="CASCADE"), nullable=False, index=True),
            _ts("created_at"),
            sa.UniqueConstraint("vendor_id", "tag_id", name="uq_vendor_tag_assignments_vendor_tag"),
        )

    if not _has_table(conn, "vendor_contacts"):
        op.create_table(
            "vendor_contacts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("contact_type", sa.String(20), nullable=False),
            _ts("contact_date"),
            sa.Column("subject", sa.String(255), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("follow_up_date", sa.Date(), nullable=True),
            sa.Column("follow_up_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
            _ts("created_at"),
            _ts("updated_at"),
        )

    # ---- journal ----
    if not _has_table(conn, "journal_pages"):
        op.create_table(
            "journal_pages",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, index=True),
            sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True),
            sa.Column("title", sa.String(255), nullable=False, server_default="Untitled"),
            sa.Column("content", sa.Text(), nullable=True),
            sa.Column("icon", sa.String(40), nullable=True),
            sa.Column("page_type", sa.String(20), nullable=False, server_default="note"),
            sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
            _ts("created_at"),
            _ts("updated_at"),
        )


def downgrade():
    for name in (
        "journal_pages",
        "vendor_contacts",
        "vendor_tag_assignments",
        "vendor_tags",
        "budget_template_items",
        "budget_templates",
    ):
        op.drop_table(name)
