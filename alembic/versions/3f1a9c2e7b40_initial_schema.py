"""initial schema: tenants, sales data, playbooks and usage metering

Revision ID: 3f1a9c2e7b40
Revises: 
Create Date: 2026-10-19 09:12:44.201817

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _tenant_fk() -> sa.Column:
    return sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False, index=True)


def upgrade() -> None:
    # ── Tenancy and identity ──────────────────────────────
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True, index=True),
        sa.Column("plan_type", sa.String(50), nullable=False, server_default="free"),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default="none"),
        sa.Column("billing_period_end", sa.DateTime(), nullable=True),
        sa.Column("trial_ends_at", sa.DateTime(), nullable=True),
        sa.Column("canceled_at", sa.DateTime(), nullable=True),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("email", sa.String(320), nullable=False, index=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False, server_default=""),
        sa.Column(
            "role",
            sa.Enum("SUPER_ADMIN", "REVIEWER", "VIEWER", name="userrole"),
            nullable=False,
            server_default="VIEWER",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "api_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("token_hash", sa.String(), nullable=False, unique=True, index=True),
        sa.Column("token_prefix", sa.String(12), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(), nullable=True),
        sa.Column("last_used_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    # ── Catalog, accounts and orders ──────────────────────
    op.create_table(
        "product_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("sku", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("unit_cost", sa.Float(), nullable=True),
        sa.Column("unit_price", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "custom_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("external_id", sa.String(255), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("segment", sa.String(100), nullable=True, index=True),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("assigned_tm", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("enrollment_status", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "account_metrics",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False, index=True),
        sa.Column("computed_at", sa.DateTime(), nullable=False),
        sa.Column("last_12m_revenue", sa.Float(), nullable=True),
        sa.Column("last_3m_revenue", sa.Float(), nullable=True),
        sa.Column("yoy_growth_rate", sa.Float(), nullable=True),
        sa.Column("category_count", sa.Integer(), nullable=True),
        sa.Column("category_penetration", sa.Float(), nullable=True),
        sa.Column("category_gap_score", sa.Float(), nullable=True),
        sa.Column("opportunity_score", sa.Float(), nullable=True),
        sa.Column("matched_profile_id", sa.Integer(), nullable=True),
        sa.Column("wallet_share_percentage", sa.Float(), nullable=True),
        sa.Column("days_since_last_order", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "account_category_gaps",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False, index=True),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("expected_pct", sa.Float(), nullable=True),
        sa.Column("actual_pct", sa.Float(), nullable=True),
        sa.Column("gap_pct", sa.Float(), nullable=True),
        sa.Column("estimated_opportunity", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False, index=True),
        sa.Column("order_date", sa.DateTime(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("margin_amount", sa.Float(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False, index=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("line_total", sa.Float(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "data_uploads",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("upload_type", sa.String(20), nullable=False),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("row_count", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="processing"),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        *_timestamps(),
    )

    # ── Segment profiles (ICPs) ───────────────────────────
    op.create_table(
        "segment_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("segment", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("min_annual_revenue", sa.Float(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "profile_categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("profile_id", sa.Integer(), sa.ForeignKey("segment_profiles.id"), nullable=False, index=True),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("expected_pct", sa.Float(), nullable=True),
        sa.Column("importance", sa.Float(), nullable=False, server_default="1.0"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "profile_review_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("profile_id", sa.Integer(), sa.ForeignKey("segment_profiles.id"), nullable=False, index=True),
        sa.Column("reviewer", sa.String(255), nullable=False),
        sa.Column("action", sa.String(20), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        *_timestamps(),
    )

    # ── Playbooks and tasks ───────────────────────────────
    op.create_table(
        "playbooks",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("generated_by", sa.String(255), nullable=True),
        sa.Column("generated_at", sa.DateTime(), nullable=False),
        sa.Column("filters_used", sa.JSON(), nullable=True),
        sa.Column("task_count", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False, index=True),
        sa.Column("playbook_id", sa.Integer(), sa.ForeignKey("playbooks.id"), nullable=True),
        sa.Column("assigned_tm", sa.String(255), nullable=True),
        sa.Column("assigned_tm_id", sa.Integer(), nullable=True),
        sa.Column("task_type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("script", sa.String(), nullable=True),
        sa.Column("gap_categories", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("outcome", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "playbook_tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("playbook_id", sa.Integer(), sa.ForeignKey("playbooks.id"), nullable=False, index=True),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id"), nullable=False),
        *_timestamps(),
    )

    # ── Revenue-share program ─────────────────────────────
    op.create_table(
        "program_accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False, index=True),
        sa.Column("enrolled_at", sa.DateTime(), nullable=False),
        sa.Column("enrolled_by", sa.String(255), nullable=True),
        sa.Column("baseline_start", sa.DateTime(), nullable=False),
        sa.Column("baseline_end", sa.DateTime(), nullable=False),
        sa.Column("baseline_revenue", sa.Float(), nullable=False),
        sa.Column("share_rate", sa.Float(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("target_penetration", sa.Float(), nullable=True),
        sa.Column("target_incremental_revenue", sa.Float(), nullable=True),
        sa.Column("target_duration_months", sa.Integer(), nullable=True),
        sa.Column("graduation_criteria", sa.String(10), nullable=False, server_default="any"),
        sa.Column("graduated_at", sa.DateTime(), nullable=True),
        sa.Column("graduation_notes", sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "rev_share_tiers",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("min_revenue", sa.Float(), nullable=False, server_default="0"),
        sa.Column("max_revenue", sa.Float(), nullable=True),
        sa.Column("share_rate", sa.Float(), nullable=False, server_default="15"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "territory_managers",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("territories", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # ── Settings ──────────────────────────────────────────
    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("key", sa.String(255), nullable=False),
        sa.Column("value", sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "key", name="uq_settings_tenant_key"),
    )
    op.create_table(
        "scoring_weights",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("name", sa.String(100), nullable=False, server_default="default"),
        sa.Column("gap_size_weight", sa.Float(), nullable=False, server_default="40"),
        sa.Column("revenue_potential_weight", sa.Float(), nullable=False, server_default="30"),
        sa.Column("category_count_weight", sa.Float(), nullable=False, server_default="30"),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("updated_by", sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "name", name="uq_scoring_weights_tenant_name"),
    )

    # ── Plans and AI credits ──────────────────────────────
    op.create_table(
        "subscription_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("monthly_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("yearly_price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("limits", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "tenant_credit_ledger",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tenant_fk(),
        sa.Column("billing_period", sa.String(7), nullable=False),
        sa.Column("total_allowance", sa.Integer(), nullable=False),
        sa.Column("credits_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("credits_remaining", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "billing_period", name="uq_credit_ledger_tenant_period"),
    )
    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("credits_used", sa.Integer(), nullable=False),
        sa.Column("billing_period", sa.String(7), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_credit_transactions_tenant_period",
        "credit_transactions",
        ["tenant_id", "billing_period"],
    )


def downgrade() -> None:
    op.drop_index("ix_credit_transactions_tenant_period", table_name="credit_transactions")
    for table in (
        "credit_transactions",
        "tenant_credit_ledger",
        "subscription_plans",
        "scoring_weights",
        "settings",
        "territory_managers",
        "rev_share_tiers",
        "program_accounts",
        "playbook_tasks",
        "tasks",
        "playbooks",
        "profile_review_log",
        "profile_categories",
        "segment_profiles",
        "data_uploads",
        "order_items",
        "orders",
        "account_category_gaps",
        "account_metrics",
        "accounts",
        "custom_categories",
        "products",
        "product_categories",
        "api_tokens",
        "users",
        "tenants",
    ):
        op.drop_table(table)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
