"""initial schema: users, budgets, rates, expenses, day ledgers, subscriptions

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-01-05 12:00:00.000000

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

CARRYOVER_MODES = ("continuous", "monthly_reset")
EXPENSE_CATEGORIES = (
    "food",
    "groceries",
    "transport",
    "entertainment",
    "shopping",
    "health",
    "bills",
    "coffee",
    "other",
)
SUBSCRIPTION_CATEGORIES = (
    "streaming",
    "software",
    "music",
    "news",
    "fitness",
    "cloud_storage",
    "gaming",
    "other",
)


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_user_email", "user", ["email"])

    op.create_table(
        "budget",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("base_daily_cents", sa.Integer(), nullable=False, server_default="2000"),
        sa.Column("currency", sa.String(), nullable=False, server_default="CAD"),
        sa.Column(
            "timezone", sa.String(), nullable=False, server_default="America/Toronto"
        ),
        sa.Column(
            "carryover_mode",
            sa.Enum(*CARRYOVER_MODES, name="carryovermode"),
            nullable=False,
            server_default="continuous",
        ),
        sa.Column(
            "subscription_budget_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("monthly_subscription_budget_cents", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("base_daily_cents > 0", name="ck_budget_rate_positive"),
    )
    op.create_index("ix_budget_user_id", "budget", ["user_id"])

    op.create_table(
        "budget_rate",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False),
        sa.Column("effective_from", sa.Date(), nullable=False),
        sa.Column("base_daily_cents", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("base_daily_cents > 0", name="ck_budget_rate_cents_positive"),
        sa.UniqueConstraint(
            "budget_id", "effective_from", name="uq_budget_rate_budget_effective_from"
        ),
    )
    op.create_index("ix_budget_rate_budget_id", "budget_rate", ["budget_id"])
    op.create_index("ix_budget_rate_effective_from", "budget_rate", ["effective_from"])

    op.create_table(
        "expense",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column(
            "category",
            sa.Enum(*EXPENSE_CATEGORIES, name="expensecategory"),
            nullable=False,
        ),
        sa.Column("note", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount_cents > 0", name="ck_expense_amount_positive"),
    )
    op.create_index("ix_expense_budget_id", "expense", ["budget_id"])
    op.create_index("ix_expense_date", "expense", ["date"])
    op.create_index("ix_expense_category", "expense", ["category"])

    op.create_table(
        "day_ledger",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budget.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("spent_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "carryover_start_cents", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("carryover_end_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("available_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("spent_cents >= 0", name="ck_day_ledger_spent_non_negative"),
        sa.UniqueConstraint("budget_id", "date", name="uq_day_ledger_budget_date"),
    )
    op.create_index("ix_day_ledger_budget_id", "day_ledger", ["budget_id"])
    op.create_index("ix_day_ledger_date", "day_ledger", ["date"])

    op.create_table(
        "subscription",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column(
            "billing_cycle",
            sa.Enum("monthly", "yearly", name="billingcycle"),
            nullable=False,
        ),
        sa.Column(
            "category",
            sa.Enum(*SUBSCRIPTION_CATEGORIES, name="subscriptioncategory"),
            nullable=False,
            server_default="other",
        ),
        sa.Column(
            "status",
            sa.Enum("active", "paused", name="subscriptionstatus"),
            nullable=False,
            server_default="active",
        ),
        sa.Column("next_charge_date", sa.Date(), nullable=False),
        sa.Column("last_charged_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount_cents > 0", name="ck_subscription_amount_positive"),
    )
    op.create_index("ix_subscription_user_id", "subscription", ["user_id"])
    op.create_index("ix_subscription_billing_cycle", "subscription", ["billing_cycle"])
    op.create_index("ix_subscription_status", "subscription", ["status"])
    op.create_index(
        "ix_subscription_next_charge_date", "subscription", ["next_charge_date"]
    )


def downgrade() -> None:
    op.drop_table("subscription")
    op.drop_table("day_ledger")
    op.drop_table("expense")
    op.drop_table("budget_rate")
    op.drop_table("budget")
    op.drop_table("user")
