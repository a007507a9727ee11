# breakeven/models.py
import datetime as dt  # module import: "date" is also a column name below
from enum import Enum  # small enums for clarity
from typing import Optional  # nullable fields

from sqlmodel import (
    UniqueConstraint,  # one row per (budget, day) / (budget, effective_from)
)
from sqlmodel import (  # SQLModel base + columns
    Field,
    SQLModel,
)

from breakeven.dates import local_date, now_utc, today_in_timezone


class User(SQLModel, table=True):  # "table=True" = real DB table
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(index=True)  # stored lower-cased
    hashed_password: str  # never plain text
    created_at: dt.datetime = Field(default_factory=now_utc)

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)


class CarryoverMode(str, Enum):
    continuous = "continuous"  # carryover accumulates across months
    monthly_reset = "monthly_reset"  # carryover zeroed on the 1st


class ExpenseCategory(str, Enum):
    food = "food"
    groceries = "groceries"
    transport = "transport"
    entertainment = "entertainment"
    shopping = "shopping"
    health = "health"
    bills = "bills"
    coffee = "coffee"
    other = "other"


class BillingCycle(str, Enum):
    monthly = "monthly"
    yearly = "yearly"


class SubscriptionStatus(str, Enum):
    active = "active"
    paused = "paused"


class SubscriptionCategory(str, Enum):
    streaming = "streaming"
    software = "software"
    music = "music"
    news = "news"
    fitness = "fitness"
    cloud_storage = "cloud_storage"
    gaming = "gaming"
    other = "other"


class Budget(SQLModel, table=True):
    __tablename__ = "budget"
    id: int | None = Field(default=None, primary_key=True)  # PK
    user_id: int = Field(index=True, foreign_key="user.id")  # owner
    base_daily_cents: int = Field(default=2000)  # current rate going forward
    currency: str = Field(default="CAD")
    timezone: str = Field(default="America/Toronto")  # IANA name
    carryover_mode: CarryoverMode = Field(default=CarryoverMode.continuous)
    subscription_budget_enabled: bool = Field(default=False)
    monthly_subscription_budget_cents: Optional[int] = None
    is_active: bool = Field(default=True)  # one active budget per user
    created_at: dt.datetime = Field(default_factory=now_utc)
    updated_at: dt.datetime = Field(default_factory=now_utc)

    @property
    def start_date(self) -> dt.date:
        """First day the budget exists, in its own timezone. Nothing is computed before it."""
        return local_date(self.created_at, self.timezone)

    def today(self) -> dt.date:
        return today_in_timezone(self.timezone)


class BudgetRate(SQLModel, table=True):
    """Daily allowance in force from effective_from until the next record."""

    __tablename__ = "budget_rate"
    id: int | None = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    effective_from: dt.date = Field(index=True)
    base_daily_cents: int
    created_at: dt.datetime = Field(default_factory=now_utc)

    __table_args__ = (
        UniqueConstraint(
            "budget_id", "effective_from", name="uq_budget_rate_budget_effective_from"
        ),
    )


class Expense(SQLModel, table=True):
    __tablename__ = "expense"
    id: int | None = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    date: dt.date = Field(index=True)  # day it counts against
    amount_cents: int  # > 0
    category: ExpenseCategory = Field(index=True)
    note: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=now_utc)
    updated_at: dt.datetime = Field(default_factory=now_utc)


class DayLedger(SQLModel, table=True):
    """
    Derived balance for one budget on one day. Written only by
    services.ledger.recompute_from_date; never edited by hand.

    available_cents     = rate(date) + carryover_start_cents
    carryover_end_cents = carryover_start_cents + rate(date) - spent_cents
    """

    __tablename__ = "day_ledger"
    id: int | None = Field(default=None, primary_key=True)
    budget_id: int = Field(index=True, foreign_key="budget.id")
    date: dt.date = Field(index=True)
    spent_cents: int = Field(default=0)
    carryover_start_cents: int = Field(default=0)  # signed
    carryover_end_cents: int = Field(default=0)  # signed; negative = overspent
    available_cents: int = Field(default=0)
    updated_at: dt.datetime = Field(default_factory=now_utc)

    __table_args__ = (
        UniqueConstraint("budget_id", "date", name="uq_day_ledger_budget_date"),
    )


class Subscription(SQLModel, table=True):
    __tablename__ = "subscription"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, foreign_key="user.id")
    name: str
    amount_cents: int  # per billing cycle
    billing_cycle: BillingCycle = Field(index=True)
    category: SubscriptionCategory = Field(default=SubscriptionCategory.other)
    status: SubscriptionStatus = Field(default=SubscriptionStatus.active, index=True)
    next_charge_date: dt.date = Field(index=True)
    last_charged_date: Optional[dt.date] = None
    created_at: dt.datetime = Field(default_factory=now_utc)
    updated_at: dt.datetime = Field(default_factory=now_utc)
