# breakeven/schemas.py
"""
Request and response bodies for the JSON API.

Request models only check shape (types, presence); value rules such as
"amount > 0" live in the services so non-HTTP callers get them too.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Credentials(BaseModel):
    email: str
    password: str


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: dt.datetime


# ---------- Budget ----------


class BudgetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    base_daily_cents: int
    currency: str
    timezone: str
    carryover_mode: str
    subscription_budget_enabled: bool
    monthly_subscription_budget_cents: Optional[int] = None
    start_date: dt.date
    created_at: dt.datetime
    updated_at: dt.datetime


class BudgetUpdate(BaseModel):
    """PATCH body; only the keys that are sent are applied."""

    base_daily_cents: Optional[int] = None
    effective_from: Optional[dt.date] = None  # rate edits only; default start_date
    currency: Optional[str] = None
    timezone: Optional[str] = None
    carryover_mode: Optional[str] = None
    subscription_budget_enabled: Optional[bool] = None
    monthly_subscription_budget_cents: Optional[int] = None


# ---------- Ledgers ----------


class TodayRead(BaseModel):
    date: dt.date
    available_cents: int
    spent_cents: int
    carryover_start_cents: int
    carryover_end_cents: int
    break_even_spend_cents: int  # spend up to this and tomorrow starts at 0 carryover
    start_date: dt.date


class LedgerRead(BaseModel):
    date: dt.date
    spent_cents: int
    carryover_start_cents: int
    carryover_end_cents: int
    available_cents: int
    daily_rate_cents: int


class LedgerHistory(BaseModel):
    from_date: dt.date
    to_date: dt.date
    start_date: dt.date
    ledgers: List[LedgerRead]  # newest first


# ---------- Expenses ----------


class ExpenseCreate(BaseModel):
    date: dt.date
    amount_cents: int
    category: str
    note: Optional[str] = None


class ExpenseUpdate(BaseModel):
    date: Optional[dt.date] = None
    amount_cents: Optional[int] = None
    category: Optional[str] = None
    note: Optional[str] = None


class ExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    amount_cents: int
    category: str
    note: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


# ---------- Subscriptions ----------


class SubscriptionCreate(BaseModel):
    name: str
    amount_cents: int
    billing_cycle: str
    category: str = "other"
    status: str = "active"
    start_date: Optional[dt.date] = None
    next_charge_date: Optional[dt.date] = None


class SubscriptionUpdate(BaseModel):
    name: Optional[str] = None
    amount_cents: Optional[int] = None
    billing_cycle: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    next_charge_date: Optional[dt.date] = None


class SubscriptionRead(BaseModel):
    id: int
    name: str
    amount_cents: int
    billing_cycle: str
    category: str
    status: str
    next_charge_date: dt.date
    last_charged_date: Optional[dt.date] = None
    monthly_cost_cents: int
    charges_soon: bool
    created_at: dt.datetime
    updated_at: dt.datetime
