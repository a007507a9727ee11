# breakeven/services/subscriptions.py
"""
Recurring subscriptions (streaming, software, ...).

Subscriptions are tracked next to the daily budget and compared against the
budget's optional monthly subscription budget. They do not feed the daily
ledger.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional

from sqlmodel import Session, select

from breakeven.dates import add_months, add_years, now_utc
from breakeven.errors import InvalidInputError, NotFoundError
from breakeven.models import (
    BillingCycle,
    Budget,
    Subscription,
    SubscriptionCategory,
    SubscriptionStatus,
)

UPCOMING_DAYS = 7

_EDITABLE = {"name", "amount_cents", "billing_cycle", "category", "status", "next_charge_date"}


def _enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as ex:
        allowed = ", ".join(e.value for e in enum_cls)
        raise InvalidInputError(f"{field} must be one of: {allowed}") from ex


def _validate_amount(amount_cents: Any) -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int) or amount_cents <= 0:
        raise InvalidInputError("amount_cents must be an integer greater than 0")
    return amount_cents


def _validate_name(name: Any) -> str:
    clean = (name or "").strip() if isinstance(name, str) else ""
    if not clean:
        raise InvalidInputError("name is required")
    return clean


def next_cycle(day: date, cycle: BillingCycle) -> date:
    return add_months(day, 1) if cycle == BillingCycle.monthly else add_years(day, 1)


def monthly_cost_cents(sub: Subscription) -> int:
    """Monthly amount as is; yearly spread over 12 months, rounded up."""
    if sub.billing_cycle == BillingCycle.monthly:
        return sub.amount_cents
    return math.ceil(sub.amount_cents / 12)


def advance_next_charge(sub: Subscription, today: date) -> Subscription:
    """Roll next_charge_date past today, recording each passed charge."""
    while sub.next_charge_date <= today:
        sub.last_charged_date = sub.next_charge_date
        sub.next_charge_date = next_cycle(sub.next_charge_date, sub.billing_cycle)
    return sub


def charges_soon(sub: Subscription, today: date, days: int = UPCOMING_DAYS) -> bool:
    return today <= sub.next_charge_date <= today + timedelta(days=days)


def list_subscriptions(session: Session, user_id: int) -> List[Subscription]:
    stmt = (
        select(Subscription)
        .where(Subscription.user_id == user_id)
        .order_by(Subscription.next_charge_date, Subscription.id)
    )
    return list(session.exec(stmt).all())


def get_subscription_for_user(
    session: Session, user_id: int, subscription_id: int
) -> Subscription:
    sub = session.get(Subscription, subscription_id)
    if sub is None or sub.user_id != user_id:
        raise NotFoundError("Subscription not found")
    return sub


def create_subscription(
    session: Session,
    user_id: int,
    *,
    name: str,
    amount_cents: int,
    billing_cycle: Any,
    today: date,
    category: Any = SubscriptionCategory.other,
    status: Any = SubscriptionStatus.active,
    start_date: Optional[date] = None,
    next_charge_date: Optional[date] = None,
) -> Subscription:
    """
    Create a subscription. A start_date means "first paid on start_date", so
    the next charge is one cycle later; with neither date given the next
    charge is one cycle after today.
    """
    cycle = _enum(BillingCycle, billing_cycle, "billing_cycle")
    if start_date is not None:
        next_charge = next_cycle(start_date, cycle)
    elif next_charge_date is not None:
        next_charge = next_charge_date
    else:
        next_charge = next_cycle(today, cycle)

    sub = Subscription(
        user_id=user_id,
        name=_validate_name(name),
        amount_cents=_validate_amount(amount_cents),
        billing_cycle=cycle,
        category=_enum(SubscriptionCategory, category, "category"),
        status=_enum(SubscriptionStatus, status, "status"),
        next_charge_date=next_charge,
    )
    advance_next_charge(sub, today)
    session.add(sub)
    session.commit()
    session.refresh(sub)
    return sub


def update_subscription(
    session: Session, sub: Subscription, changes: Mapping[str, Any], *, today: date
) -> Subscription:
    unknown = set(changes) - _EDITABLE
    if unknown:
        raise InvalidInputError(
            f"Unknown subscription field(s): {', '.join(sorted(unknown))}"
        )

    if changes.get("name") is not None:
        sub.name = _validate_name(changes["name"])
    if changes.get("amount_cents") is not None:
        sub.amount_cents = _validate_amount(changes["amount_cents"])
    if changes.get("billing_cycle") is not None:
        sub.billing_cycle = _enum(BillingCycle, changes["billing_cycle"], "billing_cycle")
    if changes.get("category") is not None:
        sub.category = _enum(SubscriptionCategory, changes["category"], "category")
    if changes.get("status") is not None:
        sub.status = _enum(SubscriptionStatus, changes["status"], "status")
    if changes.get("next_charge_date") is not None:
        sub.next_charge_date = changes["next_charge_date"]

    advance_next_charge(sub, today)
    sub.updated_at = now_utc()
    session.add(sub)
    session.commit()
    session.refresh(sub)
    return sub


def delete_subscription(session: Session, sub: Subscription) -> None:
    session.delete(sub)
    session.commit()


def subscription_summary(
    session: Session, user_id: int, budget: Budget, today: date
) -> Dict[str, Any]:
    """Monthly total of active subscriptions and how it compares to the budget."""
    active = [
        s for s in list_subscriptions(session, user_id) if s.status == SubscriptionStatus.active
    ]
    total = sum(monthly_cost_cents(s) for s in active)
    upcoming = sum(1 for s in active if charges_soon(s, today))

    limit = budget.monthly_subscription_budget_cents
    if budget.subscription_budget_enabled and limit is not None:
        remaining = limit - total
        budget_status = {
            "enabled": True,
            "monthly_budget_cents": limit,
            "total_monthly_cents": total,
            "remaining_cents": remaining,
            "over_budget": remaining < 0,
        }
    else:
        budget_status = {
            "enabled": False,
            "monthly_budget_cents": None,
            "total_monthly_cents": total,
            "remaining_cents": None,
            "over_budget": False,
        }

    return {
        "total_monthly_cents": total,
        "active_count": len(active),
        "upcoming_count": upcoming,
        "budget_status": budget_status,
    }
