# breakeven/services/budgets.py
"""
Budget lifecycle and the settings changes that invalidate ledgers.

Every change that ledgers depend on is an explicit call here: the mutation
and the recompute it needs run back to back under the budget's lock and are
committed together.

Anchors:
- rate change       -> the (clamped) effective_from of the new rate
- carryover mode    -> start_date (every day's carryover may change)
- timezone          -> start_date (start_date and "today" both move)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from sqlmodel import Session, select

from breakeven.config import get_settings
from breakeven.dates import now_utc, validate_timezone
from breakeven.errors import InvalidInputError
from breakeven.models import Budget, CarryoverMode
from breakeven.services.ledger import (
    anchor_for_change,
    budget_lock,
    purge_ledgers_outside,
    recompute_from_date,
)
from breakeven.services.rates import (
    rebase_rates,
    seed_initial_rate,
    set_rate,
    validate_rate_cents,
)

logger = logging.getLogger("breakeven.budget")

_SETTING_FIELDS = {
    "base_daily_cents",
    "effective_from",
    "currency",
    "timezone",
    "carryover_mode",
    "subscription_budget_enabled",
    "monthly_subscription_budget_cents",
}


def get_budget_for_user(session: Session, user_id: int) -> Optional[Budget]:
    stmt = select(Budget).where(Budget.user_id == user_id, Budget.is_active)
    return session.exec(stmt).first()


def create_budget(
    session: Session,
    user_id: int,
    *,
    base_daily_cents: Optional[int] = None,
    currency: Optional[str] = None,
    timezone: Optional[str] = None,
    carryover_mode: CarryoverMode = CarryoverMode.continuous,
) -> Budget:
    """
    Create a budget and seed its start_date rate. No ledgers yet, so no
    recompute.
    """
    settings = get_settings()
    budget = Budget(
        user_id=user_id,
        base_daily_cents=validate_rate_cents(
            settings.default_daily_cents if base_daily_cents is None else base_daily_cents
        ),
        currency=_validate_currency(currency or settings.default_currency),
        timezone=validate_timezone(timezone or settings.default_timezone),
        carryover_mode=_validate_mode(carryover_mode),
        is_active=True,
    )
    session.add(budget)
    session.flush()  # need budget.id for the rate row
    seed_initial_rate(session, budget)
    session.commit()
    session.refresh(budget)
    logger.info(
        "budget=%s created for user=%s start_date=%s",
        budget.id,
        user_id,
        budget.start_date.isoformat(),
    )
    return budget


def get_or_create_budget(session: Session, user_id: int) -> Budget:
    """
    Return the active budget for this user. Create one with the configured
    defaults if missing (one budget per user).
    """
    return get_budget_for_user(session, user_id) or create_budget(session, user_id)


# ---------- Validation ----------


def _validate_mode(value: Any) -> CarryoverMode:
    try:
        return CarryoverMode(value)
    except ValueError as ex:
        raise InvalidInputError(
            "carryover_mode must be 'continuous' or 'monthly_reset'"
        ) from ex


def _validate_currency(value: Any) -> str:
    code = (value or "").strip().upper() if isinstance(value, str) else ""
    if len(code) != 3 or not code.isalpha():
        raise InvalidInputError("currency must be a 3-letter code, e.g. 'CAD'")
    return code


def _validate_subscription_budget(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(
            "monthly_subscription_budget_cents must be a non-negative integer"
        )
    return value


# ---------- Triggers ----------


def change_rate(
    session: Session,
    budget: Budget,
    new_cents: int,
    effective_from: Optional[date] = None,
    *,
    today: Optional[date] = None,
) -> date:
    """Apply a rate edit and recompute from its effective date. Returns the anchor."""
    with budget_lock(budget.id):
        anchor = set_rate(session, budget, new_cents, effective_from)
        _touch(session, budget)
        recompute_from_date(
            session, budget, anchor_for_change(session, budget, anchor, today), today=today
        )
        session.commit()
    return anchor


def change_carryover_mode(
    session: Session, budget: Budget, mode: Any, *, today: Optional[date] = None
) -> bool:
    """Switch carryover policy and recompute all history. False if unchanged."""
    new_mode = _validate_mode(mode)
    if new_mode == budget.carryover_mode:
        return False
    with budget_lock(budget.id):
        budget.carryover_mode = new_mode
        _touch(session, budget)
        recompute_from_date(session, budget, budget.start_date, today=today)
        session.commit()
    logger.info("budget=%s carryover_mode=%s", budget.id, new_mode.value)
    return True


def change_timezone(
    session: Session, budget: Budget, tz_name: str, *, today: Optional[date] = None
) -> bool:
    """
    Move the budget to another timezone. start_date and today are re-derived,
    the rate history is re-anchored on the new start_date, ledgers outside
    the new [start_date, today] are dropped and the rest is recomputed.
    False if unchanged.
    """
    new_tz = validate_timezone(tz_name)
    if new_tz == budget.timezone:
        return False
    with budget_lock(budget.id):
        budget.timezone = new_tz
        _touch(session, budget)
        today = today or budget.today()
        rebase_rates(session, budget)
        dropped = purge_ledgers_outside(session, budget.id, budget.start_date, today)
        recompute_from_date(session, budget, budget.start_date, today=today)
        session.commit()
    logger.info("budget=%s timezone=%s dropped=%s", budget.id, new_tz, dropped)
    return True


def update_budget_settings(
    session: Session,
    budget: Budget,
    changes: Mapping[str, Any],
    *,
    today: Optional[date] = None,
) -> Budget:
    """
    Apply a partial settings update (keys as in schemas.BudgetUpdate).

    Everything is validated before anything is written. Ledger-affecting
    changes share one recompute, from the earliest anchor among them.
    """
    unknown = set(changes) - _SETTING_FIELDS
    if unknown:
        raise InvalidInputError(f"Unknown budget setting(s): {', '.join(sorted(unknown))}")

    new_rate = changes.get("base_daily_cents")
    if new_rate is not None:
        validate_rate_cents(new_rate)
    effective_from = changes.get("effective_from")
    if effective_from is not None and not isinstance(effective_from, date):
        raise InvalidInputError("effective_from must be a date")
    new_tz = changes.get("timezone")
    if new_tz is not None:
        new_tz = validate_timezone(new_tz)
    new_mode = changes.get("carryover_mode")
    if new_mode is not None:
        new_mode = _validate_mode(new_mode)
    currency = changes.get("currency")
    if currency is not None:
        currency = _validate_currency(currency)
    sub_cents = _validate_subscription_budget(
        changes.get("monthly_subscription_budget_cents")
    )

    with budget_lock(budget.id):
        anchors = []
        if new_tz is not None and new_tz != budget.timezone:
            budget.timezone = new_tz
            local_today = today or budget.today()
            rebase_rates(session, budget)
            purge_ledgers_outside(session, budget.id, budget.start_date, local_today)
            anchors.append(budget.start_date)
        if new_rate is not None and new_rate != budget.base_daily_cents:
            anchors.append(set_rate(session, budget, new_rate, effective_from))
        if new_mode is not None and new_mode != budget.carryover_mode:
            budget.carryover_mode = new_mode
            anchors.append(budget.start_date)
        if currency is not None:
            budget.currency = currency
        if "subscription_budget_enabled" in changes and changes[
            "subscription_budget_enabled"
        ] is not None:
            budget.subscription_budget_enabled = bool(changes["subscription_budget_enabled"])
        if "monthly_subscription_budget_cents" in changes:
            budget.monthly_subscription_budget_cents = sub_cents

        _touch(session, budget)
        if anchors:
            anchor = anchor_for_change(session, budget, min(anchors), today)
            recompute_from_date(session, budget, anchor, today=today)
            logger.info("budget=%s settings changed; recomputed from %s", budget.id, anchor)
        session.commit()

    session.refresh(budget)
    return budget


def _touch(session: Session, budget: Budget) -> None:
    budget.updated_at = now_utc()
    session.add(budget)
