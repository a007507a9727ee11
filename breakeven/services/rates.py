# breakeven/services/rates.py
"""
Rate history for a budget: "X cents per day, effective from date D".

The effective rate for a day is the record with the greatest
effective_from <= day. A budget with no such record falls back to its live
base_daily_cents.
"""

from __future__ import annotations

import bisect
import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlmodel import Session, select

from breakeven.errors import InvalidInputError
from breakeven.models import Budget, BudgetRate

logger = logging.getLogger("breakeven.rates")


def validate_rate_cents(cents) -> int:
    if isinstance(cents, bool) or not isinstance(cents, int):
        raise InvalidInputError("base_daily_cents must be an integer")
    if cents <= 0:
        raise InvalidInputError("base_daily_cents must be greater than 0")
    return cents


def rate_for_date(session: Session, budget: Budget, day: date) -> int:
    """Read-only lookup of the rate in force on `day` (one query)."""
    stmt = (
        select(BudgetRate)
        .where(BudgetRate.budget_id == budget.id, BudgetRate.effective_from <= day)
        .order_by(BudgetRate.effective_from.desc())
        .limit(1)
    )
    rate = session.exec(stmt).first()
    return rate.base_daily_cents if rate else budget.base_daily_cents


def list_rates(session: Session, budget_id: int) -> List[BudgetRate]:
    stmt = (
        select(BudgetRate)
        .where(BudgetRate.budget_id == budget_id)
        .order_by(BudgetRate.effective_from)
    )
    return list(session.exec(stmt).all())


class RateSchedule:
    """
    Snapshot of one budget's rate history, loaded once per recompute call.

    Answers rate_for(day) from memory so a long walk does not query the
    rate table once per day. Build a new one for every call; a schedule
    outlives neither the call nor the session it was loaded from.
    """

    def __init__(self, fallback_cents: int, records: Iterable[Tuple[date, int]]):
        ordered = sorted(records)
        self._dates = [d for d, _ in ordered]
        self._cents = [c for _, c in ordered]
        self.fallback_cents = fallback_cents

    @classmethod
    def load(cls, session: Session, budget: Budget) -> "RateSchedule":
        rates = list_rates(session, budget.id)
        return cls(
            budget.base_daily_cents,
            ((r.effective_from, r.base_daily_cents) for r in rates),
        )

    def rate_for(self, day: date) -> int:
        idx = bisect.bisect_right(self._dates, day)
        if idx == 0:
            return self.fallback_cents
        return self._cents[idx - 1]

    def __len__(self) -> int:
        return len(self._dates)


def seed_initial_rate(session: Session, budget: Budget) -> BudgetRate:
    """Create the start_date record for a newly created budget (no commit)."""
    rate = BudgetRate(
        budget_id=budget.id,
        effective_from=budget.start_date,
        base_daily_cents=budget.base_daily_cents,
    )
    session.add(rate)
    return rate


def rebase_rates(session: Session, budget: Budget) -> None:
    """
    Re-anchor the rate history on the budget's (new) start_date after a
    timezone change. The record in force on start_date, or the earliest one
    if none is yet, is moved to start_date; older records are dropped.
    No commit.
    """
    start = budget.start_date
    rates = list_rates(session, budget.id)
    if not rates:
        seed_initial_rate(session, budget)
        session.flush()
        return

    in_force = next((r for r in reversed(rates) if r.effective_from <= start), rates[0])
    stale = [r for r in rates if r.effective_from < start and r is not in_force]
    for rate in stale:
        session.delete(rate)
    session.flush()
    if in_force.effective_from != start:
        in_force.effective_from = start
        session.add(in_force)
        session.flush()
    logger.info(
        "budget=%s rates rebased on %s (dropped %s)", budget.id, start.isoformat(), len(stale)
    )


def set_rate(
    session: Session,
    budget: Budget,
    new_cents: int,
    effective_from: Optional[date] = None,
) -> date:
    """
    Apply a rate edit and return the recompute anchor (the clamped date).

    - effective_from defaults to start_date and never goes before it.
    - On start_date the edit rewrites all history: every record is dropped and
      a single one is created at start_date.
    - Later dates overwrite the record at exactly that date, or add one.
    - budget.base_daily_cents always becomes new_cents.

    Does not recompute and does not commit; see services.budgets.change_rate.
    """
    validate_rate_cents(new_cents)
    start = budget.start_date
    anchor = max(effective_from or start, start)

    if anchor == start:
        for rate in list_rates(session, budget.id):
            session.delete(rate)
        # deletes must reach the DB before the insert (unique effective_from)
        session.flush()
        session.add(
            BudgetRate(budget_id=budget.id, effective_from=start, base_daily_cents=new_cents)
        )
    else:
        existing = session.exec(
            select(BudgetRate).where(
                BudgetRate.budget_id == budget.id, BudgetRate.effective_from == anchor
            )
        ).first()
        if existing:
            existing.base_daily_cents = new_cents
            session.add(existing)
        else:
            session.add(
                BudgetRate(
                    budget_id=budget.id, effective_from=anchor, base_daily_cents=new_cents
                )
            )

    budget.base_daily_cents = new_cents
    session.add(budget)
    session.flush()
    logger.info(
        "budget=%s rate=%s effective_from=%s", budget.id, new_cents, anchor.isoformat()
    )
    return anchor
