# breakeven/services/ledger.py
"""
Day ledgers: storage helpers and the recomputation walk.

One DayLedger row per (budget, day) holds what was available, what was spent
and what rolls into the next day. Rows are derived data: recompute_from_date
is the only writer, and it walks day by day from an anchor date up to today
in the budget's timezone, because each day's carryover_start is the previous
day's carryover_end.

Anchor selection (which day to start from after a change) belongs to the
callers in services.budgets and services.expenses; anchor_for_change() and
ensure_ledger_through_today() are the shared pieces.
"""

from __future__ import annotations

import logging
import threading
import weakref
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, select

from breakeven.config import get_settings
from breakeven.dates import is_first_of_month, iter_days, now_utc
from breakeven.errors import LedgerGapError, StorageUnavailableError
from breakeven.models import Budget, CarryoverMode, DayLedger
from breakeven.services.rates import RateSchedule
from breakeven.services.spending import spent_by_date

logger = logging.getLogger("breakeven.ledger")

ONE_DAY = timedelta(days=1)


# ---------- Per-budget exclusion ----------

# Entries vanish once no caller holds the lock object.
_locks: "weakref.WeakValueDictionary[int, threading.RLock]" = (
    weakref.WeakValueDictionary()
)
_locks_guard = threading.Lock()


def budget_lock(budget_id: int) -> threading.RLock:
    """
    The lock serialising every ledger write for one budget in this process.
    Re-entrant, so a trigger can hold it across its own mutation and the
    recompute it starts.
    """
    with _locks_guard:
        lock = _locks.get(budget_id)
        if lock is None:
            lock = _locks[budget_id] = threading.RLock()
        return lock


def _lock_budget_row(session: Session, budget_id: int) -> None:
    # FOR UPDATE serialises walks across processes; SQLite ignores it.
    session.exec(select(Budget).where(Budget.id == budget_id).with_for_update()).first()


# ---------- Store ----------


def get_ledger(session: Session, budget_id: int, day: date) -> Optional[DayLedger]:
    stmt = select(DayLedger).where(DayLedger.budget_id == budget_id, DayLedger.date == day)
    return session.exec(stmt).first()


def get_ledger_range(
    session: Session, budget_id: int, from_date: date, to_date: date
) -> List[DayLedger]:
    """Ledgers in [from_date, to_date], oldest first."""
    stmt = (
        select(DayLedger)
        .where(
            DayLedger.budget_id == budget_id,
            DayLedger.date >= from_date,
            DayLedger.date <= to_date,
        )
        .order_by(DayLedger.date)
    )
    return list(session.exec(stmt).all())


def latest_ledger_date(
    session: Session, budget_id: int, before: Optional[date] = None
) -> Optional[date]:
    """Newest ledger date for the budget, optionally only among dates < before."""
    stmt = select(func.max(DayLedger.date)).where(DayLedger.budget_id == budget_id)
    if before is not None:
        stmt = stmt.where(DayLedger.date < before)
    return session.exec(stmt).one()


def upsert_day_ledger(
    session: Session,
    budget_id: int,
    day: date,
    *,
    spent_cents: int,
    carryover_start_cents: int,
    carryover_end_cents: int,
    available_cents: int,
    existing: Optional[DayLedger] = None,
) -> DayLedger:
    """Insert or overwrite the (budget_id, day) row. No commit."""
    row = existing if existing is not None else get_ledger(session, budget_id, day)
    if row is None:
        row = DayLedger(budget_id=budget_id, date=day)
    row.spent_cents = spent_cents
    row.carryover_start_cents = carryover_start_cents
    row.carryover_end_cents = carryover_end_cents
    row.available_cents = available_cents
    row.updated_at = now_utc()
    session.add(row)
    return row


def purge_ledgers_outside(
    session: Session, budget_id: int, first: date, last: date
) -> int:
    """Delete ledgers dated before `first` or after `last`. No commit."""
    stmt = select(DayLedger).where(
        DayLedger.budget_id == budget_id,
        or_(DayLedger.date < first, DayLedger.date > last),
    )
    stale = session.exec(stmt).all()
    for row in stale:
        session.delete(row)
    return len(stale)


# ---------- Carryover policy ----------


def carryover_start_for(
    session: Session,
    budget: Budget,
    day: date,
    *,
    previous_end: Optional[int] = None,
    strict: bool = False,
) -> int:
    """
    Carryover going into `day`.

    0 on start_date, 0 on the 1st of a month under monthly_reset, otherwise
    the previous day's carryover_end. `previous_end` is that value when the
    caller already has it; otherwise the stored row is read. A missing row
    counts as 0 unless `strict` is set.
    """
    if day == budget.start_date:
        return 0
    if budget.carryover_mode == CarryoverMode.monthly_reset and is_first_of_month(day):
        return 0
    if previous_end is not None:
        return previous_end

    prior = get_ledger(session, budget.id, day - ONE_DAY)
    if prior is None:
        if strict:
            raise LedgerGapError(budget.id, day - ONE_DAY)
        logger.warning(
            "budget=%s no ledger on %s; carrying 0 into %s",
            budget.id,
            (day - ONE_DAY).isoformat(),
            day.isoformat(),
        )
        return 0
    return prior.carryover_end_cents


# ---------- Recomputation ----------


def recompute_from_date(
    session: Session,
    budget: Budget,
    from_date: date,
    *,
    today: Optional[date] = None,
    strict_gaps: Optional[bool] = None,
) -> int:
    """
    Rebuild ledgers for every day from `from_date` through today, ascending,
    and commit. Returns the number of days written.

    from_date is clamped to the budget's start_date; nothing is written when
    it lies after today. Days before the clamped date are left as they are.
    Running the same call twice writes the same rows.
    """
    settings = get_settings()
    strict = settings.ledger_strict_gaps if strict_gaps is None else strict_gaps
    today = today or budget.today()
    effective_from = max(from_date, budget.start_date)
    if effective_from > today:
        logger.debug(
            "budget=%s nothing to recompute (from %s > today %s)",
            budget.id,
            effective_from.isoformat(),
            today.isoformat(),
        )
        return 0

    span = (today - effective_from).days + 1
    if span > settings.recompute_warn_days:
        logger.warning("budget=%s long recompute walk: %s days", budget.id, span)

    with budget_lock(budget.id):
        try:
            _lock_budget_row(session, budget.id)
            schedule = RateSchedule.load(session, budget)
            spent = spent_by_date(session, budget.id, effective_from, today)
            existing = {
                row.date: row
                for row in get_ledger_range(session, budget.id, effective_from, today)
            }

            previous_end: Optional[int] = None
            for day in iter_days(effective_from, today):
                rate = schedule.rate_for(day)
                spent_cents = spent.get(day, 0)
                carryover_start = carryover_start_for(
                    session, budget, day, previous_end=previous_end, strict=strict
                )
                row = upsert_day_ledger(
                    session,
                    budget.id,
                    day,
                    spent_cents=spent_cents,
                    carryover_start_cents=carryover_start,
                    carryover_end_cents=carryover_start + (rate - spent_cents),
                    available_cents=rate + carryover_start,
                    existing=existing.get(day),
                )
                previous_end = row.carryover_end_cents

            session.commit()
        except OperationalError as ex:
            session.rollback()
            raise StorageUnavailableError(f"Ledger recompute failed: {ex.orig}") from ex
        except LedgerGapError:
            session.rollback()
            raise
        except SQLAlchemyError:
            session.rollback()
            raise

    logger.info(
        "budget=%s recomputed %s..%s (%s days)",
        budget.id,
        effective_from.isoformat(),
        today.isoformat(),
        span,
    )
    return span


# ---------- Anchors ----------


def anchor_for_change(
    session: Session, budget: Budget, changed_from: date, today: Optional[date] = None
) -> date:
    """
    Earliest day to recompute from after an input changed on `changed_from`.

    Usually `changed_from` itself (clamped to start_date). If days between the
    last stored ledger and `changed_from` were never computed (the user did
    not open the app), the walk starts at the first of those days instead so
    their carryover reaches `changed_from`.
    """
    start = budget.start_date
    anchor = max(changed_from, start)
    today = today or budget.today()
    if anchor > today:
        return anchor
    if anchor == start:
        return start
    latest = latest_ledger_date(session, budget.id, before=anchor)
    if latest is None:
        return start
    return min(anchor, max(latest + ONE_DAY, start))


def ensure_ledger_through_today(
    session: Session, budget: Budget, today: Optional[date] = None
) -> DayLedger:
    """
    Read path for "today": fill every day since the last stored ledger, then
    return today's row. Today itself is always recomputed so a stale row from
    earlier in the day is refreshed.
    """
    today = today or budget.today()
    latest = latest_ledger_date(session, budget.id)
    if latest is None:
        anchor = budget.start_date
    elif latest < today:
        anchor = max(latest + ONE_DAY, budget.start_date)
    else:
        anchor = today
    recompute_from_date(session, budget, anchor, today=today)
    return get_ledger(session, budget.id, today)
