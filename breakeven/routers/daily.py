# breakeven/routers/daily.py
# Purpose: today's allowance and the day-by-day history.
# Both endpoints first fill any days the user missed (self-healing), so the
# numbers are current even after days without a visit.

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from breakeven.db import get_session
from breakeven.models import Budget
from breakeven.routers.deps import current_budget, query_date
from breakeven.schemas import LedgerHistory, LedgerRead, TodayRead
from breakeven.services.ledger import ensure_ledger_through_today, get_ledger_range
from breakeven.services.rates import rate_for_date

router = APIRouter(prefix="/api/v1/daily", tags=["daily"])

DEFAULT_HISTORY_DAYS = 30


@router.get("/today")
def today(
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    today_date = budget.today()
    ledger = ensure_ledger_through_today(session, budget, today=today_date)
    return TodayRead(
        date=today_date,
        available_cents=ledger.available_cents,
        spent_cents=ledger.spent_cents,
        carryover_start_cents=ledger.carryover_start_cents,
        carryover_end_cents=ledger.carryover_end_cents,
        break_even_spend_cents=ledger.available_cents,
        start_date=budget.start_date,
    ).model_dump(mode="json")


@router.get("")
def history(
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
):
    """
    Ledgers between ?from= and ?to= (YYYY-MM-DD), newest first.
    Defaults to the last 30 days; never reaches before start_date.
    """
    today_date = budget.today()
    start = budget.start_date
    default_from = max(start, today_date - timedelta(days=DEFAULT_HISTORY_DAYS))

    from_date = max(query_date(from_, default_from), start)
    to_date = query_date(to, today_date)

    ensure_ledger_through_today(session, budget, today=today_date)
    ledgers = get_ledger_range(session, budget.id, from_date, min(to_date, today_date))

    return LedgerHistory(
        from_date=from_date,
        to_date=to_date,
        start_date=start,
        ledgers=[
            LedgerRead(
                date=row.date,
                spent_cents=row.spent_cents,
                carryover_start_cents=row.carryover_start_cents,
                carryover_end_cents=row.carryover_end_cents,
                available_cents=row.available_cents,
                daily_rate_cents=rate_for_date(session, budget, row.date),
            )
            for row in reversed(ledgers)
        ],
    ).model_dump(mode="json")
