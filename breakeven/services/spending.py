# breakeven/services/spending.py
"""Sums of expense amounts per day. Read-only."""

from __future__ import annotations

from datetime import date
from typing import Dict

from sqlalchemy import func
from sqlmodel import Session, select

from breakeven.models import Expense


def spent_on_date(session: Session, budget_id: int, day: date) -> int:
    """Total cents spent on `day`; 0 when there are no expenses."""
    stmt = select(func.coalesce(func.sum(Expense.amount_cents), 0)).where(
        Expense.budget_id == budget_id, Expense.date == day
    )
    return int(session.exec(stmt).one())


def spent_by_date(
    session: Session, budget_id: int, from_date: date, to_date: date
) -> Dict[date, int]:
    """
    Same sums as spent_on_date for every day in [from_date, to_date], in one
    grouped query. Days without expenses are absent from the mapping.
    """
    stmt = (
        select(Expense.date, func.sum(Expense.amount_cents))
        .where(
            Expense.budget_id == budget_id,
            Expense.date >= from_date,
            Expense.date <= to_date,
        )
        .group_by(Expense.date)
    )
    return {day: int(total) for day, total in session.exec(stmt).all()}
