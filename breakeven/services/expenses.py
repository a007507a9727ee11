# breakeven/services/expenses.py
"""
Expense writes and the ledger recompute each one triggers.

Why:
- Keep router code thin.
- Every create/update/delete invalidates ledgers from the expense's date
  forward, so each write recomputes before it commits.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Mapping, Optional, Union

from sqlmodel import Session, select

from breakeven.dates import now_utc
from breakeven.errors import InvalidInputError, NotFoundError
from breakeven.models import Budget, Expense, ExpenseCategory
from breakeven.services.ledger import anchor_for_change, budget_lock, recompute_from_date

_EDITABLE = {"date", "amount_cents", "category", "note"}


def _validate_amount(amount_cents: Any) -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidInputError("amount_cents must be an integer")
    if amount_cents <= 0:
        raise InvalidInputError("amount_cents must be greater than 0")
    return amount_cents


def _validate_category(category: Union[ExpenseCategory, str]) -> ExpenseCategory:
    try:
        return ExpenseCategory(category)
    except ValueError as ex:
        allowed = ", ".join(c.value for c in ExpenseCategory)
        raise InvalidInputError(f"category must be one of: {allowed}") from ex


def _validate_date(value: Any) -> date:
    if not isinstance(value, date):
        raise InvalidInputError("date must be a date")
    return value


def _clean_note(note: Optional[str]) -> Optional[str]:
    return (note or "").strip() or None


def list_expenses(
    session: Session, budget_id: int, from_date: date, to_date: date
) -> List[Expense]:
    """Expenses in [from_date, to_date], newest first."""
    stmt = (
        select(Expense)
        .where(
            Expense.budget_id == budget_id,
            Expense.date >= from_date,
            Expense.date <= to_date,
        )
        .order_by(Expense.date.desc(), Expense.created_at.desc(), Expense.id.desc())
    )
    return list(session.exec(stmt).all())


def get_expense_for_budget(session: Session, budget: Budget, expense_id: int) -> Expense:
    """The expense, but only if it belongs to `budget`; otherwise NotFoundError."""
    expense = session.get(Expense, expense_id)
    if expense is None or expense.budget_id != budget.id:
        raise NotFoundError("Expense not found")
    return expense


def create_expense(
    session: Session,
    budget: Budget,
    *,
    date: date,
    amount_cents: int,
    category: Union[ExpenseCategory, str],
    note: Optional[str] = None,
    today: Optional[date] = None,
) -> Expense:
    """
    Create an Expense row, recompute from its date and commit.

    Plain words:
    - We accept either an ExpenseCategory enum OR its string value.
    - We refresh so the caller gets a persisted object with an id.
    """
    expense = Expense(
        budget_id=budget.id,
        date=_validate_date(date),
        amount_cents=_validate_amount(amount_cents),
        category=_validate_category(category),
        note=_clean_note(note),
    )
    with budget_lock(budget.id):
        session.add(expense)
        session.flush()
        recompute_from_date(
            session,
            budget,
            anchor_for_change(session, budget, expense.date, today),
            today=today,
        )
        session.commit()
    session.refresh(expense)
    return expense


def update_expense(
    session: Session,
    budget: Budget,
    expense: Expense,
    changes: Mapping[str, Any],
    *,
    today: Optional[date] = None,
) -> Expense:
    """
    Apply a partial update. Both the old and the new date are stale, so the
    recompute starts at the earlier one.
    """
    unknown = set(changes) - _EDITABLE
    if unknown:
        raise InvalidInputError(f"Unknown expense field(s): {', '.join(sorted(unknown))}")

    new_date = _validate_date(changes["date"]) if changes.get("date") is not None else None
    new_amount = (
        _validate_amount(changes["amount_cents"])
        if changes.get("amount_cents") is not None
        else None
    )
    new_category = (
        _validate_category(changes["category"])
        if changes.get("category") is not None
        else None
    )

    with budget_lock(budget.id):
        old_date = expense.date
        if new_date is not None:
            expense.date = new_date
        if new_amount is not None:
            expense.amount_cents = new_amount
        if new_category is not None:
            expense.category = new_category
        if "note" in changes:
            expense.note = _clean_note(changes["note"])
        expense.updated_at = now_utc()
        session.add(expense)
        session.flush()

        anchor = min(old_date, expense.date)
        recompute_from_date(
            session, budget, anchor_for_change(session, budget, anchor, today), today=today
        )
        session.commit()
    session.refresh(expense)
    return expense


def delete_expense(
    session: Session, budget: Budget, expense: Expense, *, today: Optional[date] = None
) -> None:
    with budget_lock(budget.id):
        day = expense.date
        session.delete(expense)
        session.flush()
        recompute_from_date(
            session, budget, anchor_for_change(session, budget, day, today), today=today
        )
        session.commit()
