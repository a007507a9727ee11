# breakeven/routers/expenses.py
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session

from breakeven.db import get_session
from breakeven.models import Budget, Expense
from breakeven.routers.deps import current_budget, query_date
from breakeven.schemas import ExpenseCreate, ExpenseRead, ExpenseUpdate
from breakeven.services.expenses import (
    create_expense,
    delete_expense,
    get_expense_for_budget,
    list_expenses,
    update_expense,
)

router = APIRouter(prefix="/api/v1/expenses", tags=["expenses"])


def expense_json(expense: Expense) -> dict:
    return ExpenseRead(
        id=expense.id,
        date=expense.date,
        amount_cents=expense.amount_cents,
        category=expense.category.value,
        note=expense.note,
        created_at=expense.created_at,
        updated_at=expense.updated_at,
    ).model_dump(mode="json")


@router.get("")
def index(
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
):
    today = budget.today()
    from_date = query_date(from_, today - timedelta(days=30))
    to_date = query_date(to, today)
    expenses = list_expenses(session, budget.id, from_date, to_date)
    return {
        "from_date": from_date.isoformat(),
        "to_date": to_date.isoformat(),
        "expenses": [expense_json(e) for e in expenses],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create(
    body: ExpenseCreate,
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    expense = create_expense(
        session,
        budget,
        date=body.date,
        amount_cents=body.amount_cents,
        category=body.category,
        note=body.note,
    )
    return expense_json(expense)


@router.patch("/{expense_id}")
def update(
    expense_id: int,
    body: ExpenseUpdate,
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    expense = get_expense_for_budget(session, budget, expense_id)
    expense = update_expense(session, budget, expense, body.model_dump(exclude_unset=True))
    return expense_json(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def destroy(
    expense_id: int,
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    expense = get_expense_for_budget(session, budget, expense_id)
    delete_expense(session, budget, expense)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
