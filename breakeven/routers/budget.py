# breakeven/routers/budget.py
# Purpose: read and update the signed-in user's budget settings.
# - Auto-creates a Budget for the user on first use.
# - PATCH is partial; rate, carryover mode and timezone edits recompute ledgers.

from fastapi import APIRouter, Depends
from sqlmodel import Session

from breakeven.db import get_session
from breakeven.models import Budget
from breakeven.routers.deps import current_budget
from breakeven.schemas import BudgetRead, BudgetUpdate
from breakeven.services.budgets import update_budget_settings

router = APIRouter(prefix="/api/v1/budget", tags=["budget"])


def budget_json(budget: Budget) -> dict:
    return BudgetRead(
        id=budget.id,
        base_daily_cents=budget.base_daily_cents,
        currency=budget.currency,
        timezone=budget.timezone,
        carryover_mode=budget.carryover_mode.value,
        subscription_budget_enabled=budget.subscription_budget_enabled,
        monthly_subscription_budget_cents=budget.monthly_subscription_budget_cents,
        start_date=budget.start_date,
        created_at=budget.created_at,
        updated_at=budget.updated_at,
    ).model_dump(mode="json")


@router.get("")
def show_budget(budget: Budget = Depends(current_budget)):
    return budget_json(budget)


@router.patch("")
def update_budget(
    body: BudgetUpdate,
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    """Apply only the fields that were sent; effective_from scopes a rate edit."""
    budget = update_budget_settings(session, budget, body.model_dump(exclude_unset=True))
    return budget_json(budget)
