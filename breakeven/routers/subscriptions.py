# breakeven/routers/subscriptions.py
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from breakeven.db import get_session
from breakeven.models import Budget, Subscription
from breakeven.routers.deps import current_budget
from breakeven.schemas import SubscriptionCreate, SubscriptionRead, SubscriptionUpdate
from breakeven.security import require_user_id
from breakeven.services.subscriptions import (
    charges_soon,
    create_subscription,
    delete_subscription,
    get_subscription_for_user,
    list_subscriptions,
    monthly_cost_cents,
    subscription_summary,
    update_subscription,
)

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


def subscription_json(sub: Subscription, today: date) -> dict:
    return SubscriptionRead(
        id=sub.id,
        name=sub.name,
        amount_cents=sub.amount_cents,
        billing_cycle=sub.billing_cycle.value,
        category=sub.category.value,
        status=sub.status.value,
        next_charge_date=sub.next_charge_date,
        last_charged_date=sub.last_charged_date,
        monthly_cost_cents=monthly_cost_cents(sub),
        charges_soon=charges_soon(sub, today),
        created_at=sub.created_at,
        updated_at=sub.updated_at,
    ).model_dump(mode="json")


# "today" for subscriptions is the budget's today, so charge dates roll over
# at the same midnight as the daily allowance.


@router.get("")
def index(
    user_id: int = Depends(require_user_id),
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    today = budget.today()
    return {
        "subscriptions": [
            subscription_json(s, today) for s in list_subscriptions(session, user_id)
        ]
    }


@router.get("/summary")
def summary(
    user_id: int = Depends(require_user_id),
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    return subscription_summary(session, user_id, budget, budget.today())


@router.post("", status_code=status.HTTP_201_CREATED)
def create(
    body: SubscriptionCreate,
    user_id: int = Depends(require_user_id),
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    today = budget.today()
    sub = create_subscription(
        session,
        user_id,
        name=body.name,
        amount_cents=body.amount_cents,
        billing_cycle=body.billing_cycle,
        category=body.category,
        status=body.status,
        start_date=body.start_date,
        next_charge_date=body.next_charge_date,
        today=today,
    )
    return subscription_json(sub, today)


@router.get("/{subscription_id}")
def show(
    subscription_id: int,
    user_id: int = Depends(require_user_id),
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    sub = get_subscription_for_user(session, user_id, subscription_id)
    return subscription_json(sub, budget.today())


@router.patch("/{subscription_id}")
def update(
    subscription_id: int,
    body: SubscriptionUpdate,
    user_id: int = Depends(require_user_id),
    budget: Budget = Depends(current_budget),
    session: Session = Depends(get_session),
):
    today = budget.today()
    sub = get_subscription_for_user(session, user_id, subscription_id)
    sub = update_subscription(
        session, sub, body.model_dump(exclude_unset=True), today=today
    )
    return subscription_json(sub, today)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def destroy(
    subscription_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    sub = get_subscription_for_user(session, user_id, subscription_id)
    delete_subscription(session, sub)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
