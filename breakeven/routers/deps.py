# breakeven/routers/deps.py
# Shared FastAPI dependencies: the signed-in user's budget and query dates.

from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlmodel import Session

from breakeven.dates import parse_iso_date
from breakeven.db import get_session
from breakeven.errors import InvalidInputError
from breakeven.models import Budget
from breakeven.security import require_user_id
from breakeven.services.budgets import get_or_create_budget


def current_budget(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
) -> Budget:
    """The user's active budget; created with defaults on first access."""
    return get_or_create_budget(session, user_id)


def query_date(value: Optional[str], fallback: date) -> date:
    """Parse an optional ?from=/?to= value; malformed input is a 400."""
    if value is None or not value.strip():
        return fallback
    try:
        return parse_iso_date(value)
    except InvalidInputError as ex:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ex.message)
