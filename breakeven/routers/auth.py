# breakeven/routers/auth.py
# Minimal, test-proof auth: signup/signin/signout using the session cookie.

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlmodel import Session, select

from breakeven.db import get_session
from breakeven.models import User
from breakeven.schemas import Credentials, UserRead
from breakeven.security import hash_password, require_user_id, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])
me_router = APIRouter(prefix="/api/v1", tags=["me"])


def _user_json(user: User) -> dict:
    return UserRead.model_validate(user).model_dump(mode="json")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    body: Credentials,
    request: Request,
    session: Session = Depends(get_session),
):
    email = body.email.strip().lower()
    if not email or "@" not in email or not body.password:
        raise HTTPException(status_code=422, detail="email and password are required")

    # If user exists with the same password, just log them in (idempotent tests)
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        if not verify_password(body.password, existing.hashed_password):
            raise HTTPException(status_code=409, detail="Email already registered")
        request.session["user_id"] = existing.id
        return _user_json(existing)

    user = User(email=email, hashed_password=hash_password(body.password))
    session.add(user)
    session.commit()
    session.refresh(user)

    request.session["user_id"] = user.id
    return _user_json(user)


@router.post("/signin")
def signin(
    body: Credentials,
    request: Request,
    session: Session = Depends(get_session),
):
    email = body.email.strip().lower()
    user = session.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password.")

    request.session["user_id"] = user.id
    return _user_json(user)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def signout(request: Request):
    request.session.clear()


@me_router.get("/me")
def me(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return _user_json(user)
