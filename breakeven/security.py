# breakeven/security.py
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status
from fastapi.requests import Request
from passlib.context import CryptContext

# Password hashing context (pbkdf2_sha256: pure passlib, no bcrypt wheel needed)
_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ------------ Password helpers ------------


def hash_password(plain: str) -> str:
    """Return a secure hash for a plaintext password."""
    return _pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return _pwd.verify(plain, hashed)


# ------------ Session / Auth helpers ------------


def get_user_id_from_session(request: Request) -> Optional[int]:
    """
    Read user_id from the session (if present). Returns int or None.
    """
    if "session" not in request.scope:  # SessionMiddleware not installed
        return None
    uid = request.session.get("user_id")  # set during /auth/signin
    return int(uid) if uid is not None else None


def require_user_id(request: Request) -> int:
    """
    FastAPI dependency: the signed-in user's id, or 401.
    Usage:  user_id: int = Depends(require_user_id)
    """
    uid = get_user_id_from_session(request)
    if uid is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return uid


__all__ = [
    "hash_password",
    "verify_password",
    "get_user_id_from_session",
    "require_user_id",
]
