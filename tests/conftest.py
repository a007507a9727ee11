# tests/conftest.py
# Test setup: temporary SQLite DBs, dependency override for sessions, and a
# factory for budgets with a fixed start date.

import sys
from datetime import date, datetime, time, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine

# Ensure repo root on sys.path so "import breakeven" works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import breakeven.models as _models  # noqa: F401,E402  # registers tables on SQLModel.metadata
from breakeven.db import get_session  # noqa: E402
from breakeven.main import app as fastapi_app  # noqa: E402
from breakeven.models import Budget, CarryoverMode, User  # noqa: E402
from breakeven.services.rates import seed_initial_rate  # noqa: E402


@pytest.fixture()
def tmp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "test_breakeven.db"


@pytest.fixture()
def test_engine(tmp_db_path: Path):
    # File-based SQLite so multiple connections share the same DB
    url = f"sqlite:///{tmp_db_path}"
    engine = create_engine(url, connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def client(test_engine):
    # Override the app's DB session to use our test engine
    def _get_test_session():
        with Session(test_engine) as s:
            yield s

    fastapi_app.dependency_overrides[get_session] = _get_test_session
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def session():
    """In-memory DB for service tests (no HTTP)."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    engine.dispose()


@pytest.fixture()
def make_budget(session):
    """
    Build a budget whose start_date is `start` (created at noon UTC, zone UTC
    unless given) with its initial rate seeded, like services.budgets does.
    """
    counter = {"n": 0}

    def _make(
        start: date = date(2025, 1, 10),
        rate: int = 2000,
        mode: CarryoverMode = CarryoverMode.continuous,
        tz: str = "UTC",
    ) -> Budget:
        counter["n"] += 1
        user = User(email=f"user{counter['n']}@test.com", hashed_password="x")
        session.add(user)
        session.flush()
        budget = Budget(
            user_id=user.id,
            base_daily_cents=rate,
            currency="CAD",
            timezone=tz,
            carryover_mode=mode,
            created_at=datetime.combine(start, time(12, 0), tzinfo=timezone.utc),
        )
        session.add(budget)
        session.flush()
        seed_initial_rate(session, budget)
        session.commit()
        session.refresh(budget)
        return budget

    return _make
