# tests/test_api_ledger.py
from datetime import date, timedelta

from sqlmodel import select

from breakeven.db import get_session
from breakeven.main import app as fastapi_app
from breakeven.models import Budget


def signup(client, email="t@test.com", password="pw123456"):
    r = client.post("/auth/signup", json={"email": email, "password": password})
    assert r.status_code == 201
    # Prove we are logged in
    assert client.get("/api/v1/me").status_code == 200


def _backdate_budget(days: int):
    """Pretend the budget was created `days` days ago."""
    gen = fastapi_app.dependency_overrides[get_session]()
    with next(gen) as s:
        budget = s.exec(select(Budget)).first()
        budget.created_at = budget.created_at - timedelta(days=days)
        s.add(budget)
        s.commit()


# ---------- Budget ----------


def test_budget_created_with_defaults(client):
    signup(client)

    body = client.get("/api/v1/budget").json()
    assert body["base_daily_cents"] == 2000
    assert body["currency"] == "CAD"
    assert body["timezone"] == "America/Toronto"
    assert body["carryover_mode"] == "continuous"
    assert body["subscription_budget_enabled"] is False

    today = client.get("/api/v1/daily/today").json()
    assert today["start_date"] == body["start_date"] == today["date"]
    assert today["available_cents"] == 2000
    assert today["break_even_spend_cents"] == 2000
    assert today["carryover_start_cents"] == 0


def test_patch_budget_rate_recomputes_today(client):
    signup(client)
    client.get("/api/v1/daily/today")

    r = client.patch("/api/v1/budget", json={"base_daily_cents": 2500, "currency": "usd"})
    assert r.status_code == 200
    assert r.json()["base_daily_cents"] == 2500
    assert r.json()["currency"] == "USD"

    assert client.get("/api/v1/daily/today").json()["available_cents"] == 2500


def test_patch_budget_rejects_bad_values(client):
    signup(client)

    r = client.patch("/api/v1/budget", json={"base_daily_cents": 0})
    assert r.status_code == 422
    assert "base_daily_cents" in r.json()["error"]

    r = client.patch("/api/v1/budget", json={"timezone": "Atlantis/Capital"})
    assert r.status_code == 422

    r = client.patch("/api/v1/budget", json={"carryover_mode": "sometimes"})
    assert r.status_code == 422

    r = client.patch("/api/v1/budget", json={"base_daily_cents": "lots"})
    assert r.status_code == 422

    assert client.get("/api/v1/budget").json()["base_daily_cents"] == 2000


# ---------- Daily ----------


def test_today_fills_days_since_start(client):
    signup(client)
    client.get("/api/v1/budget")
    _backdate_budget(3)

    today = client.get("/api/v1/daily/today").json()
    days = (date.fromisoformat(today["date"]) - date.fromisoformat(today["start_date"])).days
    assert days >= 3
    assert today["carryover_start_cents"] == days * 2000
    assert today["available_cents"] == (days + 1) * 2000


def test_history_is_newest_first_with_rates(client):
    signup(client)
    client.get("/api/v1/budget")
    _backdate_budget(4)

    body = client.get("/api/v1/daily").json()
    ledgers = body["ledgers"]
    assert len(ledgers) >= 5
    assert ledgers[0]["date"] > ledgers[-1]["date"]
    assert ledgers[-1]["date"] == body["start_date"]
    assert ledgers[-1]["carryover_start_cents"] == 0
    assert all(row["daily_rate_cents"] == 2000 for row in ledgers)
    for newer, older in zip(ledgers, ledgers[1:]):
        assert newer["carryover_start_cents"] == older["carryover_end_cents"]


def test_history_range_and_bad_dates(client):
    signup(client)
    client.get("/api/v1/budget")
    _backdate_budget(5)
    today = date.fromisoformat(client.get("/api/v1/daily/today").json()["date"])

    frm = (today - timedelta(days=2)).isoformat()
    body = client.get("/api/v1/daily", params={"from": frm, "to": today.isoformat()}).json()
    assert [row["date"] for row in body["ledgers"]] == [
        (today - timedelta(days=n)).isoformat() for n in range(3)
    ]

    r = client.get("/api/v1/daily", params={"from": "01/02/2025"})
    assert r.status_code == 400
    assert "YYYY-MM-DD" in r.json()["error"]

    r = client.get("/api/v1/daily", params={"to": "2025-02-30"})
    assert r.status_code == 400


def test_history_never_reaches_before_start(client):
    signup(client)

    body = client.get("/api/v1/daily", params={"from": "2000-01-01"}).json()
    assert body["from_date"] == body["start_date"]
    assert len(body["ledgers"]) == 1


# ---------- Expenses ----------


def test_expense_crud_moves_today(client):
    signup(client)
    today = client.get("/api/v1/daily/today").json()["date"]

    r = client.post(
        "/api/v1/expenses",
        json={"date": today, "amount_cents": 650, "category": "coffee", "note": " flat white "},
    )
    assert r.status_code == 201
    expense = r.json()
    assert expense["note"] == "flat white"

    day = client.get("/api/v1/daily/today").json()
    assert day["spent_cents"] == 650
    assert day["carryover_end_cents"] == 2000 - 650

    listed = client.get("/api/v1/expenses").json()["expenses"]
    assert [e["id"] for e in listed] == [expense["id"]]

    r = client.patch(f"/api/v1/expenses/{expense['id']}", json={"amount_cents": 2500})
    assert r.status_code == 200
    assert client.get("/api/v1/daily/today").json()["carryover_end_cents"] == -500

    r = client.delete(f"/api/v1/expenses/{expense['id']}")
    assert r.status_code == 204
    assert client.get("/api/v1/daily/today").json()["spent_cents"] == 0
    assert client.get("/api/v1/expenses").json()["expenses"] == []


def test_expense_validation(client):
    signup(client)
    today = client.get("/api/v1/daily/today").json()["date"]

    r = client.post("/api/v1/expenses", json={"date": today, "amount_cents": 0, "category": "food"})
    assert r.status_code == 422

    r = client.post("/api/v1/expenses", json={"date": today, "amount_cents": 10, "category": "boats"})
    assert r.status_code == 422
    assert "category" in r.json()["error"]

    r = client.post("/api/v1/expenses", json={"amount_cents": 10, "category": "food"})
    assert r.status_code == 422

    assert client.patch("/api/v1/expenses/999", json={"amount_cents": 5}).status_code == 404
    assert client.delete("/api/v1/expenses/999").status_code == 404


def test_cannot_touch_another_users_expense(client):
    signup(client, email="a@test.com")
    today = client.get("/api/v1/daily/today").json()["date"]
    expense_id = client.post(
        "/api/v1/expenses", json={"date": today, "amount_cents": 100, "category": "food"}
    ).json()["id"]
    client.post("/auth/signout")

    signup(client, email="b@test.com")
    r = client.patch(f"/api/v1/expenses/{expense_id}", json={"amount_cents": 5})
    assert r.status_code == 404
    assert r.json() == {"error": "Expense not found"}
    assert client.delete(f"/api/v1/expenses/{expense_id}").status_code == 404


# ---------- Subscriptions ----------


def test_subscription_endpoints(client):
    signup(client)
    client.patch(
        "/api/v1/budget",
        json={"subscription_budget_enabled": True, "monthly_subscription_budget_cents": 3000},
    )

    r = client.post(
        "/api/v1/subscriptions",
        json={"name": "Streamer", "amount_cents": 1599, "billing_cycle": "monthly", "category": "streaming"},
    )
    assert r.status_code == 201
    sub = r.json()
    assert sub["monthly_cost_cents"] == 1599
    assert sub["status"] == "active"

    client.post(
        "/api/v1/subscriptions",
        json={"name": "Cloud", "amount_cents": 12000, "billing_cycle": "yearly"},
    )

    assert len(client.get("/api/v1/subscriptions").json()["subscriptions"]) == 2

    summary = client.get("/api/v1/subscriptions/summary").json()
    assert summary["total_monthly_cents"] == 2599
    assert summary["budget_status"]["remaining_cents"] == 401
    assert summary["budget_status"]["over_budget"] is False

    r = client.patch(f"/api/v1/subscriptions/{sub['id']}", json={"status": "paused"})
    assert r.status_code == 200
    assert client.get("/api/v1/subscriptions/summary").json()["total_monthly_cents"] == 1000

    assert client.get(f"/api/v1/subscriptions/{sub['id']}").json()["name"] == "Streamer"
    assert client.delete(f"/api/v1/subscriptions/{sub['id']}").status_code == 204
    assert client.get(f"/api/v1/subscriptions/{sub['id']}").status_code == 404

    r = client.post(
        "/api/v1/subscriptions",
        json={"name": "Bad", "amount_cents": 100, "billing_cycle": "daily"},
    )
    assert r.status_code == 422
