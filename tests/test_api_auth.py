# tests/test_api_auth.py


def test_healthz_and_banner(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.text == "ok"

    assert client.get("/").json()["endpoints"] == "/api/v1"


def test_api_requires_session(client):
    for path in ("/api/v1/me", "/api/v1/budget", "/api/v1/daily/today", "/api/v1/expenses"):
        r = client.get(path)
        assert r.status_code == 401, path
        assert r.json() == {"error": "Not authenticated"}


def test_signup_signin_signout(client):
    r = client.post("/auth/signup", json={"email": "Me@Test.com", "password": "pw123456"})
    assert r.status_code == 201
    assert r.json()["email"] == "me@test.com"

    assert client.get("/api/v1/me").json()["email"] == "me@test.com"

    assert client.post("/auth/signout").status_code == 204
    assert client.get("/api/v1/me").status_code == 401

    r = client.post("/auth/signin", json={"email": "me@test.com", "password": "pw123456"})
    assert r.status_code == 200
    assert client.get("/api/v1/me").status_code == 200


def test_signup_twice_with_same_password_signs_in(client):
    body = {"email": "again@test.com", "password": "pw123456"}
    first = client.post("/auth/signup", json=body)
    client.post("/auth/signout")

    second = client.post("/auth/signup", json=body)
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]

    r = client.post("/auth/signup", json={"email": "again@test.com", "password": "other"})
    assert r.status_code == 409


def test_bad_credentials(client):
    client.post("/auth/signup", json={"email": "x@test.com", "password": "pw123456"})
    client.post("/auth/signout")

    r = client.post("/auth/signin", json={"email": "x@test.com", "password": "wrong"})
    assert r.status_code == 401
    assert "error" in r.json()

    r = client.post("/auth/signup", json={"email": "not-an-email", "password": "pw"})
    assert r.status_code == 422

    r = client.post("/auth/signup", json={"email": "y@test.com"})
    assert r.status_code == 422
    assert r.json()["error"] == "Invalid request body"
