from fastapi.testclient import TestClient

PASSWORD = "Passw0rd1"


def test_signup_login_me(client: TestClient):
    # signup
    r = client.post(
        "/api/auth/signup",
        json={"username": "user1", "email": "user1@example.com", "password": PASSWORD, "full_name": " User One "},
    )
    assert r.status_code == 201
    token = r.json()["data"]["access_token"]

    # me
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["data"]["username"] == "user1"
    assert body["data"]["full_name"] == "User One"

    # login
    r = client.post("/api/auth/login", json={"username": "user1", "password": PASSWORD})
    assert r.status_code == 200
    assert "access_token" in r.json()["data"]


def test_duplicate_signup_is_rejected(client: TestClient, signup):
    signup("dup")
    r = client.post(
        "/api/auth/signup",
        json={"username": "dup", "email": "other@example.com", "password": PASSWORD},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Username or email already registered"


def test_wrong_password_is_unauthenticated(client: TestClient, signup):
    signup("user2")
    r = client.post("/api/auth/login", json={"username": "user2", "password": "Wrongpass1"})
    assert r.status_code == 401


def test_protected_route_requires_token(client: TestClient):
    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json()["success"] is False

    r = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_login_matches_username_case_insensitively(client: TestClient, signup):
    signup("casey")
    r = client.post("/api/auth/login", json={"username": "  CaSeY ", "password": PASSWORD})
    assert r.status_code == 200

    r = client.post("/api/auth/login", json={"username": "    ", "password": PASSWORD})
    assert r.status_code == 400
