from __future__ import annotations

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, bearer, login


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").status_code == 200


def test_signup_login_check_flow(client) -> None:
    r = client.post("/signup", json={"username": "alice", "password": "pw1", "firstname": "Alice"})
    assert r.status_code == 200
    assert r.json() == {"status": "Registration Successful!", "user": "alice"}

    r = client.post("/login", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["status"] == "You are successfully logged in!"
    assert body["token"]

    r = client.get("/checkToken", headers=bearer(body["token"]))
    assert r.status_code == 200
    assert r.json()["status"] == "JWT valid!"


def test_login_failures_look_the_same(client) -> None:
    client.post("/signup", json={"username": "alice", "password": "pw1"})

    wrong_pw = client.post("/login", json={"username": "alice", "password": "nope"})
    unknown = client.post("/login", json={"username": "nobody", "password": "nope"})

    assert wrong_pw.status_code == unknown.status_code == 401
    assert wrong_pw.json() == unknown.json() == {"success": False, "token": "", "status": "Login failed!"}


def test_malformed_login_body_is_unauthorized(client) -> None:
    r = client.post("/login", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 401

    r = client.post("/login", json={"username": "alice"})
    assert r.status_code == 401


def test_signup_rejects_blank_and_duplicate_usernames(client) -> None:
    assert client.post("/signup", json={"username": "  ", "password": "pw"}).status_code == 401
    assert client.post("/signup", json={"username": "alice", "password": ""}).status_code == 401

    assert client.post("/signup", json={"username": "alice", "password": "pw"}).status_code == 200
    r = client.post("/signup", json={"username": "alice", "password": "other"})
    assert r.status_code == 500
    assert "alice" not in r.text


def test_route_aliases(client) -> None:
    assert client.post("/users/signup", json={"username": "carol", "password": "pw"}).status_code == 200
    r = client.post("/users/login", json={"username": "carol", "password": "pw"})
    assert r.status_code == 200
    r = client.get("/users/checkJWTtoken", headers=bearer(r.json()["token"]))
    assert r.json()["success"] is True


def test_check_token_rejects_missing_and_bad_tokens(client) -> None:
    r = client.get("/checkToken")
    assert r.status_code == 401
    assert r.json() == {"status": "JWT invalid!", "success": False, "err": "JWT invalid!"}

    assert client.get("/checkToken", headers={"Authorization": "Bearer junk"}).status_code == 401
    assert client.get("/checkToken", headers={"Authorization": "Token junk"}).status_code == 401


def test_list_users_requires_admin(client, alice_headers) -> None:
    assert client.get("/users").status_code == 401

    r = client.get("/users", headers=alice_headers)
    assert r.status_code == 401
    assert r.json()["detail"] == "You are not authorized to perform this operation!"

    admin_token = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    r = client.get("/users", headers=bearer(admin_token))
    assert r.status_code == 200
    users = r.json()
    assert [u["username"] for u in users] == ["admin", "alice"]
    assert users[0]["admin"] is True
    assert users[1]["firstname"] == "Alice"
    for u in users:
        assert "password" not in u
        assert "password_hash" not in u


def test_bootstrap_admin_only_runs_once(cfg) -> None:
    from fastapi.testclient import TestClient

    from confusion_api.api.server import create_app

    with TestClient(create_app(cfg)) as c:
        login(c, ADMIN_USERNAME, ADMIN_PASSWORD)
    with TestClient(create_app(cfg)) as c:
        token = login(c, ADMIN_USERNAME, ADMIN_PASSWORD)
        assert len(c.get("/users", headers=bearer(token)).json()) == 1


def test_signup_with_oversized_password_is_generic_failure(client) -> None:
    r = client.post("/signup", json={"username": "dave", "password": "x" * 5000})
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal Server Error"}
    assert client.post("/login", json={"username": "dave", "password": "x" * 5000}).status_code == 401
