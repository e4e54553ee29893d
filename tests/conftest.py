from __future__ import annotations

from typing import Any, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from confusion_api.api.server import create_app
from confusion_api.config import Config


ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-pw"


@pytest.fixture()
def cfg(tmp_path) -> Config:
    return Config(
        DB_DSN=str(tmp_path / "confusion.sqlite"),
        AUTH_JWT_SECRET="test-secret-0123456789-0123456789",
        AUTH_HASH_ROUNDS=1000,
        AUTH_BOOTSTRAP_ADMIN_USERNAME=ADMIN_USERNAME,
        AUTH_BOOTSTRAP_ADMIN_PASSWORD=ADMIN_PASSWORD,
        PUBLIC_IMAGES_DIR=str(tmp_path / "images"),
        MAX_UPLOAD_BYTES=1024,
    )


@pytest.fixture()
def client(cfg: Config) -> Iterator[TestClient]:
    with TestClient(create_app(cfg)) as c:
        yield c


def login(client: TestClient, username: str, password: str) -> str:
    r = client.post("/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def signup_and_login(client: TestClient, username: str, password: str = "pw-123", **names: str) -> str:
    r = client.post("/signup", json={"username": username, "password": password, **names})
    assert r.status_code == 200, r.text
    return login(client, username, password)


@pytest.fixture()
def admin_headers(client: TestClient) -> Dict[str, str]:
    return bearer(login(client, ADMIN_USERNAME, ADMIN_PASSWORD))


@pytest.fixture()
def alice_headers(client: TestClient) -> Dict[str, str]:
    return bearer(signup_and_login(client, "alice", "wonderland", firstname="Alice", lastname="Liddell"))


@pytest.fixture()
def bob_headers(client: TestClient) -> Dict[str, str]:
    return bearer(signup_and_login(client, "bob", "builder", firstname="Bob"))


DISH = {
    "name": "Uthappizza",
    "image": "images/uthappizza.png",
    "category": "mains",
    "label": "Hot",
    "price": "4.99",
    "featured": True,
    "description": "A unique combination of Indian Uthappam and Italian pizza",
}


def create_dish(client: TestClient, headers: Dict[str, str], **overrides: Any) -> Dict[str, Any]:
    r = client.post("/dishes", json={**DISH, **overrides}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json() == {"n": 1, "ok": 1}
    return client.get("/dishes").json()[-1]
