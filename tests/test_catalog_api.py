from __future__ import annotations

import pytest

from confusion_api.api.catalog_routes import parse_featured

from conftest import DISH, create_dish


@pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("T", True), ("false", False), ("yes", False), (None, False)])
def test_parse_featured(raw, expected) -> None:
    assert parse_featured(raw) is expected


def test_reads_are_public(client) -> None:
    assert client.get("/dishes").json() == []
    assert client.get("/dishes/1").json() == {}
    assert client.get("/leaders").json() == []


def test_writes_require_admin(client, alice_headers) -> None:
    assert client.post("/dishes", json=DISH).status_code == 401
    assert client.post("/dishes", json=DISH, headers=alice_headers).status_code == 401
    assert client.delete("/dishes", headers=alice_headers).status_code == 401


def test_create_and_get_dish(client, admin_headers) -> None:
    dish = create_dish(client, admin_headers)
    assert dish["name"] == "Uthappizza"
    assert dish["featured"] is True
    assert dish["createdAt"]

    r = client.get(f"/dishes/{dish['_id']}")
    assert r.json()["comments"] == []
    assert r.json()["price"] == "4.99"


def test_create_requires_name(client, admin_headers) -> None:
    r = client.post("/dishes", json={"description": "nameless"}, headers=admin_headers)
    assert r.status_code == 400


def test_featured_filter(client, admin_headers) -> None:
    create_dish(client, admin_headers, name="Featured", featured=True)
    create_dish(client, admin_headers, name="Plain", featured=False)

    assert [d["name"] for d in client.get("/dishes").json()] == ["Featured", "Plain"]
    assert [d["name"] for d in client.get("/dishes?featured=true").json()] == ["Featured"]


def test_partial_update(client, admin_headers) -> None:
    dish = create_dish(client, admin_headers)

    r = client.put(f"/dishes/{dish['_id']}", json={"price": 3.5}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["price"] == "3.5"
    assert r.json()["name"] == "Uthappizza"

    assert client.put(f"/dishes/{dish['_id']}", json={}, headers=admin_headers).status_code == 400
    assert client.put("/dishes/9999", json={"name": "x"}, headers=admin_headers).json() == {}


def test_unsupported_operations(client, admin_headers) -> None:
    r = client.put("/dishes", json=DISH, headers=admin_headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "PUT operation not supported on /dishes"

    r = client.post("/promotions/3", json={}, headers=admin_headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "POST operation not supported on /promotions/3"


def test_bad_id_is_bad_request(client) -> None:
    assert client.get("/dishes/abc").status_code == 400


def test_delete(client, admin_headers) -> None:
    first = create_dish(client, admin_headers, name="One")
    create_dish(client, admin_headers, name="Two")
    create_dish(client, admin_headers, name="Three")

    assert client.delete(f"/dishes/{first['_id']}", headers=admin_headers).json() == {"n": 1, "ok": 1}
    assert client.delete(f"/dishes/{first['_id']}", headers=admin_headers).json() == {"n": 0, "ok": 1}
    assert client.delete("/dishes", headers=admin_headers).json() == {"n": 2, "ok": 1}
    assert client.get("/dishes").json() == []


def test_leaders_and_promotions(client, admin_headers) -> None:
    leader = {"name": "Peter Pan", "designation": "Chief Epicurious Officer", "abbr": "CEO", "featured": False}
    assert client.post("/leaders", json=leader, headers=admin_headers).json() == {"n": 1, "ok": 1}
    got = client.get("/leaders").json()[0]
    assert got["designation"] == "Chief Epicurious Officer"
    assert "comments" not in client.get(f"/leaders/{got['_id']}").json()

    promo = {"name": "Weekend Grand Buffet", "price": 19.99, "label": "New", "featured": True}
    assert client.post("/promotions", json=promo, headers=admin_headers).json() == {"n": 1, "ok": 1}
    assert client.get("/promotions?featured=1").json()[0]["price"] == "19.99"
