# backend/tests/test_vendors_api.py
from __future__ import annotations


def _mk_vendor(client, headers, **fields) -> dict:
    payload = {"name": "Twin Cities Plumbing", "trade": "plumber"}
    payload.update(fields)
    r = client.post("/api/vendors", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_create_and_filter(client, headers):
    v = _mk_vendor(client, headers, contact_name="Sam", rating=4, price_level="$$")
    _mk_vendor(client, headers, name="North Electric", trade="electrician")

    assert v["licensed"] is False
    assert v["status"] == "active"

    rows = client.get("/api/vendors?trade=plumber", headers=headers).json()
    assert [r["id"] for r in rows] == [v["id"]]

    rows = client.get("/api/vendors?search=north", headers=headers).json()
    assert [r["name"] for r in rows] == ["North Electric"]


def test_rating_and_trade_are_validated(client, headers):
    assert client.post("/api/vendors", json={"name": "x", "trade": "plumber", "rating": 6}, headers=headers).status_code == 422
    assert client.post("/api/vendors", json={"name": "x", "trade": "wizard"}, headers=headers).status_code == 422


def test_vendor_summary_and_project_rollup(client, headers, project):
    v = _mk_vendor(client, headers)
    for payload in (
        {"underwriting_amount": 300, "forecast_amount": 500},
        {"underwriting_amount": 1000, "forecast_amount": 0, "actual_amount": 950},
    ):
        r = client.post(
            "/api/budget-items",
            json={"project_id": project["id"], "category": "plumbing", "item": "line", "vendor_id": v["id"], **payload},
            headers=headers,
        )
        assert r.status_code == 200, r.text

    d = client.post(
        "/api/draws",
        json={"project_id": project["id"], "vendor_id": v["id"], "amount": 400, "status": "paid"},
        headers=headers,
    ).json()
    client.post("/api/draws", json={"project_id": project["id"], "vendor_id": v["id"], "amount": 250}, headers=headers)

    s = client.get(f"/api/vendors/{v['id']}/summary", headers=headers).json()
    assert s["budget"] == 1500
    assert s["actual"] == 950
    assert s["item_count"] == 2
    assert s["project_count"] == 1
    assert s["draws_paid"] == 400
    assert s["draws_pending"] == 250

    roll = client.get(f"/api/projects/{project['id']}/vendors/rollup", headers=headers).json()
    assert roll == [{"vendor_id": v["id"], "budget": 1500, "actual": 950, "item_count": 2}]

    assert d["draw_number"] == 1


def test_delete_vendor_unlinks_items(client, headers, project):
    v = _mk_vendor(client, headers)
    item = client.post(
        "/api/budget-items",
        json={"project_id": project["id"], "category": "plumbing", "item": "line", "vendor_id": v["id"]},
        headers=headers,
    ).json()

    assert client.delete(f"/api/vendors/{v['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/vendors/{v['id']}", headers=headers).status_code == 404

    after = client.get(f"/api/budget-items/{item['id']}", headers=headers).json()
    assert after["vendor_id"] is None
