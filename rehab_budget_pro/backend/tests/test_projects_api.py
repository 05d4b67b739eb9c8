# backend/tests/test_projects_api.py
from __future__ import annotations

import pytest

from app.domain.catalog import BUDGET_CATEGORIES


def _headers(org_slug: str, email: str = "owner@rehabpro.local", role: str = "owner") -> dict[str, str]:
    return {"X-Org-Slug": org_slug, "X-User-Email": email, "X-User-Role": role}


def test_missing_org_context_is_unauthorized(client):
    r = client.get("/api/projects")
    assert r.status_code == 401


def test_create_applies_configured_defaults(client, headers):
    r = client.post("/api/projects", json={"name": "Bare lead"}, headers=headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "lead"
    assert body["state"] == "MN"
    assert body["contingency_percent"] == 10.0
    assert body["selling_cost_percent"] == 8.0
    assert body["hold_months"] == 4.0
    assert body["property_type"] == "sfh"


def test_create_rejects_unknown_status(client, headers):
    r = client.post("/api/projects", json={"name": "x", "status": "flipping"}, headers=headers)
    assert r.status_code == 422


def test_economics_endpoint_matches_calculator(client, headers, project):
    r = client.post(
        "/api/budget-items",
        json={
            "project_id": project["id"],
            "category": "kitchen",
            "item": "Kitchen remodel",
            "underwriting_amount": 40000,
            "forecast_amount": 45000,
        },
        headers=headers,
    )
    assert r.status_code == 200, r.text

    econ = client.get(f"/api/projects/{project['id']}/economics", headers=headers).json()
    assert econ["project_id"] == project["id"]
    assert econ["underwriting_with_contingency"] == 44000
    assert econ["scenarios"]["underwriting"]["total_investment"] == 227000
    assert econ["scenarios"]["underwriting"]["gross_profit"] == 73000
    assert econ["scenarios"]["underwriting"]["roi"] == pytest.approx(32.16, abs=0.01)
    assert econ["mao"] == {"mao": 166000, "spread": 16000, "status": "under", "arv_multiplier": 0.7}
    assert econ["active_phase"] == "forecast"
    assert econ["draws"]["total_budget"] == 49500
    assert econ["draws"]["next_draw_number"] == 1


def test_categories_endpoint_lists_every_category(client, headers, project):
    rows = client.get(f"/api/projects/{project['id']}/categories", headers=headers).json()
    assert [r["category"] for r in rows] == [k for k, _ in BUDGET_CATEGORIES]

    rows = client.get(f"/api/projects/{project['id']}/categories?non_empty=true", headers=headers).json()
    assert rows == []


def test_patch_updates_only_given_fields(client, headers, project):
    r = client.patch(
        f"/api/projects/{project['id']}",
        json={"status": "under_contract", "arv": 310000},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["status"] == "under_contract"
    assert body["arv"] == 310000
    assert body["purchase_price"] == 150000


@pytest.mark.parametrize("field", ["name", "contingency_percent", "hold_months", "closing_costs", "status"])
def test_patch_rejects_null_on_required_fields(client, headers, project, field):
    r = client.patch(f"/api/projects/{project['id']}", json={field: None}, headers=headers)
    assert r.status_code == 422
    assert field in r.json()["detail"]

    # nullable money fields may still be cleared
    r = client.patch(f"/api/projects/{project['id']}", json={"arv": None}, headers=headers)
    assert r.status_code == 200
    assert r.json()["arv"] is None


def test_cross_org_project_access_is_blocked(client, headers, project):
    other = _headers("some-other-org")
    assert client.get(f"/api/projects/{project['id']}", headers=other).status_code == 404
    assert client.get(f"/api/projects/{project['id']}/economics", headers=other).status_code == 404
    assert client.patch(f"/api/projects/{project['id']}", json={"name": "x"}, headers=other).status_code == 404

    ids = [p["id"] for p in client.get("/api/projects", headers=other).json()]
    assert project["id"] not in ids


def test_analyst_cannot_mutate(client, org_slug, project):
    analyst = _headers(org_slug, email="analyst@rehabpro.local", role="analyst")
    assert client.get(f"/api/projects/{project['id']}", headers=analyst).status_code == 200
    assert client.patch(f"/api/projects/{project['id']}", json={"name": "x"}, headers=analyst).status_code == 403


def test_delete_removes_project_and_its_budget(client, headers, project):
    client.post(
        "/api/budget-items",
        json={"project_id": project["id"], "category": "demo", "item": "Haul", "qty": 2, "rate": 350},
        headers=headers,
    )
    r = client.delete(f"/api/projects/{project['id']}", headers=headers)
    assert r.status_code == 200
    assert client.get(f"/api/projects/{project['id']}", headers=headers).status_code == 404
    assert client.get(f"/api/budget-items?project_id={project['id']}", headers=headers).status_code == 404
