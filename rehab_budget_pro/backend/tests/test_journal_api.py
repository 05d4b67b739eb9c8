# backend/tests/test_journal_api.py
from __future__ import annotations


def _page(client, headers, **fields) -> dict:
    r = client.post("/api/journal", json=fields, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_defaults(client, headers):
    p = _page(client, headers)
    assert p["title"] == "Untitled"
    assert p["page_type"] == "note"
    assert p["is_pinned"] is False
    assert p["is_archived"] is False


def test_pinned_first_and_archived_hidden(client, headers):
    a = _page(client, headers, title="Lender call")
    b = _page(client, headers, title="Punch list", page_type="checklist", is_pinned=True)
    c = _page(client, headers, title="Old idea", page_type="idea")
    client.patch(f"/api/journal/{c['id']}", json={"is_archived": True}, headers=headers)

    ids = [x["id"] for x in client.get("/api/journal", headers=headers).json()]
    assert ids[0] == b["id"]
    assert set(ids) == {a["id"], b["id"]}

    archived = client.get("/api/journal?archived=true", headers=headers).json()
    assert [x["id"] for x in archived] == [c["id"]]

    checklists = client.get("/api/journal?page_type=checklist", headers=headers).json()
    assert [x["id"] for x in checklists] == [b["id"]]


def test_search_covers_title_and_content(client, headers):
    a = _page(client, headers, title="Walkthrough", content="Foundation crack by the NE corner")
    b = _page(client, headers, title="Foundation bids")
    _page(client, headers, title="Paint colors")

    found = {x["id"] for x in client.get("/api/journal?search=foundation", headers=headers).json()}
    assert found == {a["id"], b["id"]}


def test_project_filter_and_detach_on_project_delete(client, headers, project):
    tied = _page(client, headers, title="Site visit", page_type="site_visit", project_id=project["id"])
    _page(client, headers, title="General")

    rows = client.get(f"/api/journal?project_id={project['id']}", headers=headers).json()
    assert [x["id"] for x in rows] == [tied["id"]]

    last_id = client.get("/api/changes", headers=headers).json()[-1]["id"]
    assert client.delete(f"/api/projects/{project['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/journal/{tied['id']}", headers=headers).json()["project_id"] is None

    events = client.get(f"/api/changes?since_id={last_id}", headers=headers).json()
    assert [(e["entity_type"], e["action"]) for e in events] == [("journal_page", "update"), ("project", "delete")]


def test_validation_and_org_scope(client, headers, project):
    assert client.post("/api/journal", json={"page_type": "diary"}, headers=headers).status_code == 422
    assert client.post("/api/journal", json={"project_id": 999999}, headers=headers).status_code == 404

    p = _page(client, headers, title="Private")
    assert client.patch(f"/api/journal/{p['id']}", json={"title": None}, headers=headers).status_code == 422

    other = {"X-Org-Slug": "journal-elsewhere", "X-User-Email": "owner@rehabpro.local", "X-User-Role": "owner"}
    assert client.get(f"/api/journal/{p['id']}", headers=other).status_code == 404

    assert client.delete(f"/api/journal/{p['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/journal/{p['id']}", headers=headers).status_code == 404
