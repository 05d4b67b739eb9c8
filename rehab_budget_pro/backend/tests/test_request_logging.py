# backend/tests/test_request_logging.py
from __future__ import annotations

import json
import logging
from types import SimpleNamespace

from starlette.requests import Request

from app.logging_config import JsonFormatter
from app.middleware.structured_logging import _route_template


def test_request_id_is_generated_and_echoed(client):
    r = client.get("/api/meta/health")
    assert len(r.headers["X-Request-ID"]) == 32

    r = client.get("/api/meta/health", headers={"X-Request-ID": "abc-123"})
    assert r.headers["X-Request-ID"] == "abc-123"


def test_malformed_request_id_is_replaced(client):
    r = client.get("/api/meta/health", headers={"X-Request-ID": "bad id with spaces"})
    assert r.headers["X-Request-ID"] != "bad id with spaces"


def test_http_request_line_is_logged(client, headers, caplog):
    with caplog.at_level(logging.INFO, logger="rehabpro.http"):
        client.get("/api/projects", headers=headers)

    recs = [r for r in caplog.records if r.name == "rehabpro.http"]
    assert recs
    assert recs[-1].getMessage() == "http_request"
    assert recs[-1].status_code == 200
    assert recs[-1].route == "/api/projects"


def test_json_formatter_keeps_known_extras():
    rec = logging.LogRecord("x", logging.INFO, __file__, 1, "budget_item insert", None, None)
    rec.project_id = 7
    rec.unrelated = "dropped"

    line = json.loads(JsonFormatter().format(rec))
    assert line["message"] == "budget_item insert"
    assert line["project_id"] == 7
    assert "unrelated" not in line


def test_logged_route_is_the_prefixed_template(client, headers, project, caplog):
    with caplog.at_level(logging.INFO, logger="rehabpro.http"):
        client.get(f"/api/projects/{project['id']}/economics", headers=headers)

    recs = [r for r in caplog.records if r.name == "rehabpro.http"]
    assert recs[-1].path == f"/api/projects/{project['id']}/economics"
    assert recs[-1].route == "/api/projects/{project_id}/economics"


def test_route_template_with_and_without_mount_prefix():
    def req(path: str, template: str | None) -> Request:
        scope = {"type": "http", "method": "GET", "path": path, "query_string": b"", "headers": []}
        if template is not None:
            scope["route"] = SimpleNamespace(path=template)
        return Request(scope)

    assert _route_template(req("/api/draws/4", "/draws/{draw_id}")) == "/api/draws/{draw_id}"
    assert _route_template(req("/api/draws/4", "/api/draws/{draw_id}")) == "/api/draws/{draw_id}"
    assert _route_template(req("/nowhere", None)) == "/nowhere"
