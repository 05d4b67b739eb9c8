# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile
import uuid

import pytest

# Point the app at a throwaway SQLite file before app.config is imported.
_TMP_DIR = tempfile.mkdtemp(prefix="rehabpro-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ.setdefault("APP_ENV", "local")

from fastapi.testclient import TestClient  # noqa: E402

from app.db import SessionLocal, init_db  # noqa: E402
from app.main import create_app  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema():
    init_db()
    yield


@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture()
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


def make_headers(org_slug: str, email: str = "owner@rehabpro.local", role: str = "owner") -> dict[str, str]:
    return {
        "X-Org-Slug": org_slug,
        "X-User-Email": email,
        "X-User-Role": role,
    }


@pytest.fixture()
def org_slug() -> str:
    # fresh org per test so rows and change feeds never leak between tests
    return f"org-{uuid.uuid4().hex[:10]}"


@pytest.fixture()
def headers(org_slug: str) -> dict[str, str]:
    return make_headers(org_slug)


@pytest.fixture()
def project(client: TestClient, headers: dict[str, str]) -> dict:
    r = client.post(
        "/api/projects",
        json={
            "name": "1234 Elm St",
            "arv": 300000,
            "purchase_price": 150000,
            "closing_costs": 5000,
            "holding_costs_monthly": 1000,
            "hold_months": 4,
            "selling_cost_percent": 8,
            "contingency_percent": 10,
        },
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()
