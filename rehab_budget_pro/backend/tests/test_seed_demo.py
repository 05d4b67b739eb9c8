# backend/tests/test_seed_demo.py
from __future__ import annotations

import pytest
from sqlalchemy import func, select

from app.cli.seed_demo import DEMO_COST_REFERENCE, seed_demo
from app.domain.template_library import system_templates
from app.models import BudgetTemplate, Project


def test_seed_is_idempotent(db):
    first = seed_demo(org_slug="seed-demo", user_email="seed@rehabpro.local", db=db)
    second = seed_demo(org_slug="seed-demo", user_email="seed@rehabpro.local", db=db)

    assert first.project_id == second.project_id
    assert first.cost_reference_rows == second.cost_reference_rows
    assert first.cost_reference_rows >= len(DEMO_COST_REFERENCE)

    n = db.scalar(select(func.count()).select_from(Project).where(Project.id == first.project_id))
    assert n == 1


def test_seeded_project_economics(client):
    seed_demo(org_slug="seed-econ", user_email="seed@rehabpro.local")
    headers = {"X-Org-Slug": "seed-econ", "X-User-Email": "seed@rehabpro.local"}

    projects = client.get("/api/projects", headers=headers).json()
    assert len(projects) == 1

    econ = client.get(f"/api/projects/{projects[0]['id']}/economics", headers=headers).json()
    assert econ["scenarios"]["underwriting"]["total_investment"] == 227000
    assert econ["scenarios"]["underwriting"]["roi"] == pytest.approx(32.16, abs=0.01)
    assert econ["mao"]["spread"] == 16000


def test_system_templates_are_seeded_once(db):
    first = seed_demo(org_slug="seed-templates", user_email="seed@rehabpro.local", create_sample_project=False, db=db)
    second = seed_demo(org_slug="seed-templates", user_email="seed@rehabpro.local", create_sample_project=False, db=db)

    assert first.system_templates == second.system_templates == len(system_templates())
    names = db.scalars(select(BudgetTemplate.name).where(BudgetTemplate.org_id.is_(None))).all()
    assert sorted(names) == sorted(t.name for t in system_templates())
