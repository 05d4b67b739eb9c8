# backend/tests/test_migration_schema.py
from __future__ import annotations

import importlib

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from app.db import Base
import app.models  # noqa: F401


REVISIONS = ("0001_init", "0002_templates_tags_journal")


def _run_upgrade(engine) -> None:
    for name in REVISIONS:
        migration = importlib.import_module(f"app.alembic.versions.{name}")
        with engine.begin() as conn:
            ctx = MigrationContext.configure(conn)
            with Operations.context(ctx):
                migration.upgrade()


def test_revisions_create_every_model_table(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    _run_upgrade(engine)

    tables = set(sa.inspect(engine).get_table_names())
    assert set(Base.metadata.tables) <= tables


def test_revisions_match_model_columns(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    _run_upgrade(engine)

    insp = sa.inspect(engine)
    for name, table in Base.metadata.tables.items():
        migrated = {c["name"] for c in insp.get_columns(name)}
        assert {c.name for c in table.columns} == migrated, name


def test_revisions_are_rerunnable(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    _run_upgrade(engine)
    _run_upgrade(engine)

    uqs = sa.inspect(engine).get_unique_constraints("draws")
    assert any(set(u["column_names"]) == {"project_id", "draw_number"} for u in uqs)


def test_revision_chain_is_linear():
    first = importlib.import_module("app.alembic.versions.0001_init")
    second = importlib.import_module("app.alembic.versions.0002_templates_tags_journal")
    assert first.down_revision is None
    assert second.down_revision == first.revision


def test_vendor_tag_names_are_unique_per_org(tmp_path):
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    _run_upgrade(engine)

    uqs = sa.inspect(engine).get_unique_constraints("vendor_tags")
    assert any(set(u["column_names"]) == {"org_id", "name"} for u in uqs)
