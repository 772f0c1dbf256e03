"""Tests for the Alembic migration path used by init_db."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def _upgrade(database_url: str) -> None:
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(cfg, "head")


def test_upgrade_creates_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    _upgrade(url)

    engine = create_engine(url)
    inspector = inspect(engine)
    assert {"users", "tasks"} <= set(inspector.get_table_names())
    assert "uq_task_parent_due_date" in {c["name"] for c in inspector.get_unique_constraints("tasks")}
    engine.dispose()


def test_upgrade_keeps_application_loggers_enabled(tmp_path):
    import taskdeck.recurrence.engine  # noqa: F401
    import taskdeck.database.repository  # noqa: F401

    _upgrade(f"sqlite:///{tmp_path / 'migrated.db'}")

    assert logging.getLogger("taskdeck.recurrence.engine").disabled is False
    assert logging.getLogger("taskdeck.database.repository").disabled is False
