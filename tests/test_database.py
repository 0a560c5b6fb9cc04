"""Tests for the database layer: schema upgrades and the session scope."""

import pytest
from sqlalchemy import inspect, text

from focusly.database.db import configure_engine, get_engine, get_session, init_db
from focusly.database.models import FocusSession


class TestSchemaUpgrade:

    def test_missing_nullable_column_added(self):
        configure_engine("sqlite:///:memory:")
        with get_engine().connect() as conn:
            conn.execute(text(
                "CREATE TABLE focus_sessions ("
                "id INTEGER PRIMARY KEY, date DATETIME NOT NULL, "
                "duration FLOAT NOT NULL, break_duration FLOAT NOT NULL, "
                "cycles_completed INTEGER NOT NULL, was_completed BOOLEAN NOT NULL)"
            ))
            conn.commit()

        init_db()

        columns = {c["name"] for c in inspect(get_engine()).get_columns("focus_sessions")}
        assert "task_label" in columns

    def test_init_db_is_idempotent(self):
        init_db()
        init_db()
        assert "focus_sessions" in inspect(get_engine()).get_table_names()


class TestGetSession:

    def test_commits_on_success(self):
        with get_session() as db:
            db.add(FocusSession(duration=60))
        with get_session() as db:
            assert db.query(FocusSession).count() == 1

    def test_rolls_back_on_error(self):
        with pytest.raises(RuntimeError):
            with get_session() as db:
                db.add(FocusSession(duration=60))
                db.flush()
                raise RuntimeError("boom")
        with get_session() as db:
            assert db.query(FocusSession).count() == 0
