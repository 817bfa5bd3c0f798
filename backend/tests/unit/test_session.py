"""
Unit tests for engine creation and the atomic transaction helper.
"""

import logging
import os
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from clinic.db import session as db_session_module
from clinic.db.session import atomic, get_engine


def test_engine_uses_sqlite_in_memory():
    """Ensure tests are executing against the in-memory SQLite engine.

    This guards against accidental Postgres connections in CI when DATABASE_URL
    might be set globally before pytest initializes the test environment.
    """
    assert os.environ.get("TESTING") == "true"

    engine = get_engine()

    assert engine.dialect.name == "sqlite"
    assert engine.url.database in (None, "", ":memory:")


def test_engine_is_cached_until_url_changes(monkeypatch, tmp_path):
    first = get_engine()
    assert get_engine() is first

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'other.db'}")
    try:
        other = get_engine()
        assert other is not first
        assert other.url.database.endswith("other.db")
    finally:
        monkeypatch.undo()
        get_engine()


def test_session_local_binds_current_engine():
    session = db_session_module.SessionLocal()
    try:
        assert session.get_bind() is get_engine()
    finally:
        session.close()


class TestAtomic:
    def test_commits_on_success(self):
        session = Mock()

        with atomic(session) as active:
            active.add("row")

        session.add.assert_called_once_with("row")
        session.commit.assert_called_once()
        session.rollback.assert_not_called()

    def test_commits_on_early_return(self):
        session = Mock()

        def work():
            with atomic(session):
                return "done"

        assert work() == "done"
        session.commit.assert_called_once()

    def test_rolls_back_and_logs_storage_failure(self, caplog):
        session = Mock()

        with caplog.at_level(logging.ERROR, logger="clinic.db.session"):
            with pytest.raises(IntegrityError):
                with atomic(session):
                    raise IntegrityError("INSERT", {}, Exception("duplicate key"))

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        record = caplog.records[-1]
        assert record.message == "Transaction rolled back after storage failure"
        assert record.context["error_type"] == "IntegrityError"

    def test_rolls_back_failed_commit(self):
        session = Mock()
        session.commit.side_effect = SQLAlchemyError("connection lost")

        with pytest.raises(SQLAlchemyError, match="connection lost"):
            with atomic(session):
                pass

        session.rollback.assert_called_once()

    def test_rolls_back_other_exceptions_without_wrapping(self):
        session = Mock()

        with pytest.raises(KeyError):
            with atomic(session):
                raise KeyError("missing")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()


def test_get_db_yields_and_closes_session():
    generator = db_session_module.get_db()
    session = next(generator)
    assert session.get_bind() is get_engine()

    with patch.object(session, "close", wraps=session.close) as close:
        generator.close()

    close.assert_called_once()


def test_testing_flag_refuses_non_sqlite_engine(monkeypatch):
    engine = get_engine()
    monkeypatch.setenv("DATABASE_URL", "postgresql://clinic:secret@db/clinic")

    with pytest.raises(RuntimeError, match="tests must run against SQLite"):
        get_engine()

    monkeypatch.undo()
    assert get_engine() is engine
