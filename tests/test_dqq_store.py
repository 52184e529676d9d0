"""
DQQ Engine - Result Store Tests
===============================
psycopg2 is mocked; no database is needed.
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).parent.parent))

import psycopg2

from dqq_engine.daily import DailySummary
from dqq_engine.store import DqqResultStore


@pytest.fixture(autouse=True)
def reset_store():
    DqqResultStore.reset()
    yield
    DqqResultStore.reset()


@pytest.fixture
def summary():
    return DailySummary(
        day="2025-04-10",
        meal_count=2,
        answers={"DQQ1": True},
        results={"fgds": 1, "mddw": 0},
        meal_ids=["m1", "m2"],
    )


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/dqq_test")
    monkeypatch.setenv("DQQ_STORE_ENABLED", "true")


class TestDisabledStore:

    def test_no_database_url(self, monkeypatch, summary):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        store = DqqResultStore.get_instance()
        assert not store.enabled
        assert store.save_daily("u1", summary) is False
        assert store.load_daily("u1") == []
        assert store.ping() == {"status": "disabled"}

    def test_disabled_by_flag(self, monkeypatch, summary):
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/dqq_test")
        monkeypatch.setenv("DQQ_STORE_ENABLED", "false")
        with patch("dqq_engine.store.psycopg2.connect") as connect:
            assert DqqResultStore.get_instance().save_daily("u1", summary) is False
            connect.assert_not_called()

    def test_singleton(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert DqqResultStore.get_instance() is DqqResultStore.get_instance()


class TestConfiguredStore:

    def test_save_daily_upserts(self, configured, summary):
        conn = MagicMock()
        with patch("dqq_engine.store.psycopg2.connect", return_value=conn):
            saved = DqqResultStore.get_instance().save_daily("u1", summary, "sha256:abc", "dqq_v1.0")

        assert saved is True
        cur = conn.cursor.return_value.__enter__.return_value
        # table setup + upsert
        assert cur.execute.call_count == 2
        params = cur.execute.call_args_list[1][0][1]
        assert params[0] == "u1"
        assert params[1] == "2025-04-10"
        assert params[2] == 2
        assert params[5] == "dqq_v1.0"
        assert params[6] == "sha256:abc"
        conn.close.assert_called_once()

    def test_tables_created_once(self, configured, summary):
        conn = MagicMock()
        with patch("dqq_engine.store.psycopg2.connect", return_value=conn):
            store = DqqResultStore.get_instance()
            store.save_daily("u1", summary)
            store.save_daily("u1", summary)
        cur = conn.cursor.return_value.__enter__.return_value
        assert cur.execute.call_count == 3

    def test_connection_failure_returns_false(self, configured, summary):
        with patch("dqq_engine.store.psycopg2.connect", side_effect=psycopg2.OperationalError("down")):
            store = DqqResultStore.get_instance()
            assert store.save_daily("u1", summary) is False
            assert store.load_daily("u1") == []
            assert store.ping()["status"] == "error"

    def test_sql_error_rolls_back(self, configured, summary):
        conn = MagicMock()
        cur = conn.cursor.return_value.__enter__.return_value
        cur.execute.side_effect = [None, psycopg2.DatabaseError("bad")]
        with patch("dqq_engine.store.psycopg2.connect", return_value=conn):
            assert DqqResultStore.get_instance().save_daily("u1", summary) is False
        conn.rollback.assert_called_once()
        conn.close.assert_called_once()

    def test_load_daily(self, configured):
        conn = MagicMock()
        cur = conn.cursor.return_value.__enter__.return_value
        cur.fetchall.return_value = [{"user_id": "u1", "day": "2025-04-10", "meal_count": 2}]
        with patch("dqq_engine.store.psycopg2.connect", return_value=conn):
            rows = DqqResultStore.get_instance().load_daily("u1")
        assert rows == [{"user_id": "u1", "day": "2025-04-10", "meal_count": 2}]
        assert cur.execute.call_args[0][1] == ("u1",)

    def test_ping_healthy(self, configured):
        with patch("dqq_engine.store.psycopg2.connect", return_value=MagicMock()):
            assert DqqResultStore.get_instance().ping() == {"status": "healthy"}
