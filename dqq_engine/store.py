"""
DQQ Engine - Daily Result Store
===============================
Caches computed daily DQQ summaries in PostgreSQL.

Stored rows are a derivation, never the source of truth: they can be
dropped and recomputed from meal answers at any time. Storage failures
are logged and reported through return values, never raised.

Usage:
    from dqq_engine.store import DqqResultStore

    store = DqqResultStore.get_instance()
    store.save_daily(user_id, summary, output_hash)
"""

import json
import logging
import os
from threading import Lock
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from app.shared.hashing import short_hash
from dqq_engine.daily import DailySummary

logger = logging.getLogger("dqq_engine.store")

TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS dqq_daily_results (
        user_id VARCHAR(128) NOT NULL,
        day VARCHAR(32) NOT NULL,
        meal_count INTEGER DEFAULT 0,
        answers JSONB,
        results JSONB,
        ruleset_version VARCHAR(20),
        output_hash VARCHAR(80),
        updated_at TIMESTAMPTZ DEFAULT NOW(),
        PRIMARY KEY (user_id, day)
    );

    CREATE INDEX IF NOT EXISTS idx_dqq_daily_results_user
        ON dqq_daily_results(user_id);
"""

UPSERT_SQL = """
    INSERT INTO dqq_daily_results
        (user_id, day, meal_count, answers, results, ruleset_version, output_hash, updated_at)
    VALUES (%s, %s, %s, %s, %s, %s, %s, NOW())
    ON CONFLICT (user_id, day) DO UPDATE SET
        meal_count = EXCLUDED.meal_count,
        answers = EXCLUDED.answers,
        results = EXCLUDED.results,
        ruleset_version = EXCLUDED.ruleset_version,
        output_hash = EXCLUDED.output_hash,
        updated_at = NOW()
"""


class DqqResultStore:
    """
    Singleton store for daily DQQ summaries.
    Disabled (no-op) when DATABASE_URL is unset or DQQ_STORE_ENABLED=false.
    """

    _instance = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._db_url = os.getenv("DATABASE_URL")
        self._enabled = os.getenv("DQQ_STORE_ENABLED", "true").lower() == "true"
        self._tables_ready = False

    @classmethod
    def get_instance(cls) -> "DqqResultStore":
        """Get singleton instance."""
        return cls()

    @classmethod
    def reset(cls):
        """Reset the singleton for testing purposes."""
        cls._instance = None

    @property
    def enabled(self) -> bool:
        return self._enabled and bool(self._db_url)

    def _get_conn(self):
        if not self.enabled:
            return None
        try:
            return psycopg2.connect(self._db_url, cursor_factory=RealDictCursor)
        except psycopg2.Error as e:
            logger.error(f"DQQ store connection failed: {e}")
            return None

    def _ensure_tables(self, conn) -> bool:
        if self._tables_ready:
            return True
        try:
            with conn.cursor() as cur:
                cur.execute(TABLE_DDL)
            conn.commit()
            self._tables_ready = True
            return True
        except psycopg2.Error as e:
            logger.error(f"DQQ store table setup failed: {e}")
            conn.rollback()
            return False

    def save_daily(
        self,
        user_id: str,
        summary: DailySummary,
        output_hash: Optional[str] = None,
        ruleset_version: Optional[str] = None,
    ) -> bool:
        """Upsert one day. Returns False when disabled or on error."""
        conn = self._get_conn()
        if conn is None:
            return False
        try:
            if not self._ensure_tables(conn):
                return False
            with conn.cursor() as cur:
                cur.execute(UPSERT_SQL, (
                    user_id,
                    summary.day,
                    summary.meal_count,
                    json.dumps(summary.answers),
                    json.dumps(summary.results),
                    ruleset_version,
                    output_hash,
                ))
            conn.commit()
            logger.debug(f"Saved DQQ day {user_id}/{summary.day} ({short_hash(output_hash or '') or 'no hash'})")
            return True
        except psycopg2.Error as e:
            logger.error(f"DQQ store save failed for {user_id}/{summary.day}: {e}")
            conn.rollback()
            return False
        finally:
            conn.close()

    def load_daily(self, user_id: str) -> List[Dict[str, Any]]:
        """Stored days for a user, oldest first. Empty when disabled or on error."""
        conn = self._get_conn()
        if conn is None:
            return []
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT user_id, day, meal_count, answers, results, ruleset_version, output_hash
                    FROM dqq_daily_results
                    WHERE user_id = %s
                    ORDER BY day ASC
                    """,
                    (user_id,),
                )
                return [dict(row) for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"DQQ store load failed for {user_id}: {e}")
            return []
        finally:
            conn.close()

    def ping(self) -> Dict[str, Any]:
        """Connectivity check for the health endpoint."""
        if not self.enabled:
            return {"status": "disabled"}
        conn = self._get_conn()
        if conn is None:
            return {"status": "error", "error": "Connection failed"}
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
            return {"status": "healthy"}
        except psycopg2.Error as e:
            return {"status": "error", "error": str(e)}
        finally:
            conn.close()
