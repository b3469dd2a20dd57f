"""SQLite-backed usage log storage."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from jasaoseo.logging.models import UsageLog

DEFAULT_DB_PATH = Path.home() / ".jasaoseo" / "usage.db"


class UsageStore:
    """SQLite-backed store for pipeline usage logs with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS usage_logs (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    variant TEXT,
                    job_role TEXT,
                    stage_count INTEGER NOT NULL DEFAULT 0,
                    elapsed_seconds REAL NOT NULL DEFAULT 0.0,
                    total_input_tokens INTEGER NOT NULL DEFAULT 0,
                    total_output_tokens INTEGER NOT NULL DEFAULT 0,
                    estimated_cost_usd REAL NOT NULL DEFAULT 0.0,
                    credit_type TEXT,
                    success INTEGER NOT NULL DEFAULT 1,
                    error_message TEXT
                )
            """)

    def save_log(self, log: UsageLog) -> None:
        """Persist a usage log entry."""
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO usage_logs
                   (id, user_id, timestamp, mode, variant, job_role, stage_count,
                    elapsed_seconds, total_input_tokens, total_output_tokens,
                    estimated_cost_usd, credit_type, success, error_message)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    log.id,
                    log.user_id,
                    log.timestamp.isoformat(),
                    log.mode,
                    log.variant,
                    log.job_role,
                    log.stage_count,
                    log.elapsed_seconds,
                    log.total_input_tokens,
                    log.total_output_tokens,
                    log.estimated_cost_usd,
                    log.credit_type,
                    1 if log.success else 0,
                    log.error_message,
                ),
            )

    def get_logs(
        self,
        user_id: str | None = None,
        limit: int = 50,
    ) -> list[UsageLog]:
        """Retrieve usage logs, newest first, optionally for one user."""
        with self._connect() as conn:
            if user_id is not None:
                rows = conn.execute(
                    "SELECT * FROM usage_logs WHERE user_id = ? ORDER BY timestamp DESC LIMIT ?",
                    (user_id, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM usage_logs ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_monthly_stats(self, now: datetime | None = None) -> dict:
        """Aggregate runs, tokens and cost for the current calendar month."""
        now = now or datetime.now()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        with self._connect() as conn:
            row = conn.execute(
                """SELECT
                       COUNT(*),
                       SUM(total_input_tokens),
                       SUM(total_output_tokens),
                       SUM(estimated_cost_usd),
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END),
                       SUM(CASE WHEN mode = 'revise' THEN 1 ELSE 0 END)
                   FROM usage_logs
                   WHERE timestamp >= ?""",
                (month_start.isoformat(),),
            ).fetchone()
        return {
            "total_runs": row[0] or 0,
            "total_input_tokens": row[1] or 0,
            "total_output_tokens": row[2] or 0,
            "total_cost_usd": row[3] or 0.0,
            "success_rate": (row[4] / row[0] * 100) if row[0] else 0.0,
            "revisions": row[5] or 0,
            "month": now.strftime("%Y-%m"),
        }

    @staticmethod
    def _row_to_log(row: tuple) -> UsageLog:
        return UsageLog(
            id=row[0],
            user_id=row[1],
            timestamp=datetime.fromisoformat(row[2]),
            mode=row[3],
            variant=row[4],
            job_role=row[5],
            stage_count=row[6],
            elapsed_seconds=row[7],
            total_input_tokens=row[8],
            total_output_tokens=row[9],
            estimated_cost_usd=row[10],
            credit_type=row[11],
            success=bool(row[12]),
            error_message=row[13],
        )
