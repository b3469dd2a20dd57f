"""Tests for UsageLog model and UsageStore."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from jasaoseo.logging.models import UsageLog
from jasaoseo.logging.usage_store import UsageStore


# --- UsageLog model tests ---


class TestUsageLog:
    def test_create_minimal(self):
        log = UsageLog(mode="generate")
        assert log.mode == "generate"
        assert log.user_id == "anonymous"
        assert log.success is True
        assert log.stage_count == 0
        assert log.id  # uuid auto-generated

    def test_unique_ids(self):
        assert UsageLog(mode="generate").id != UsageLog(mode="generate").id

    def test_timestamp_auto(self):
        before = datetime.now()
        log = UsageLog(mode="revise")
        after = datetime.now()
        assert before <= log.timestamp <= after

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            UsageLog(mode="summarize")


# --- UsageStore tests ---


@pytest.fixture
def store(tmp_path: Path) -> UsageStore:
    return UsageStore(db_path=tmp_path / "test_usage.db")


class TestUsageStore:
    def test_save_and_get(self, store: UsageStore):
        log = UsageLog(mode="generate", user_id="u1", variant="five_step", job_role="it")
        store.save_log(log)
        logs = store.get_logs()
        assert len(logs) == 1
        assert logs[0].id == log.id
        assert logs[0].job_role == "it"

    def test_get_by_user_id(self, store: UsageStore):
        store.save_log(UsageLog(mode="generate", user_id="u1"))
        store.save_log(UsageLog(mode="generate", user_id="u2"))
        store.save_log(UsageLog(mode="revise", user_id="u1"))

        assert len(store.get_logs(user_id="u1")) == 2
        assert len(store.get_logs(user_id="u2")) == 1

    def test_get_logs_limit(self, store: UsageStore):
        for _ in range(10):
            store.save_log(UsageLog(mode="generate"))
        assert len(store.get_logs(limit=3)) == 3

    def test_monthly_stats(self, store: UsageStore):
        store.save_log(
            UsageLog(
                mode="generate",
                total_input_tokens=1000,
                total_output_tokens=500,
                estimated_cost_usd=0.03,
            )
        )
        store.save_log(
            UsageLog(
                mode="revise",
                total_input_tokens=2000,
                total_output_tokens=1000,
                estimated_cost_usd=0.05,
                success=False,
                error_message="editor 단계 실패: timeout",
            )
        )
        stats = store.get_monthly_stats()
        assert stats["total_runs"] == 2
        assert stats["total_input_tokens"] == 3000
        assert stats["total_output_tokens"] == 1500
        assert stats["total_cost_usd"] == pytest.approx(0.08)
        assert stats["success_rate"] == 50.0
        assert stats["revisions"] == 1
        assert stats["month"] == datetime.now().strftime("%Y-%m")

    def test_monthly_stats_excludes_previous_month(self, store: UsageStore):
        store.save_log(UsageLog(mode="generate", timestamp=datetime(2025, 2, 28, 23, 59)))
        store.save_log(UsageLog(mode="generate", timestamp=datetime(2025, 3, 1, 0, 1)))
        stats = store.get_monthly_stats(now=datetime(2025, 3, 15))
        assert stats["total_runs"] == 1

    def test_monthly_stats_empty(self, store: UsageStore):
        stats = store.get_monthly_stats()
        assert stats["total_runs"] == 0
        assert stats["total_cost_usd"] == 0.0
        assert stats["success_rate"] == 0.0

    def test_roundtrip_preserves_fields(self, store: UsageStore):
        log = UsageLog(
            mode="generate",
            user_id="u-rt",
            variant="four_step",
            job_role="marketing",
            stage_count=4,
            elapsed_seconds=120.5,
            total_input_tokens=8000,
            total_output_tokens=4000,
            estimated_cost_usd=0.12,
            credit_type="points",
            success=False,
            error_message="analyzer 단계 실패",
        )
        store.save_log(log)
        retrieved = store.get_logs()[0]
        assert retrieved.variant == "four_step"
        assert retrieved.stage_count == 4
        assert retrieved.elapsed_seconds == log.elapsed_seconds
        assert retrieved.estimated_cost_usd == pytest.approx(0.12)
        assert retrieved.credit_type == "points"
        assert retrieved.success is False
        assert retrieved.error_message == "analyzer 단계 실패"

    def test_wal_mode(self, tmp_path: Path):
        import sqlite3

        UsageStore(db_path=tmp_path / "wal_test.db")
        conn = sqlite3.connect(str(tmp_path / "wal_test.db"))
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
        conn.close()
        assert mode == "wal"
