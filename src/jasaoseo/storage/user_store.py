"""SQLite-backed user profile storage."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from jasaoseo.models.user import UserProfile

DEFAULT_DB_PATH = Path.home() / ".jasaoseo" / "jasaoseo.db"

_PROFILE_COLUMNS = (
    "uid, email, display_name, subscription_status, subscription_end_date, "
    "free_monthly_used, free_monthly_reset_date, points, created_at"
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class UserStore:
    """Users table: credentials plus the credit counters the gate mutates."""

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
                CREATE TABLE IF NOT EXISTS users (
                    uid TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    salt TEXT NOT NULL,
                    display_name TEXT,
                    subscription_status TEXT NOT NULL DEFAULT 'free',
                    subscription_end_date TEXT,
                    free_monthly_used INTEGER NOT NULL DEFAULT 0,
                    free_monthly_reset_date TEXT,
                    points INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

    def create(
        self,
        email: str,
        password_hash: str,
        salt: str,
        *,
        display_name: str | None = None,
        free_monthly_reset_date: datetime | None = None,
    ) -> UserProfile:
        """Insert a new free-plan user. Raises sqlite3.IntegrityError on duplicate email."""
        profile = UserProfile(
            uid=str(uuid.uuid4()),
            email=email,
            display_name=display_name,
            free_monthly_reset_date=free_monthly_reset_date,
        )
        with self._connect() as conn:
            conn.execute(
                f"""INSERT INTO users ({_PROFILE_COLUMNS}, password_hash, salt)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (*self._profile_values(profile), password_hash, salt),
            )
        return profile

    def get(self, uid: str) -> UserProfile | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM users WHERE uid = ?", (uid,)
            ).fetchone()
        return self._row_to_profile(row) if row else None

    def get_credentials(self, email: str) -> tuple[str, str, str] | None:
        """Return (uid, password_hash, salt) for an email, or None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT uid, password_hash, salt FROM users WHERE email = ?", (email,)
            ).fetchone()
        return tuple(row) if row else None

    def save(self, profile: UserProfile) -> None:
        """Write back every mutable profile field (last write wins)."""
        with self._connect() as conn:
            conn.execute(
                """UPDATE users SET
                       display_name = ?,
                       subscription_status = ?,
                       subscription_end_date = ?,
                       free_monthly_used = ?,
                       free_monthly_reset_date = ?,
                       points = ?
                   WHERE uid = ?""",
                (
                    profile.display_name,
                    profile.subscription_status,
                    _iso(profile.subscription_end_date),
                    profile.free_monthly_used,
                    _iso(profile.free_monthly_reset_date),
                    profile.points,
                    profile.uid,
                ),
            )

    @staticmethod
    def _profile_values(profile: UserProfile) -> tuple:
        return (
            profile.uid,
            profile.email,
            profile.display_name,
            profile.subscription_status,
            _iso(profile.subscription_end_date),
            profile.free_monthly_used,
            _iso(profile.free_monthly_reset_date),
            profile.points,
            profile.created_at.isoformat(),
        )

    @staticmethod
    def _row_to_profile(row: tuple) -> UserProfile:
        return UserProfile(
            uid=row[0],
            email=row[1],
            display_name=row[2],
            subscription_status=row[3],
            subscription_end_date=_parse(row[4]),
            free_monthly_used=row[5],
            free_monthly_reset_date=_parse(row[6]),
            points=row[7],
            created_at=datetime.fromisoformat(row[8]),
        )
