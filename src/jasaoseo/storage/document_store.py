"""SQLite-backed per-user document snapshots (last write wins)."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from jasaoseo.errors import DocumentNotFoundError
from jasaoseo.models.document import DEFAULT_TITLE, SavedDocument
from jasaoseo.models.inputs import PipelineInput

DEFAULT_DB_PATH = Path.home() / ".jasaoseo" / "jasaoseo.db"

_COLUMNS = (
    "id, title, job_role, job_posting, user_info, questions, initial_draft, "
    "final_output, analysis_report, created_at, updated_at"
)

_INPUT_FIELDS = ("job_role", "job_posting", "user_info", "questions", "initial_draft")


class DocumentStore:
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
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    job_role TEXT NOT NULL DEFAULT '',
                    job_posting TEXT NOT NULL DEFAULT '',
                    user_info TEXT NOT NULL DEFAULT '',
                    questions TEXT NOT NULL DEFAULT '',
                    initial_draft TEXT NOT NULL DEFAULT '',
                    final_output TEXT NOT NULL DEFAULT '',
                    analysis_report TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_user ON documents (user_id, updated_at)"
            )

    def save(
        self,
        user_id: str,
        title: str,
        inputs: PipelineInput,
        final_output: str,
        analysis_report: str,
    ) -> str:
        """Store a new snapshot and return its id."""
        now = datetime.now()
        doc = SavedDocument(
            id=str(uuid.uuid4()),
            title=title.strip() or DEFAULT_TITLE,
            final_output=final_output,
            analysis_report=analysis_report,
            created_at=now,
            updated_at=now,
            **{name: getattr(inputs, name) for name in _INPUT_FIELDS},
        )
        with self._connect() as conn:
            conn.execute(
                f"""INSERT INTO documents (user_id, {_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    user_id,
                    doc.id,
                    doc.title,
                    doc.job_role,
                    doc.job_posting,
                    doc.user_info,
                    doc.questions,
                    doc.initial_draft,
                    doc.final_output,
                    doc.analysis_report,
                    doc.created_at.isoformat(),
                    doc.updated_at.isoformat(),
                ),
            )
        return doc.id

    def update(
        self,
        user_id: str,
        document_id: str,
        *,
        title: str | None = None,
        inputs: PipelineInput | None = None,
        final_output: str | None = None,
        analysis_report: str | None = None,
    ) -> None:
        """Overwrite the given fields; empty values leave the stored ones alone."""
        changes: dict[str, str] = {"updated_at": datetime.now().isoformat()}
        if title:
            changes["title"] = title
        if inputs is not None:
            changes.update({name: getattr(inputs, name) for name in _INPUT_FIELDS})
        if final_output:
            changes["final_output"] = final_output
        if analysis_report:
            changes["analysis_report"] = analysis_report

        assignments = ", ".join(f"{column} = ?" for column in changes)
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE documents SET {assignments} WHERE id = ? AND user_id = ?",
                (*changes.values(), document_id, user_id),
            )
            if cursor.rowcount == 0:
                raise DocumentNotFoundError(user_id, document_id)

    def delete(self, user_id: str, document_id: str) -> None:
        """Delete immediately; there is no trash."""
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM documents WHERE id = ? AND user_id = ?", (document_id, user_id)
            )

    def get(self, user_id: str, document_id: str) -> SavedDocument | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM documents WHERE id = ? AND user_id = ?",
                (document_id, user_id),
            ).fetchone()
        return self._row_to_document(row) if row else None

    def list_documents(self, user_id: str) -> list[SavedDocument]:
        """All of a user's documents, most recently updated first."""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM documents WHERE user_id = ? ORDER BY updated_at DESC",
                (user_id,),
            ).fetchall()
        return [self._row_to_document(row) for row in rows]

    @staticmethod
    def _row_to_document(row: tuple) -> SavedDocument:
        return SavedDocument(
            id=row[0],
            title=row[1] or DEFAULT_TITLE,
            job_role=row[2],
            job_posting=row[3],
            user_info=row[4],
            questions=row[5],
            initial_draft=row[6],
            final_output=row[7],
            analysis_report=row[8],
            created_at=datetime.fromisoformat(row[9]),
            updated_at=datetime.fromisoformat(row[10]),
        )
