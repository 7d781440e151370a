"""SQLite-based store for learners' best assessment scores.

One row per (user, language, level, target text). A save only lands when it
is the first for its key or beats the stored score, decided inside the
upsert so concurrent attempts cannot overwrite a better one.
Uses async-safe operations with threading.
"""

import asyncio
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from polyglai.domain.entities.assessment import AssessmentRecord
from polyglai.ports.assessment_store import AssessmentStoreError


class SQLiteAssessmentStore:
    """SQLite implementation of the AssessmentStore port.

    Thread-safe async operations using asyncio.Lock and to_thread.
    """

    def __init__(self, db_path: str = "assessments.db"):
        """Initialize assessment store.

        Args:
            db_path: Path to SQLite database file

        Database tables are created synchronously on construction.
        """
        self._db_path = Path(db_path)
        self._lock = asyncio.Lock()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA temp_store=MEMORY")
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success and is always closed."""
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS assessments (
                    user_id TEXT NOT NULL,
                    language TEXT NOT NULL,
                    level TEXT NOT NULL,
                    target_text TEXT NOT NULL,
                    transcript TEXT NOT NULL DEFAULT '',
                    score INTEGER NOT NULL,
                    timestamp TEXT NOT NULL,
                    PRIMARY KEY (user_id, language, level, target_text)
                )
            """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_assessments_user_language
                ON assessments(user_id, language)
            """
            )

    async def _run(self, func, *args):
        async with self._lock:
            try:
                return await asyncio.to_thread(func, *args)
            except sqlite3.Error as e:
                raise AssessmentStoreError(f"Assessment store failure: {e}") from e

    async def get_high_score(
        self, user_id: str, language: str, level: str, target_text: str
    ) -> AssessmentRecord | None:
        """Best stored attempt for a target text, if any."""
        return await self._run(self._get_high_score_sync, user_id, language, level, target_text)

    def _get_high_score_sync(
        self, user_id: str, language: str, level: str, target_text: str
    ) -> AssessmentRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                """
                SELECT * FROM assessments
                WHERE user_id = ? AND language = ? AND level = ? AND target_text = ?
                """,
                (user_id, language, level, target_text),
            ).fetchone()
        return self._to_record(row) if row else None

    async def save_assessment(self, record: AssessmentRecord) -> bool:
        """Store the record if it is the first for its key or a higher score.

        Returns:
            True if a row was inserted or updated
        """
        return await self._run(self._save_sync, record)

    def _save_sync(self, record: AssessmentRecord) -> bool:
        with self._connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO assessments
                    (user_id, language, level, target_text, transcript, score, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (user_id, language, level, target_text) DO UPDATE SET
                    transcript = excluded.transcript,
                    score = excluded.score,
                    timestamp = excluded.timestamp
                WHERE excluded.score > assessments.score
                """,
                (
                    record.user_id,
                    record.language,
                    record.level,
                    record.target_text,
                    record.transcript,
                    record.score,
                    record.timestamp.isoformat(),
                ),
            )
        return cursor.rowcount > 0

    async def get_assessed_texts(self, user_id: str, language: str, level: str) -> list[str]:
        """Target texts the user already has a score for."""
        return await self._run(self._get_assessed_texts_sync, user_id, language, level)

    def _get_assessed_texts_sync(self, user_id: str, language: str, level: str) -> list[str]:
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT target_text FROM assessments
                WHERE user_id = ? AND language = ? AND level = ?
                ORDER BY timestamp ASC
                """,
                (user_id, language, level),
            ).fetchall()
        return [row["target_text"] for row in rows]

    async def list_high_scores(self, user_id: str, language: str | None = None) -> list[AssessmentRecord]:
        """All stored best attempts, newest first."""
        return await self._run(self._list_sync, user_id, language)

    def _list_sync(self, user_id: str, language: str | None) -> list[AssessmentRecord]:
        query = "SELECT * FROM assessments WHERE user_id = ?"
        params: list = [user_id]
        if language:
            query += " AND language = ?"
            params.append(language)
        query += " ORDER BY timestamp DESC"
        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: sqlite3.Row) -> AssessmentRecord:
        return AssessmentRecord(
            user_id=row["user_id"],
            target_text=row["target_text"],
            transcript=row["transcript"],
            score=row["score"],
            level=row["level"],
            language=row["language"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )
