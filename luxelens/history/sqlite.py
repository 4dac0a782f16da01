from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List

from luxelens.errors import PersistenceFailure
from luxelens.session import Session

from .interfaces import HistoryRecord, HistoryRecorderProtocol

_SCHEMA = """
CREATE TABLE IF NOT EXISTS generations (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at   TEXT NOT NULL,
    user_id      TEXT NOT NULL,
    image_url    TEXT NOT NULL,
    mode         TEXT,
    aspect_ratio TEXT,
    prompt       TEXT
);
CREATE INDEX IF NOT EXISTS idx_generations_user ON generations(user_id, created_at);
"""


@dataclass
class SQLiteHistoryRecorder(HistoryRecorderProtocol):
    """Local history store for development; owner filtering is done in the queries."""

    db_path: Path

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.transaction() as conn:
            conn.executescript(_SCHEMA)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def record(self, record: HistoryRecord, session: Session) -> None:
        if record.user_id != session.user_id:
            raise PersistenceFailure("history records can only be written by their owner")
        created_at = record.created_at or datetime.now(timezone.utc).isoformat()
        try:
            with self.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO generations(created_at, user_id, image_url, mode, aspect_ratio, prompt)
                    VALUES(?,?,?,?,?,?)
                    """,
                    (
                        created_at,
                        record.user_id,
                        record.image_url,
                        record.mode,
                        record.aspect_ratio,
                        record.prompt,
                    ),
                )
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"failed to store history record: {exc}") from exc

    def list_records(self, session: Session, limit: int = 50) -> List[HistoryRecord]:
        try:
            with self.transaction() as conn:
                rows = conn.execute(
                    "SELECT created_at, user_id, image_url, mode, aspect_ratio, prompt "
                    "FROM generations WHERE user_id=? ORDER BY created_at DESC, id DESC LIMIT ?",
                    (session.user_id, int(limit)),
                ).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"failed to read history: {exc}") from exc
        return [HistoryRecord.from_row(dict(row)) for row in rows]
