from __future__ import annotations

import base64
from pathlib import Path
import sys
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from luxelens.history import HistoryRecord
from luxelens.logging_utils import RunLogger
from luxelens.session import Session

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16 + b"\xff\xd9"


class RecordingRecorder:
    """In-memory history recorder that remembers every write."""

    def __init__(self) -> None:
        self.records: List[HistoryRecord] = []

    def record(self, record: HistoryRecord, session: Session) -> None:
        self.records.append(record)

    def list_records(self, session: Session, limit: int = 50) -> List[HistoryRecord]:
        owned = [record for record in self.records if record.user_id == session.user_id]
        return list(reversed(owned))[:limit]


@pytest.fixture()
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture()
def session() -> Session:
    return Session(user_id="user-123", email="ana@example.com", access_token="token-abc")


@pytest.fixture()
def recorder() -> RecordingRecorder:
    return RecordingRecorder()


@pytest.fixture()
def quiet_logger() -> RunLogger:
    return RunLogger(console=None, level="ERROR")
