from __future__ import annotations

from typing import List

from luxelens.config import AppConfig, SQLiteSettings, SupabaseSettings
from luxelens.session import Session

from .interfaces import HistoryRecord, HistoryRecorderProtocol
from .sqlite import SQLiteHistoryRecorder
from .supabase import SupabaseHistoryRecorder

__all__ = [
    "HistoryRecord",
    "HistoryRecorderProtocol",
    "NullHistoryRecorder",
    "SQLiteHistoryRecorder",
    "SupabaseHistoryRecorder",
    "create_history_recorder",
]


class NullHistoryRecorder(HistoryRecorderProtocol):
    """Degraded mode: nothing is stored and the history is always empty."""

    def record(self, record: HistoryRecord, session: Session) -> None:
        return None

    def list_records(self, session: Session, limit: int = 50) -> List[HistoryRecord]:
        return []


def create_history_recorder(config: AppConfig) -> HistoryRecorderProtocol:
    settings = config.history
    if isinstance(settings, SupabaseSettings):
        return SupabaseHistoryRecorder(settings)
    if isinstance(settings, SQLiteSettings):
        return SQLiteHistoryRecorder(settings.database)
    return NullHistoryRecorder()
