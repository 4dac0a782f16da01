"""History store backed by a Supabase ``generations`` table (PostgREST).

Expected table, with row level security limiting each user to their own rows::

    create table generations (
      id uuid default gen_random_uuid() primary key,
      created_at timestamp with time zone default now(),
      user_id uuid references auth.users(id),
      image_url text not null,
      mode text,
      aspect_ratio text,
      prompt text
    );
    alter table generations enable row level security;
    create policy "Users can view own generations" on generations
      for select using (auth.uid() = user_id);
    create policy "Users can insert own generations" on generations
      for insert with check (auth.uid() = user_id);
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import requests

from luxelens.config import SupabaseSettings
from luxelens.errors import PersistenceFailure
from luxelens.session import Session

from .interfaces import HistoryRecord, HistoryRecorderProtocol

TABLE = "generations"


@dataclass
class SupabaseHistoryRecorder(HistoryRecorderProtocol):
    settings: SupabaseSettings

    @property
    def endpoint(self) -> str:
        return f"{self.settings.url}/rest/v1/{TABLE}"

    def _headers(self, session: Session) -> dict[str, str]:
        token = session.access_token or self.settings.anon_key
        return {
            "apikey": self.settings.anon_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def record(self, record: HistoryRecord, session: Session) -> None:
        if record.user_id != session.user_id:
            raise PersistenceFailure("history records can only be written by their owner")
        headers = self._headers(session)
        headers["Prefer"] = "return=minimal"
        try:
            response = requests.post(
                self.endpoint,
                json=record.to_row(),
                headers=headers,
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise PersistenceFailure(f"failed to store history record: {exc}") from exc

    def list_records(self, session: Session, limit: int = 50) -> List[HistoryRecord]:
        params = {
            "select": "*",
            "user_id": f"eq.{session.user_id}",
            "order": "created_at.desc",
            "limit": str(int(limit)),
        }
        try:
            response = requests.get(
                self.endpoint,
                params=params,
                headers=self._headers(session),
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as exc:
            raise PersistenceFailure(f"failed to read history: {exc}") from exc
        except ValueError as exc:
            raise PersistenceFailure("invalid JSON payload from history store") from exc
        if not isinstance(rows, list):
            raise PersistenceFailure("unexpected history payload")
        return [HistoryRecord.from_row(row) for row in rows if isinstance(row, dict)]
