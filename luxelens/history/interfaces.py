from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Protocol

from luxelens.session import Session


@dataclass(frozen=True)
class HistoryRecord:
    user_id: str
    image_url: str
    mode: str
    aspect_ratio: str | None
    prompt: str
    created_at: str | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "image_url": self.image_url,
            "mode": self.mode,
            "aspect_ratio": self.aspect_ratio,
            "prompt": self.prompt,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "HistoryRecord":
        return cls(
            user_id=str(row["user_id"]),
            image_url=str(row["image_url"]),
            mode=str(row.get("mode") or ""),
            aspect_ratio=row.get("aspect_ratio"),
            prompt=str(row.get("prompt") or ""),
            created_at=row.get("created_at"),
        )


class HistoryRecorderProtocol(Protocol):
    def record(self, record: HistoryRecord, session: Session) -> None:
        """Persist one successful generation owned by ``session``'s user."""

    def list_records(self, session: Session, limit: int = 50) -> List[HistoryRecord]:
        """Return the session owner's records, newest first."""
