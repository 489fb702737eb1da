from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


def iso_utc(dt: datetime) -> str:
    """Millisecond ISO-8601 with a ``Z`` suffix, e.g. ``2026-10-19T08:15:02.123Z``."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class Notification:
    id: str
    payload: Any
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_push(cls, payload: Any, message_id: Optional[str] = None) -> "Notification":
        # Pub/Sub normally assigns messageId; fall back to a local one
        return cls(id=message_id or f"msg-{int(time.time() * 1000)}", payload=payload)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": iso_utc(self.received_at),
            "data": self.payload,
        }
