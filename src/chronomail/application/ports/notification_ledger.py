from __future__ import annotations
from typing import Any, Protocol
from chronomail.domain.entities.notification import Notification


class NotificationLedger(Protocol):
    async def append(self, notification: Notification) -> None: ...
    async def read_all(self) -> list[dict[str, Any]]: ...
