"""Notification ledger backed by a single JSON array file."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from loguru import logger

from chronomail.domain.entities.notification import Notification
from chronomail.domain.errors import StorageError


class JsonFileNotificationLedger:
    """Append-only log of every push delivery, stored as one JSON array.

    Each append reads the whole file and rewrites it. Appends from this
    process are serialized by a lock; separate processes sharing the file
    can still lose updates.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def ensure_exists(self) -> None:
        """Create an empty ledger if none exists yet."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.write_text("[]", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not initialize ledger {self.path}: {e}") from e

    async def append(self, notification: Notification) -> None:
        async with self._lock:
            await asyncio.to_thread(self._append_sync, notification.to_record())
        logger.info(f"Notification {notification.id} appended to {self.path}")

    async def read_all(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._read_strict)

    def _append_sync(self, record: dict[str, Any]) -> None:
        records = self._read_tolerant()
        records.append(record)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Could not write ledger {self.path}: {e}") from e

    def _read_bytes(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Could not read ledger {self.path}: {e}") from e

    def _read_tolerant(self) -> list[dict[str, Any]]:
        data = self._read_bytes()
        if data is None:
            return []
        try:
            records = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ledger {self.path} is corrupted ({e}), starting with an empty ledger")
            return []
        if not isinstance(records, list):
            logger.warning(f"Ledger {self.path} does not hold a JSON array, starting with an empty ledger")
            return []
        return records

    def _read_strict(self) -> list[dict[str, Any]]:
        data = self._read_bytes()
        if data is None:
            return []
        try:
            records = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Ledger {self.path} is corrupted: {e}") from e
        if not isinstance(records, list):
            raise StorageError(f"Ledger {self.path} does not hold a JSON array")
        return records
