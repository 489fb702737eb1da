"""Fetch a message's raw RFC-822 bytes and archive them as an .eml file."""

from __future__ import annotations

import asyncio
import base64
import binascii
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from loguru import logger

from chronomail.application.ports.mail_session import MailSession
from chronomail.domain.entities.materialized_message import MaterializedMessage
from chronomail.domain.entities.notification import iso_utc
from chronomail.domain.errors import DecodeError, FetchError, ProviderError, WriteError


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def archive_filename(message_id: str, at: datetime) -> str:
    """``<iso-timestamp with ':' -> '-'>-<message id>.eml``"""
    stamp = iso_utc(at).replace(":", "-")
    safe_id = message_id.replace("/", "_").replace("\\", "_")
    return f"{stamp}-{safe_id}.eml"


def decode_raw(message_id: str, raw: object) -> bytes:
    """Decode Gmail's base64url ``raw`` field, tolerating missing padding."""
    if not raw or not isinstance(raw, str):
        raise DecodeError(message_id, "No raw data in email response")
    padded = raw + "=" * (-len(raw) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(message_id, f"Malformed raw payload: {e}") from e


class MessageMaterializer:
    def __init__(
        self,
        session: MailSession,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.session = session
        self.clock = clock

    async def materialize(
        self,
        message_id: str,
        mailbox_owner: str,
        destination_dir: Path | str,
    ) -> MaterializedMessage:
        details = await self._get(message_id, "full")
        subject = next(
            (
                h.get("value", "")
                for h in (details.get("payload") or {}).get("headers") or []
                if h.get("name", "").lower() == "subject"
            ),
            "",
        )
        logger.debug(f"Email details for {message_id} ({mailbox_owner}): subject={subject[:50]!r}")

        raw_response = await self._get(message_id, "raw")
        raw_bytes = decode_raw(message_id, raw_response.get("raw"))

        # Filename is stamped at write time, not fetch time
        path = Path(destination_dir) / archive_filename(message_id, self.clock())
        try:
            await asyncio.to_thread(_write_bytes, path, raw_bytes)
        except OSError as e:
            raise WriteError(message_id, f"Failed to save email file {path}: {e}") from e

        logger.info(f"Email saved to {path} ({len(raw_bytes)} bytes)")
        return MaterializedMessage(message_id=message_id, archive_path=path, raw_bytes=raw_bytes)

    async def _get(self, message_id: str, fmt: str) -> dict:
        try:
            return await self.session.get_message(message_id, format=fmt)
        except ProviderError as e:
            raise FetchError(message_id, f"Failed to get email ({fmt}): {e}") from e
        except Exception as e:
            # Transport failures below the provider (resets, timeouts) surface untranslated
            raise FetchError(message_id, f"Failed to get email ({fmt}): {e!r}") from e


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
