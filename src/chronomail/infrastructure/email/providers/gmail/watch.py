"""Register and stop the Gmail push subscription."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from loguru import logger

from chronomail.domain.entities.notification import iso_utc
from chronomail.infrastructure.email.providers.gmail.client import GmailSession

# Gmail expires a watch after about a week unless it is renewed
WATCH_LIFETIME = timedelta(days=7)


def expiration_info(now: datetime | None = None) -> dict[str, str]:
    now = now or datetime.now(timezone.utc)
    return {
        "message": "This watch will expire in approximately 7 days and needs to be renewed",
        "expiresOn": iso_utc(now + WATCH_LIFETIME),
    }


async def setup_watch(session: GmailSession, topic_name: str, label_ids: list[str]) -> dict[str, Any]:
    response = await session.watch(topic_name, label_ids)
    logger.info(
        f"Gmail watch set on {topic_name} for {label_ids}: "
        f"historyId={response.get('historyId')} expiration={response.get('expiration')}"
    )
    return response


async def stop_watch(session: GmailSession) -> None:
    await session.stop()
    logger.info("Stopped watching mailbox")
