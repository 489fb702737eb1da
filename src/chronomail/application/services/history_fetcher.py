"""Resolve a push notification's history cursor into mailbox change events."""

from __future__ import annotations

from typing import Any

from loguru import logger

from chronomail.application.ports.mail_session import MailSession
from chronomail.domain.entities.change_event import ChangeCursor, ChangeEvent, normalize_history
from chronomail.domain.errors import InsufficientPermissionsError, ProviderError

HISTORY_TYPES = ["messageAdded", "labelAdded"]
PERMISSION_DENIED = 403


class HistoryFetcher:
    """Fetch change events since a cursor, with a direct-fetch fallback.

    Gmail only retains history for a limited window. When the query comes
    back empty the cursor value itself is tried as a message id; this is a
    heuristic the provider does not guarantee, so a miss there yields no
    events rather than an error.
    """

    def __init__(self, session: MailSession) -> None:
        self.session = session

    async def fetch(self, cursor: Any, mailbox_owner: str) -> list[ChangeEvent]:
        parsed = ChangeCursor.parse(cursor)
        logger.info(f"Fetching history for {mailbox_owner} from historyId {parsed}")

        try:
            await self._log_current_cursor()

            start = parsed.preceding()
            logger.debug(f"Using startHistoryId {start}")
            records = await self._list_all_history(start)

            if not records:
                logger.info("No history items found, trying to get message directly")
                records = await self._fallback_records(parsed)
        except ProviderError as e:
            if e.status == PERMISSION_DENIED:
                logger.error("Permission denied by Gmail. Please check OAuth scopes.")
                raise InsufficientPermissionsError(
                    "Insufficient permissions to access Gmail history"
                ) from e
            raise

        events = normalize_history(records)
        logger.info(f"History for {mailbox_owner}: {len(records)} records, {len(events)} events")
        return events

    async def _log_current_cursor(self) -> None:
        profile = await self.session.get_profile()
        current = profile.get("historyId")
        if current:
            logger.info(f"Current Gmail historyId: {current}")
        else:
            logger.warning("Could not get current historyId from Gmail profile")

    async def _list_all_history(self, start: ChangeCursor) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        page_token = None
        while True:
            response = await self.session.list_history(
                start_history_id=start.value,
                history_types=HISTORY_TYPES,
                page_token=page_token,
            )
            records.extend(response.get("history") or [])
            page_token = response.get("nextPageToken")
            if not page_token:
                return records

    async def _fallback_records(self, cursor: ChangeCursor) -> list[dict[str, Any]]:
        try:
            message = await self.session.get_message(str(cursor.value), format="minimal")
        except ProviderError as e:
            if e.status == PERMISSION_DENIED:
                raise
            logger.warning(f"Direct fetch of {cursor} as a message id failed: {e}")
            return []

        if not message or not message.get("id"):
            return []
        logger.info(f"Direct fetch found message {message['id']}")
        return [{"messages": [{"id": message["id"], "threadId": message.get("threadId")}]}]
