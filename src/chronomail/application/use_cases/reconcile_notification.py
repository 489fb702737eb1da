"""Reconcile a Gmail push notification into archived messages."""

from __future__ import annotations

import base64
import binascii
import json
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from chronomail.application.services.history_fetcher import HistoryFetcher
from chronomail.application.services.message_materializer import MessageMaterializer
from chronomail.domain.entities.change_event import extract_message_ids
from chronomail.domain.entities.materialized_message import MaterializedMessage
from chronomail.domain.entities.notification import Notification
from chronomail.domain.errors import ChronomailError, MalformedPayloadError
from chronomail.domain.models import ProcessingOutcome


class ReconcileState(str, Enum):
    IDLE = "idle"
    DECODING = "decoding"
    FETCHING_HISTORY = "fetching_history"
    EXTRACTING_IDENTIFIERS = "extracting_identifiers"
    MATERIALIZING = "materializing"
    DONE = "done"
    ABORTED = "aborted"


def decode_push_data(data: Optional[str]) -> Any:
    """Decode a Pub/Sub ``message.data`` field (base64 JSON).

    Absent data decodes to an empty object.
    """
    if data is None or data == "":
        return {}
    if not isinstance(data, str):
        raise MalformedPayloadError(f"message.data must be a string, got {type(data).__name__}")
    try:
        normalized = data.strip().replace("-", "+").replace("_", "/")
        normalized += "=" * (-len(normalized) % 4)
        text = base64.b64decode(normalized, validate=True).decode("utf-8")
        return json.loads(text)
    except (binascii.Error, ValueError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise MalformedPayloadError(f"Invalid message data format: {e}") from e


def mailbox_change(payload: Any) -> Optional[tuple[Any, str]]:
    """Return ``(historyId, emailAddress)`` if the payload denotes a mailbox change."""
    if not isinstance(payload, dict):
        return None
    history_id = payload.get("historyId")
    email_address = payload.get("emailAddress")
    if history_id in (None, "") or not email_address:
        return None
    return history_id, str(email_address)


def _enter(notification: Notification, state: ReconcileState) -> None:
    # State belongs to one run; the use case is shared by concurrent deliveries.
    logger.debug(f"Notification {notification.id}: {state.value}")


class ReconcileNotificationUseCase:
    """Drive one notification through the reconciliation state machine.

    Flow:
    1. Check the payload names a mailbox and a history cursor (else IGNORED)
    2. Fetch history since the cursor (failure -> ABORTED)
    3. Extract distinct inbox message ids from all event shapes
    4. Materialize each id in turn; per-message failures are logged and skipped

    The run never retries and never rolls back files already written.
    """

    def __init__(
        self,
        fetcher: HistoryFetcher,
        materializer: MessageMaterializer,
        archive_dir: Path | str,
    ) -> None:
        self.fetcher = fetcher
        self.materializer = materializer
        self.archive_dir = Path(archive_dir)

    async def run(self, notification: Notification) -> ProcessingOutcome:
        _enter(notification, ReconcileState.DECODING)
        change = mailbox_change(notification.payload)
        if change is None:
            logger.info(f"Notification {notification.id} is not a mailbox change, ignoring")
            _enter(notification, ReconcileState.DONE)
            return ProcessingOutcome.ignored("not a mailbox change notification")

        history_id, mailbox_owner = change
        logger.info(f"Processing email notification for {mailbox_owner} at historyId {history_id}")

        _enter(notification, ReconcileState.FETCHING_HISTORY)
        try:
            events = await self.fetcher.fetch(history_id, mailbox_owner)
        except Exception as e:
            logger.error(f"Failed to get email history for notification {notification.id}: {e}")
            _enter(notification, ReconcileState.ABORTED)
            return ProcessingOutcome.aborted(str(e))

        _enter(notification, ReconcileState.EXTRACTING_IDENTIFIERS)
        message_ids = extract_message_ids(events)
        logger.info(f"Found {len(message_ids)} new inbox message(s) in {len(events)} event(s)")

        _enter(notification, ReconcileState.MATERIALIZING)
        materialized: list[MaterializedMessage] = []
        failed: list[str] = []
        for message_id in message_ids:
            try:
                materialized.append(
                    await self.materializer.materialize(message_id, mailbox_owner, self.archive_dir)
                )
            except ChronomailError as e:
                logger.error(f"Failed to archive message {message_id}: {e}")
                failed.append(message_id)
            except Exception as e:
                logger.exception(f"Unexpected error archiving message {message_id}: {e}")
                failed.append(message_id)

        _enter(notification, ReconcileState.DONE)
        if failed:
            logger.warning(f"Archived {len(materialized)}/{len(message_ids)} messages; failed: {failed}")
        return ProcessingOutcome.processed(materialized, failed)
