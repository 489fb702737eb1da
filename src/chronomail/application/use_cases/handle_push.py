"""Boundary service for Pub/Sub push deliveries."""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from chronomail.application.ports.notification_ledger import NotificationLedger
from chronomail.application.use_cases.reconcile_notification import (
    ReconcileNotificationUseCase,
    decode_push_data,
)
from chronomail.domain.entities.notification import Notification
from chronomail.domain.errors import MalformedPayloadError, StorageError
from chronomail.domain.models import OutcomeStatus, ProcessingOutcome, PushAck

_OUTCOME_MESSAGES = {
    OutcomeStatus.PROCESSED: "Notification received and processed",
    OutcomeStatus.IGNORED: "Notification received; not a mailbox change",
    OutcomeStatus.ABORTED: "Notification received; processing aborted",
}


def ack_for(outcome: ProcessingOutcome) -> PushAck:
    """Map any outcome to an acknowledgment. There is no 'redeliver' answer."""
    return PushAck(
        success=outcome.status is not OutcomeStatus.ABORTED,
        message=_OUTCOME_MESSAGES[outcome.status],
        error=outcome.reason if outcome.status is OutcomeStatus.ABORTED else None,
        outcome=outcome.summary(),
    )


class PushNotificationHandler:
    """Ledger the delivery, reconcile it, and always produce an acknowledgment.

    The push transport treats anything but 2xx as a request to redeliver,
    so ``handle`` never raises. Without a use case (no provider session
    could be built) deliveries are still ledgered, then reported as failed.
    """

    def __init__(
        self,
        ledger: NotificationLedger,
        use_case: Optional[ReconcileNotificationUseCase],
    ) -> None:
        self.ledger = ledger
        self.use_case = use_case

    async def handle(self, body: Any) -> PushAck:
        try:
            return await self._handle(body)
        except Exception as e:
            logger.exception(f"Error processing Pub/Sub notification: {e}")
            return PushAck(success=False, message="Error processing notification", error=str(e))

    async def _handle(self, body: Any) -> PushAck:
        pubsub_message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(pubsub_message, dict):
            logger.warning("Push delivery without a message envelope")
            return PushAck(success=False, message="Invalid Pub/Sub message format")

        try:
            payload = decode_push_data(pubsub_message.get("data"))
        except MalformedPayloadError as e:
            logger.warning(f"Undecodable push payload: {e}")
            return PushAck(
                success=False,
                message="Invalid message data format",
                error=str(e),
                outcome=ProcessingOutcome.aborted(str(e)).summary(),
            )

        message_id = pubsub_message.get("messageId") or pubsub_message.get("message_id")
        notification = Notification.from_push(payload, message_id=message_id)
        logger.info(f"Received notification {notification.id}")

        try:
            await self.ledger.append(notification)
        except StorageError as e:
            logger.error(f"Could not ledger notification {notification.id}: {e}")

        if self.use_case is None:
            logger.error(f"Notification {notification.id} ledgered but not reconciled: pipeline is not configured")
            return PushAck(
                success=False,
                message="Error processing notification",
                error="Reconciliation pipeline is not configured",
            )

        outcome = await self.use_case.run(notification)
        logger.info(f"Notification {notification.id} finished: {outcome.status.value}")
        return ack_for(outcome)
