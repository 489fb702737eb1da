"""Application layer - reconciliation pipeline and use cases."""

from chronomail.application.services import HistoryFetcher, MessageMaterializer
from chronomail.application.use_cases.handle_push import PushNotificationHandler, ack_for
from chronomail.application.use_cases.reconcile_notification import (
    ReconcileNotificationUseCase,
    decode_push_data,
)

__all__ = [
    "HistoryFetcher",
    "MessageMaterializer",
    "PushNotificationHandler",
    "ReconcileNotificationUseCase",
    "ack_for",
    "decode_push_data",
]
