"""Domain models and entities."""

from chronomail.domain.entities.change_event import (
    ChangeCursor,
    ChangeEvent,
    ChangeKind,
    extract_message_ids,
    normalize_history,
)
from chronomail.domain.entities.materialized_message import MaterializedMessage
from chronomail.domain.entities.notification import Notification
from chronomail.domain.models import OutcomeStatus, ProcessingOutcome, PushAck

__all__ = [
    "ChangeCursor",
    "ChangeEvent",
    "ChangeKind",
    "extract_message_ids",
    "normalize_history",
    "MaterializedMessage",
    "Notification",
    "OutcomeStatus",
    "ProcessingOutcome",
    "PushAck",
]
