"""Mailbox change cursor and normalized change events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from chronomail.domain.errors import InvalidCursorError

MIN_HISTORY_ID = 1
INBOX_LABEL = "INBOX"


@dataclass(frozen=True, order=True)
class ChangeCursor:
    """Gmail ``historyId``: monotonic within one mailbox."""

    value: int

    @classmethod
    def parse(cls, raw: Any) -> "ChangeCursor":
        if isinstance(raw, bool):
            raise InvalidCursorError(raw)
        if isinstance(raw, int):
            value = raw
        elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
            value = int(raw.strip())
        else:
            raise InvalidCursorError(raw)
        if value < 0:
            raise InvalidCursorError(raw)
        return cls(value)

    def preceding(self) -> "ChangeCursor":
        """One step back, clamped at the minimum valid history id."""
        return ChangeCursor(max(MIN_HISTORY_ID, self.value - 1))

    def __str__(self) -> str:
        return str(self.value)


class ChangeKind(str, Enum):
    MESSAGE_ADDED = "messageAdded"
    LABEL_ADDED = "labelAdded"


@dataclass(frozen=True)
class ChangeEvent:
    kind: ChangeKind
    message_id: str
    label_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def lands_in_inbox(self) -> bool:
        if self.kind is ChangeKind.MESSAGE_ADDED:
            return True
        return INBOX_LABEL in self.label_ids


def _message_id(entry: Any) -> str | None:
    if not isinstance(entry, dict):
        return None
    msg_id = entry.get("id")
    return str(msg_id) if msg_id else None


def normalize_history(records: Iterable[dict[str, Any]]) -> list[ChangeEvent]:
    """Flatten Gmail history records into one event list.

    Handles the three shapes a record can carry:
    ``messages`` (direct list), ``messagesAdded`` and ``labelsAdded``.
    Entries without a message id are dropped.
    """
    events: list[ChangeEvent] = []
    for record in records:
        for entry in record.get("messages") or []:
            msg_id = _message_id(entry)
            if msg_id:
                events.append(ChangeEvent(ChangeKind.MESSAGE_ADDED, msg_id))

        for added in record.get("messagesAdded") or []:
            msg_id = _message_id((added or {}).get("message"))
            if msg_id:
                events.append(ChangeEvent(ChangeKind.MESSAGE_ADDED, msg_id))

        for labelled in record.get("labelsAdded") or []:
            msg_id = _message_id((labelled or {}).get("message"))
            if msg_id:
                labels = frozenset(labelled.get("labelIds") or [])
                events.append(ChangeEvent(ChangeKind.LABEL_ADDED, msg_id, labels))
    return events


def extract_message_ids(events: Iterable[ChangeEvent]) -> list[str]:
    """Distinct ids of messages that arrived in the inbox, in first-seen order."""
    seen: dict[str, None] = {}
    for event in events:
        if event.lands_in_inbox:
            seen.setdefault(event.message_id, None)
    return list(seen)
