"""Notification ledger implementations."""

from chronomail.infrastructure.ledger.json_ledger import JsonFileNotificationLedger

__all__ = [
    "JsonFileNotificationLedger",
]
