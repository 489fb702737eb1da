# src/chronomail/infrastructure/__init__.py
"""Infrastructure layer - Gmail provider, storage, HTTP, and configuration."""

from chronomail.infrastructure.ledger import JsonFileNotificationLedger
from chronomail.infrastructure.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Ledger
    "JsonFileNotificationLedger",
]
