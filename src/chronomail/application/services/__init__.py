"""Reconciliation pipeline services."""

from chronomail.application.services.history_fetcher import HistoryFetcher
from chronomail.application.services.message_materializer import MessageMaterializer

__all__ = [
    "HistoryFetcher",
    "MessageMaterializer",
]
