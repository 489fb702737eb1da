"""FastAPI dependency providers.

This is the composition root: the Gmail session is built once here and
passed explicitly into every collaborator that needs provider access.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from loguru import logger

from chronomail.application.services import HistoryFetcher, MessageMaterializer
from chronomail.application.use_cases.handle_push import PushNotificationHandler
from chronomail.application.use_cases.reconcile_notification import ReconcileNotificationUseCase
from chronomail.infrastructure.email.providers.gmail import (
    GmailOAuthConfig,
    GmailOAuthenticator,
    GmailSession,
)
from chronomail.infrastructure.ledger import JsonFileNotificationLedger
from chronomail.infrastructure.settings import get_settings


@lru_cache
def get_authenticator() -> GmailOAuthenticator:
    return GmailOAuthenticator(GmailOAuthConfig.from_settings(get_settings()))


@lru_cache
def get_gmail_session() -> GmailSession:
    settings = get_settings()
    credentials = get_authenticator().credentials()
    return GmailSession.from_credentials(credentials, user_id=settings.gmail_user_id)


@lru_cache
def get_notification_ledger() -> JsonFileNotificationLedger:
    return JsonFileNotificationLedger(get_settings().notifications_file)


def build_reconcile_use_case(session: GmailSession) -> ReconcileNotificationUseCase:
    """Wire the reconciliation pipeline around an explicit session."""
    return ReconcileNotificationUseCase(
        fetcher=HistoryFetcher(session),
        materializer=MessageMaterializer(session),
        archive_dir=get_settings().email_dir,
    )


@lru_cache
def _reconcile_use_case() -> ReconcileNotificationUseCase:
    return build_reconcile_use_case(get_gmail_session())


def get_push_handler() -> Optional[PushNotificationHandler]:
    """The push route must answer 200 even when the pipeline cannot be built.

    Only the ledger is required; a missing or broken provider session
    leaves the handler without a use case so deliveries are still recorded.
    """
    try:
        ledger = get_notification_ledger()
    except Exception as e:
        logger.error(f"Notification ledger unavailable: {e}")
        return None

    try:
        use_case: Optional[ReconcileNotificationUseCase] = _reconcile_use_case()
    except Exception as e:
        logger.error(f"Reconciliation pipeline unavailable: {e}")
        use_case = None
    return PushNotificationHandler(ledger, use_case)
