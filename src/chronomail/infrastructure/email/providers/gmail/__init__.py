"""Gmail API provider: OAuth2, mailbox session, and push subscription."""

from chronomail.infrastructure.email.providers.gmail.auth import (
    GmailOAuthConfig,
    GmailOAuthenticator,
)
from chronomail.infrastructure.email.providers.gmail.client import GmailSession
from chronomail.infrastructure.email.providers.gmail.watch import (
    expiration_info,
    setup_watch,
    stop_watch,
)

__all__ = [
    "GmailOAuthConfig",
    "GmailOAuthenticator",
    "GmailSession",
    "expiration_info",
    "setup_watch",
    "stop_watch",
]
