from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from loguru import logger

from chronomail.infrastructure.settings import Settings


@dataclass(frozen=True)
class GmailOAuthConfig:
    """
    OAuth2 client registration for one Gmail mailbox.
    """
    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: list[str] = field(default_factory=list)
    refresh_token: str | None = None
    token_uri: str = "https://oauth2.googleapis.com/token"
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth"

    @classmethod
    def from_settings(cls, settings: Settings) -> "GmailOAuthConfig":
        refresh = settings.google_refresh_token
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret.get_secret_value(),
            redirect_uri=settings.google_redirect_uri,
            scopes=list(settings.gmail_scopes),
            refresh_token=refresh.get_secret_value() if refresh else None,
            token_uri=settings.google_token_uri,
            auth_uri=settings.google_auth_uri,
        )


class GmailOAuthenticator:
    """
    Responsible ONLY for OAuth2: the consent URL, exchanging an
    authorization code, and building refreshable credentials.
    No mailbox calls.
    """

    def __init__(self, cfg: GmailOAuthConfig) -> None:
        self.cfg = cfg

    def _flow(self) -> Flow:
        client_config = {
            "web": {
                "client_id": self.cfg.client_id,
                "client_secret": self.cfg.client_secret,
                "auth_uri": self.cfg.auth_uri,
                "token_uri": self.cfg.token_uri,
                "redirect_uris": [self.cfg.redirect_uri],
            }
        }
        # Consent and callback run in separate requests, so no PKCE verifier
        return Flow.from_client_config(
            client_config,
            scopes=self.cfg.scopes,
            redirect_uri=self.cfg.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self) -> str:
        """Consent URL; ``prompt=consent`` forces a refresh token on every grant."""
        url, _state = self._flow().authorization_url(access_type="offline", prompt="consent")
        return url

    def exchange_code(self, code: str) -> dict[str, Any]:
        flow = self._flow()
        token = flow.fetch_token(code=code)
        logger.info("Exchanged authorization code for tokens")
        return dict(token)

    def credentials(self) -> Credentials:
        """
        Refresh-token credentials. The access token is fetched lazily on
        the first API call.
        """
        if not self.cfg.refresh_token:
            raise ValueError("GOOGLE_REFRESH_TOKEN is required; complete the /auth/google flow first")
        return Credentials(
            token=None,
            refresh_token=self.cfg.refresh_token,
            token_uri=self.cfg.token_uri,
            client_id=self.cfg.client_id,
            client_secret=self.cfg.client_secret,
            scopes=self.cfg.scopes,
        )
