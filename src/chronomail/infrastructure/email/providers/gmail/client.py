from __future__ import annotations

import asyncio
from typing import Any, Optional

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from loguru import logger

from chronomail.domain.errors import ProviderError


def _provider_error(e: HttpError) -> ProviderError:
    status = getattr(e, "status_code", None) or getattr(getattr(e, "resp", None), "status", None)
    try:
        status = int(status) if status is not None else None
    except (TypeError, ValueError):
        status = None
    return ProviderError(str(e), status=status)


class GmailSession:
    """Authenticated Gmail API handle for one mailbox.

    ``googleapiclient`` is blocking, so every request executes on a
    worker thread.
    """

    def __init__(self, service: Any, user_id: str = "me") -> None:
        self.service = service
        self.user_id = user_id

    @classmethod
    def from_credentials(cls, credentials: Any, user_id: str = "me") -> "GmailSession":
        service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
        return cls(service, user_id=user_id)

    async def _execute(self, request: Any) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(request.execute) or {}
        except HttpError as e:
            raise _provider_error(e) from e
        except (GoogleAuthError, OSError) as e:
            # Token refresh failures and socket errors carry no HTTP status
            raise ProviderError(f"{type(e).__name__}: {e}", status=None) from e

    def _users(self) -> Any:
        return self.service.users()

    # MailSession

    async def get_profile(self) -> dict[str, Any]:
        return await self._execute(self._users().getProfile(userId=self.user_id))

    async def list_history(
        self,
        start_history_id: int,
        history_types: list[str],
        page_token: Optional[str] = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "userId": self.user_id,
            "startHistoryId": str(start_history_id),
            "historyTypes": history_types,
        }
        if page_token:
            kwargs["pageToken"] = page_token
        return await self._execute(self._users().history().list(**kwargs))

    async def get_message(self, message_id: str, format: str = "full") -> dict[str, Any]:
        return await self._execute(
            self._users().messages().get(userId=self.user_id, id=message_id, format=format)
        )

    # Outbound and subscription management

    async def send_raw(self, raw: str) -> dict[str, Any]:
        result = await self._execute(
            self._users().messages().send(userId=self.user_id, body={"raw": raw})
        )
        logger.info(f"Email sent successfully: id={result.get('id')}")
        return result

    async def watch(self, topic_name: str, label_ids: list[str]) -> dict[str, Any]:
        return await self._execute(
            self._users().watch(
                userId=self.user_id,
                body={"topicName": topic_name, "labelIds": label_ids},
            )
        )

    async def stop(self) -> dict[str, Any]:
        return await self._execute(self._users().stop(userId=self.user_id))
