import base64
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from chronomail.domain.errors import ProviderError


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def push_body(payload: Any, message_id: Optional[str] = "pubsub-1") -> dict:
    """A Pub/Sub push envelope around a JSON payload."""
    import json

    data = base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
    message: dict[str, Any] = {"data": data}
    if message_id:
        message["messageId"] = message_id
    return {"message": message, "subscription": "projects/p/subscriptions/s"}


class FakeMailSession:
    """In-memory MailSession. Records every call."""

    def __init__(self) -> None:
        self.profile: dict[str, Any] = {"emailAddress": "owner@example.com", "historyId": "5000"}
        self.history_pages: list[dict[str, Any]] = [{"historyId": "5000"}]
        self.messages: dict[str, dict[str, Any]] = {}
        self.errors: dict[str, Exception] = {}
        self.history_error: Optional[ProviderError] = None
        self.calls: list[tuple] = []

    def add_message(self, message_id: str, raw: bytes, subject: str = "Hello") -> None:
        self.messages[message_id] = {
            "id": message_id,
            "threadId": f"t-{message_id}",
            "payload": {"headers": [{"name": "Subject", "value": subject}]},
            "raw": b64url(raw),
        }

    async def get_profile(self) -> dict[str, Any]:
        self.calls.append(("get_profile",))
        return self.profile

    async def list_history(self, start_history_id, history_types, page_token=None):
        self.calls.append(("list_history", start_history_id, tuple(history_types), page_token))
        if self.history_error is not None:
            raise self.history_error
        index = int(page_token) if page_token else 0
        return self.history_pages[index]

    async def get_message(self, message_id: str, format: str = "full") -> dict[str, Any]:
        self.calls.append(("get_message", message_id, format))
        if message_id in self.errors:
            raise self.errors[message_id]
        if message_id not in self.messages:
            raise ProviderError("Requested entity was not found.", status=404)
        message = dict(self.messages[message_id])
        if format != "raw":
            message.pop("raw", None)
        return message

    def fetched_ids(self, fmt: str = "raw") -> list[str]:
        return [c[1] for c in self.calls if c[0] == "get_message" and c[2] == fmt]


@pytest.fixture
def session() -> FakeMailSession:
    return FakeMailSession()


@pytest.fixture
def fixed_clock():
    at = datetime(2026, 10, 19, 8, 15, 2, 123456, tzinfo=timezone.utc)
    return lambda: at


@pytest.fixture
def archive_dir(tmp_path):
    return tmp_path / "emails"


@pytest.fixture
def make_push_body():
    return push_body
