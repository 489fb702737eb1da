from __future__ import annotations
from typing import Any, Optional, Protocol


class MailSession(Protocol):
    """Authenticated handle on one mailbox at the mail provider.

    Implementations raise ``ProviderError`` (with the HTTP status when known)
    for any rejected call.
    """

    async def get_profile(self) -> dict[str, Any]: ...

    async def list_history(
        self,
        start_history_id: int,
        history_types: list[str],
        page_token: Optional[str] = None,
    ) -> dict[str, Any]: ...

    async def get_message(self, message_id: str, format: str = "full") -> dict[str, Any]: ...
