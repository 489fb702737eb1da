"""Error taxonomy for the reconciliation pipeline."""

from __future__ import annotations


class ChronomailError(Exception):
    """Base class for all pipeline errors."""


class InvalidCursorError(ChronomailError):
    """A history cursor did not parse as a non-negative integer."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid historyId format: {value!r}")
        self.value = value


class ProviderError(ChronomailError):
    """The mail provider API rejected a call."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class InsufficientPermissionsError(ChronomailError):
    """The provider denied access; OAuth scopes or consent need operator attention."""


class MalformedPayloadError(ChronomailError):
    """A push envelope could not be decoded into JSON."""


class StorageError(ChronomailError):
    """The notification ledger could not be read or written."""


class MessageError(ChronomailError):
    """Failure scoped to a single message."""

    def __init__(self, message_id: str, detail: str) -> None:
        super().__init__(f"{detail} (message {message_id})")
        self.message_id = message_id
        self.detail = detail


class FetchError(MessageError):
    """Message metadata or raw content could not be fetched."""


class DecodeError(MessageError):
    """Raw message payload was absent or not valid base64url."""


class WriteError(MessageError):
    """The archive file could not be written."""
