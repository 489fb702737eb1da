"""Domain models for chronomail."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from chronomail.domain.entities.materialized_message import MaterializedMessage


class OutcomeStatus(str, Enum):
    """Terminal result of reconciling one notification."""

    PROCESSED = "processed"
    IGNORED = "ignored"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ProcessingOutcome:
    """What the orchestrator did with a notification.

    Every status counts as handled for acknowledgment purposes; callers
    must not ask the push transport to redeliver based on it.
    """

    status: OutcomeStatus
    reason: str | None = None
    materialized: list[MaterializedMessage] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @classmethod
    def processed(
        cls,
        materialized: list[MaterializedMessage],
        failed: list[str],
    ) -> "ProcessingOutcome":
        return cls(OutcomeStatus.PROCESSED, materialized=materialized, failed=failed)

    @classmethod
    def ignored(cls, reason: str) -> "ProcessingOutcome":
        return cls(OutcomeStatus.IGNORED, reason=reason)

    @classmethod
    def aborted(cls, reason: str) -> "ProcessingOutcome":
        return cls(OutcomeStatus.ABORTED, reason=reason)

    def summary(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "materialized": [m.message_id for m in self.materialized],
            "failed": list(self.failed),
        }


class PushAck(BaseModel):
    """Body returned to the Pub/Sub push transport. Always sent with HTTP 200."""

    success: bool
    message: str
    error: str | None = None
    outcome: dict[str, Any] | None = Field(default=None, description="Reconciliation summary")
