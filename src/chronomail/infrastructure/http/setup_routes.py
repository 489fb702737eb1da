"""Gmail push subscription management."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from chronomail.domain.errors import ProviderError
from chronomail.infrastructure.email.providers.gmail import (
    GmailSession,
    expiration_info,
    setup_watch,
    stop_watch,
)
from chronomail.infrastructure.http.dependencies import get_gmail_session

router = APIRouter(prefix="/api/setup", tags=["setup"])


class WatchRequest(BaseModel):
    """Request body for registering a mailbox watch."""

    model_config = ConfigDict(populate_by_name=True)

    topic_name: str | None = Field(None, alias="topicName", description="Pub/Sub topic resource name")
    label_ids: list[str] = Field(default_factory=lambda: ["INBOX"], alias="labelIds")


@router.post("/watch-mailbox")
async def watch_mailbox(
    request: WatchRequest,
    session: GmailSession = Depends(get_gmail_session),
):
    if not request.topic_name:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Missing required field: topicName. Please provide the Pub/Sub topic name.",
            },
        )

    try:
        data = await setup_watch(session, request.topic_name, request.label_ids)
    except ProviderError as e:
        logger.error(f"Error setting up watch on mailbox: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to set up watch on mailbox", "error": str(e)},
        )

    return {
        "success": True,
        "message": "Successfully set up watch on mailbox",
        "data": data,
        "expirationInfo": expiration_info(),
    }


@router.post("/stop-watch")
async def stop_watching(session: GmailSession = Depends(get_gmail_session)):
    try:
        await stop_watch(session)
    except ProviderError as e:
        logger.error(f"Error stopping watch on mailbox: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to stop watching mailbox", "error": str(e)},
        )
    return {"success": True, "message": "Successfully stopped watching mailbox"}
