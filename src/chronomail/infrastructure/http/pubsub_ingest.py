"""Pub/Sub push endpoint for Gmail mailbox-change notifications."""

from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from chronomail.application.use_cases.handle_push import PushNotificationHandler
from chronomail.domain.errors import StorageError
from chronomail.domain.models import PushAck
from chronomail.infrastructure.http.dependencies import get_notification_ledger, get_push_handler
from chronomail.infrastructure.ledger import JsonFileNotificationLedger

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


async def _read_body(request: Request) -> Optional[Any]:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Push body is not valid JSON: {e}")
        return None


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/pubsub", response_model=PushAck)
async def receive_pubsub(
    request: Request,
    handler: Optional[PushNotificationHandler] = Depends(get_push_handler),
) -> PushAck:
    """
    Receive a Gmail push notification relayed by Pub/Sub.

    Always answers HTTP 200: Pub/Sub redelivers on anything else, and a
    redelivery storm costs more than one lost notification. Failures are
    reported in the body only.
    """
    try:
        body = await _read_body(request)
        if handler is None:
            return PushAck(
                success=False,
                message="Error processing notification",
                error="Reconciliation pipeline is not configured",
            )
        return await handler.handle(body)
    except Exception as e:
        logger.exception(f"Error processing Pub/Sub notification: {e}")
        return PushAck(success=False, message="Error processing notification", error=str(e))


@router.get("")
async def list_notifications(
    ledger: JsonFileNotificationLedger = Depends(get_notification_ledger),
):
    """Return every ledgered notification."""
    try:
        return await ledger.read_all()
    except StorageError as e:
        logger.error(f"Error retrieving notifications: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Error retrieving notifications",
                "error": str(e),
            },
        )
