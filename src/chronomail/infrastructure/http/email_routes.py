"""Outbound email endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from chronomail.domain.errors import ProviderError
from chronomail.infrastructure.email.providers.gmail import GmailSession
from chronomail.infrastructure.email.rfc822 import OutboundEmail, compose_plaintext, encode_for_gmail
from chronomail.infrastructure.http.dependencies import get_gmail_session

router = APIRouter(prefix="/api/email", tags=["email"])


class SendEmailRequest(BaseModel):
    """Request body for sending a plain-text email."""

    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


@router.post("/send")
async def send_email(
    request: SendEmailRequest,
    session: GmailSession = Depends(get_gmail_session),
):
    raw = encode_for_gmail(
        compose_plaintext(
            OutboundEmail(
                sender=request.sender,
                to=request.to,
                subject=request.subject,
                body=request.body,
            )
        )
    )
    try:
        data = await session.send_raw(raw)
    except ProviderError as e:
        logger.error(f"Error sending email: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Failed to send email", "error": str(e)},
        )
    return {"success": True, "message": "Email sent successfully", "data": data}


@router.get("/test")
async def email_service_test() -> dict:
    """Simple check that doesn't send anything."""
    return {"success": True, "message": "Email service is running"}
