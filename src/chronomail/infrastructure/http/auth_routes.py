"""OAuth2 consent flow for obtaining the Gmail refresh token."""

from __future__ import annotations

import asyncio
import html
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from loguru import logger

from chronomail.infrastructure.email.providers.gmail import GmailOAuthenticator
from chronomail.infrastructure.http.dependencies import get_authenticator

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/google")
async def start_oauth(auth: GmailOAuthenticator = Depends(get_authenticator)) -> RedirectResponse:
    """Redirect to Google's consent screen."""
    return RedirectResponse(auth.authorization_url())


@router.get("/google/callback")
async def oauth_callback(
    code: Optional[str] = None,
    auth: GmailOAuthenticator = Depends(get_authenticator),
):
    """Exchange the authorization code and show the refresh token to the operator."""
    if not code:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Authorization code not provided"},
        )

    try:
        tokens = await asyncio.to_thread(auth.exchange_code, code)
    except Exception as e:
        logger.error(f"Error exchanging code for tokens: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Failed to exchange code for tokens",
                "error": str(e),
            },
        )

    refresh = tokens.get("refresh_token") or "Not provided - you may need to force consent"
    expires_in = tokens.get("expires_in")
    return HTMLResponse(
        f"""
        <h1>Authentication Successful</h1>
        <p>Add these values to your .env file:</p>
        <pre>GOOGLE_REFRESH_TOKEN={html.escape(str(refresh))}</pre>
        <p>Token type: {html.escape(str(tokens.get("token_type") or "Not available"))}</p>
        <p>Expires in: {f"{expires_in} seconds" if expires_in else "Not available"}</p>
        """
    )
