from __future__ import annotations
import base64
from dataclasses import dataclass
from email import policy
from email.message import EmailMessage


@dataclass(frozen=True)
class OutboundEmail:
    sender: str
    to: str
    subject: str
    body: str


def compose_plaintext(em: OutboundEmail) -> bytes:
    # RFC 5322 with CRLF line endings, as Gmail expects for messages.send
    msg = EmailMessage(policy=policy.SMTP)
    msg["From"] = em.sender
    msg["To"] = em.to
    msg["Subject"] = em.subject
    msg.set_content(em.body, charset="utf-8")
    return msg.as_bytes()


def encode_for_gmail(rfc822_bytes: bytes) -> str:
    """Unpadded base64url, the form of Gmail's ``raw`` field."""
    return base64.urlsafe_b64encode(rfc822_bytes).decode("ascii").rstrip("=")
