import base64
from email import policy
from email.parser import BytesParser

from chronomail.infrastructure.email.rfc822 import OutboundEmail, compose_plaintext, encode_for_gmail


def test_compose_plaintext_headers_and_body():
    raw = compose_plaintext(
        OutboundEmail(sender="me@example.com", to="you@example.com", subject="Status", body="All good ✓")
    )

    em = BytesParser(policy=policy.default).parsebytes(raw)
    assert em["From"] == "me@example.com"
    assert em["To"] == "you@example.com"
    assert em["Subject"] == "Status"
    assert em["MIME-Version"] == "1.0"
    assert em.get_content_type() == "text/plain"
    assert em.get_content_charset() == "utf-8"
    assert em.get_content().strip() == "All good ✓"
    assert b"\r\n" in raw


def test_encode_for_gmail_is_unpadded_base64url():
    data = b"\xfb\xff subject?"
    encoded = encode_for_gmail(data)

    assert "=" not in encoded
    assert "+" not in encoded and "/" not in encoded
    assert base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4)) == data
