"""
HMAC signing helpers for EventSub webhook deliveries.
"""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def hmac_hex(secret: str, message: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of message keyed with secret."""
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def build_signature(secret: str, message_id: str, timestamp: str, body: str) -> str:
    """
    Compute the twitch-eventsub-message-signature value for a delivery.

    Twitch signs the plain concatenation of message id, timestamp and raw body.
    """
    return SIGNATURE_PREFIX + hmac_hex(secret, message_id + timestamp + body)


def constant_time_equals(a: str, b: str) -> bool:
    """
    Compare two strings without leaking where they differ.

    Strings of different length are simply unequal.
    """
    try:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))
    except (TypeError, AttributeError, UnicodeEncodeError):
        return False
