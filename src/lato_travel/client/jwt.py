"""JWT payload decoding (no signature verification)."""
import base64
import binascii
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def parse_jwt_payload(token: str) -> dict[str, Any] | None:
    """Decode the payload segment of a JWT; None when it is malformed."""
    try:
        segment = token.split(".")[1]
        padded = segment + "=" * (-len(segment) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded).decode("utf-8"))
    except (IndexError, binascii.Error, UnicodeDecodeError, ValueError) as exc:
        logger.debug("Failed to parse JWT: %s", exc)
        return None
    return payload if isinstance(payload, dict) else None
