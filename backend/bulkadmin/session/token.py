"""Reading the expiry claim out of a bearer token without verifying it."""

import base64
import binascii
import json
from typing import Optional

from ..errors import TokenDecodeError


def decode_claims(token: str) -> dict:
    """
    Decode the claims segment of a dot-delimited three-part token.

    The signature is not checked.

    Raises:
        TokenDecodeError: if the token is not three segments or the middle
            one is not base64url-encoded JSON object.
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenDecodeError(f"expected 3 token segments, got {len(parts)}")

    segment = parts[1]
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        claims = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise TokenDecodeError(f"unreadable claims segment: {e}") from e

    if not isinstance(claims, dict):
        raise TokenDecodeError("claims segment is not a JSON object")
    return claims


def token_expiry_ms(token: str) -> Optional[int]:
    """Return the `exp` claim in epoch milliseconds, or None if absent."""
    exp = decode_claims(token).get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not exp:
        return None
    return int(exp * 1000)
