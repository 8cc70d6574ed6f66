"""JWT claim decoding and refresh-window math.

Tokens are only inspected, never verified: the platform validates them on
every request, the client just needs ``iat``/``exp`` to decide when to renew.
"""

import time
from typing import Any

import jwt

DEFAULT_REFRESH_RATIO = 0.5


def decode_claims(token: str) -> dict[str, Any] | None:
    """Decode the payload segment of a JWT without verifying it.

    Returns:
        The claims mapping, or None if the token is not a decodable JWT.
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None


def remaining_lifetime_ratio(claims: dict[str, Any], now: float | None = None) -> float | None:
    """Fraction of the token's validity window that is still ahead.

    ``(exp - now) / (exp - iat)``, computed in milliseconds.

    Returns:
        The ratio, or None when ``exp``/``iat`` are missing, non-numeric,
        or describe an empty window.
    """
    exp = claims.get("exp")
    iat = claims.get("iat")
    if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
        return None
    if not exp or not iat:
        return None

    now_ms = (time.time() if now is None else now) * 1000
    window = exp * 1000 - iat * 1000
    if window <= 0:
        return None
    return (exp * 1000 - now_ms) / window


def token_needs_refresh(
    token: str,
    refresh_ratio: float = DEFAULT_REFRESH_RATIO,
    now: float | None = None,
) -> bool:
    """Whether a cached token should be renewed.

    True for an empty or undecodable token, and once less than
    ``refresh_ratio`` of the token's lifetime remains.
    """
    if not token:
        return True
    claims = decode_claims(token)
    if claims is None:
        return True
    ratio = remaining_lifetime_ratio(claims, now=now)
    if ratio is None:
        return True
    return ratio < refresh_ratio
