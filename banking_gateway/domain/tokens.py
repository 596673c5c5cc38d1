"""Signed session tokens (JWT) carrying the user id and an expiry claim"""

import secrets
from datetime import datetime
from typing import Optional

from jose import JWTError, jwt


def sign_session_token(user_id: int, expires_at: datetime, secret: str, algorithm: str = "HS256") -> str:
    """
    Sign a session token for a user.

    Claims:
    - user_id: owning user
    - exp: token-level expiry (the persisted session record still decides revocation)
    - jti: random nonce so two sessions issued in the same second differ
    """
    claims = {
        "user_id": user_id,
        "exp": expires_at,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_session_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[int]:
    """Return the user id embedded in a token, or None if it is forged, malformed or expired"""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None

    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        return None
    return user_id
