"""Session cookie extraction and Set-Cookie helpers"""

from typing import Any, Mapping, Optional

from starlette.responses import Response

SESSION_COOKIE_NAME = "session"
SESSION_MAX_AGE_SECONDS = 7 * 24 * 60 * 60


def parse_cookie_header(cookie_header: str, name: str) -> Optional[str]:
    """Pull one cookie out of a raw Cookie header; values may contain '='"""
    for part in cookie_header.split(";"):
        key, _, value = part.strip().partition("=")
        if key == name:
            return value
    return None


def extract_session_token(
    cookies: Optional[Mapping[str, str]] = None,
    cookie_header: Optional[str] = None,
    body: Optional[Mapping[str, Any]] = None,
    name: str = SESSION_COOKIE_NAME,
) -> Optional[str]:
    """
    Find the session token on an inbound request.

    Priority (first non-empty match wins):
    1. Pre-parsed cookie map
    2. Raw Cookie header
    3. Body field of the same name
    """
    if cookies:
        token = cookies.get(name)
        if token:
            return token

    if cookie_header:
        token = parse_cookie_header(cookie_header, name)
        if token:
            return token

    if body and isinstance(body, Mapping):
        token = body.get(name)
        if token and isinstance(token, str):
            return token

    return None


def set_session_cookie(
    response: Response,
    token: Optional[str],
    name: str = SESSION_COOKIE_NAME,
    max_age: int = SESSION_MAX_AGE_SECONDS,
) -> None:
    """Set the session cookie, or clear it when token is None"""
    response.set_cookie(
        key=name,
        value=token or "",
        max_age=max_age if token else 0,
        path="/",
        httponly=True,
        samesite="strict",
    )
