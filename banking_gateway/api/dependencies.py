"""Dependency injection for FastAPI endpoints"""

import json
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from banking_gateway.config import settings
from banking_gateway.domain.models import Identity, RequestContext
from banking_gateway.infrastructure.database.session import get_db
from banking_gateway.services.ledger_engine import LedgerEngine
from banking_gateway.services.session_authority import SessionAuthority
from banking_gateway.utils.cookies import extract_session_token


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_authority(request: Request, db: Session = Depends(get_db)) -> SessionAuthority:
    """Provide a Session Authority bound to the request's DB session and request id"""
    return SessionAuthority(db, request_id=get_request_id(request))


def get_ledger_engine(db: Session = Depends(get_db)) -> LedgerEngine:
    """Provide a Ledger Engine bound to the request's DB session"""
    return LedgerEngine(db)


async def _json_body(request: Request):
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


async def get_request_context(
    request: Request,
    authority: SessionAuthority = Depends(get_session_authority),
) -> RequestContext:
    """
    Build the per-request context from the transport.

    Never raises: a missing or invalid token resolves to a context without identity.
    """
    name = settings.session_cookie_name
    token = extract_session_token(
        cookies=request.cookies,
        cookie_header=request.headers.get("cookie"),
        name=name,
    )
    if not token:
        token = extract_session_token(body=await _json_body(request), name=name)

    return RequestContext(
        identity=authority.validate(token),
        token=token,
        request_id=get_request_id(request),
    )


def require_identity(ctx: RequestContext = Depends(get_request_context)) -> Identity:
    """Reject the operation when the request carries no valid session"""
    if ctx.identity is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return ctx.identity
