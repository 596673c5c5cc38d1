"""/v1/auth - signup, login, logout and session maintenance endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from banking_gateway.api.v1.errors import to_http_exception
from banking_gateway.api.v1.schemas import (
    AuthResponse,
    CleanupResponse,
    LoginRequest,
    LogoutResponse,
    SessionItem,
    SessionListResponse,
    SignupRequest,
    UserResponse,
)
from banking_gateway.api.dependencies import get_request_context, get_request_id, get_session_authority, require_identity
from banking_gateway.config import settings
from banking_gateway.domain.exceptions import DomainException
from banking_gateway.domain.models import Identity, RequestContext
from banking_gateway.infrastructure.database.session import get_db
from banking_gateway.services.session_authority import SessionAuthority
from banking_gateway.services.users import authenticate_user, register_user
from banking_gateway.utils.cookies import set_session_cookie

router = APIRouter(prefix="/auth")


def _set_cookie(response: Response, token: str | None) -> None:
    set_session_cookie(
        response,
        token,
        name=settings.session_cookie_name,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
    )


@router.post("/signup", response_model=AuthResponse)
def signup(
    body: SignupRequest,
    response: Response,
    db: Session = Depends(get_db),
    authority: SessionAuthority = Depends(get_session_authority),
    request_id: str = Depends(get_request_id),
):
    """Register an account holder and start a session"""
    try:
        user, session = register_user(db, authority, **body.model_dump())
    except DomainException as e:
        logging.warning(f"Signup rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    _set_cookie(response, session.token)
    return AuthResponse(user=UserResponse.model_validate(user), token=session.token, expires_at=session.expires_at)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    authority: SessionAuthority = Depends(get_session_authority),
    request_id: str = Depends(get_request_id),
):
    """Check credentials; expired sessions of the user are purged before the new one is issued"""
    try:
        user, session = authenticate_user(db, authority, body.email, body.password)
    except DomainException as e:
        logging.warning(f"Login rejected: {e}", extra={"request_id": request_id})
        raise to_http_exception(e)

    _set_cookie(response, session.token)
    return AuthResponse(user=UserResponse.model_validate(user), token=session.token, expires_at=session.expires_at)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    authority: SessionAuthority = Depends(get_session_authority),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Revoke the current session.

    The cookie is cleared whether or not a session record was found.
    """
    result = authority.revoke(ctx.token)
    _set_cookie(response, None)
    return LogoutResponse.model_validate(result)


@router.post("/logout-others", response_model=LogoutResponse)
def logout_other_sessions(
    authority: SessionAuthority = Depends(get_session_authority),
    ctx: RequestContext = Depends(get_request_context),
    identity: Identity = Depends(require_identity),
):
    """Revoke every session of the caller except the one making this request"""
    result = authority.revoke_all_others(identity.user_id, ctx.token)
    if not result.success:
        raise HTTPException(status_code=500, detail="Failed to revoke sessions")
    return LogoutResponse.model_validate(result)


@router.post("/sessions/cleanup", response_model=CleanupResponse)
def cleanup_expired_sessions(authority: SessionAuthority = Depends(get_session_authority)):
    """Purge expired sessions for all users; meant for scheduled jobs, no auth required"""
    deleted = authority.sweep_expired()
    return CleanupResponse(success=True, sessions_deleted=deleted)


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    authority: SessionAuthority = Depends(get_session_authority),
    identity: Identity = Depends(require_identity),
):
    """Active sessions of the caller, newest first"""
    sessions = authority.active_sessions(identity.user_id)
    return SessionListResponse(
        user_id=identity.user_id,
        sessions=[SessionItem.model_validate(s) for s in sessions],
    )
