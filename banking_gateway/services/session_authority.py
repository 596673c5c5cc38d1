"""Session Authority - issues, validates and revokes login sessions"""

import logging
from datetime import datetime
from typing import Callable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from banking_gateway.config import settings
from banking_gateway.domain.exceptions import NotFoundError, UnauthenticatedError
from banking_gateway.domain.models import Identity, IssuedSession, LogoutResult, SessionRecord
from banking_gateway.domain.tokens import decode_session_token, sign_session_token
from banking_gateway.infrastructure.database.repositories import (
    SessionRepository,
    UserRepository,
    to_session_record,
)
from banking_gateway.infrastructure.observability.logging import log_session_event, token_fingerprint
from banking_gateway.infrastructure.observability.metrics import (
    record_revocation,
    sessions_issued_counter,
    sessions_swept_counter,
)
from banking_gateway.utils.date_utils import add_days, is_before, utcnow


class SessionAuthority:
    """
    Owns the session table.

    The persisted expires_at is the source of truth: a token with a valid
    signature is still rejected once its record is gone or expired.
    Sessions are valid strictly before expires_at.
    """

    def __init__(
        self,
        db: Session,
        secret: str | None = None,
        ttl_days: int | None = None,
        algorithm: str | None = None,
        clock: Callable[[], datetime] = utcnow,
        request_id: str = "unknown",
    ):
        self.db = db
        self.secret = secret or settings.jwt_secret
        self.ttl_days = ttl_days or settings.session_ttl_days
        self.algorithm = algorithm or settings.jwt_algorithm
        self.clock = clock
        self.request_id = request_id
        self.sessions = SessionRepository(db)
        self.users = UserRepository(db)

    def issue(self, user_id: int) -> IssuedSession:
        """
        Create a session for an existing user.

        Flow:
        1. Purge this user's already-expired sessions
        2. Sign a token with a 7-day exp claim
        3. Persist the record with its own 7-day expiry
        """
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User not found")

        now = self.clock()
        swept = self.sessions.delete_expired(now, user_id=user_id)

        expires_at = add_days(now, self.ttl_days)
        token = sign_session_token(user_id, expires_at, self.secret, self.algorithm)
        self.sessions.create_session(user_id=user_id, token=token, expires_at=expires_at, created_at=now)
        self.db.commit()

        if swept:
            sessions_swept_counter.inc(swept)
        sessions_issued_counter.inc()
        log_session_event("issued", user_id, request_id=self.request_id)

        return IssuedSession(token=token, expires_at=expires_at)

    def validate(self, token: Optional[str]) -> Optional[Identity]:
        """Resolve a token to an identity; every failure mode yields None"""
        if not token:
            return None

        user_id = decode_session_token(token, self.secret, self.algorithm)
        if user_id is None:
            return None

        try:
            record = self.sessions.get_by_token(token)
        except SQLAlchemyError as e:
            self.db.rollback()
            logging.error(f"Session lookup failed: {e}", extra={"token": token_fingerprint(token)})
            return None

        if record is None or record.user_id != user_id:
            return None

        if not is_before(self.clock(), record.expires_at):
            return None

        return Identity(user_id=record.user_id, token=token, expires_at=record.expires_at)

    def revoke(self, token: Optional[str]) -> LogoutResult:
        """
        Delete the session behind one token.

        Idempotent: nothing to delete is reported, not raised. The client
        cookie is cleared by the caller whatever the outcome.
        """
        if not token:
            return LogoutResult(success=False, reason="no_session_token")

        try:
            deleted = self.sessions.delete_by_token(token)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logging.error(f"Failed to delete session: {e}", extra={"token": token_fingerprint(token)})
            return LogoutResult(success=False, reason="store_error")

        if not deleted:
            logging.info("Logout found no session", extra={"token": token_fingerprint(token)})
            return LogoutResult(success=False, reason="session_not_found")

        record_revocation("single", deleted)
        log_session_event("revoked", None, count=deleted, request_id=self.request_id)
        return LogoutResult(success=True, reason="logged_out", sessions_deleted=deleted)

    def revoke_all_others(self, user_id: Optional[int], current_token: Optional[str]) -> LogoutResult:
        """
        Delete every session of the user except the current one.

        Without a current token all of the user's sessions go.
        """
        if user_id is None:
            raise UnauthenticatedError("Authentication required")

        try:
            deleted = self.sessions.delete_for_user(user_id, keep_token=current_token)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logging.error(f"Failed to revoke sessions: {e}", extra={"user_id": user_id})
            return LogoutResult(success=False, reason="store_error", cookie_cleared=False)

        record_revocation("others", deleted)
        log_session_event("revoked_others", user_id, count=deleted, request_id=self.request_id)
        # The caller keeps its own session, so its cookie stays
        return LogoutResult(success=True, reason="logged_out", sessions_deleted=deleted, cookie_cleared=False)

    def sweep_expired(self, user_id: Optional[int] = None) -> int:
        """Delete sessions with expires_at <= now, for one user or everyone"""
        deleted = self.sessions.delete_expired(self.clock(), user_id=user_id)
        self.db.commit()

        if deleted:
            sessions_swept_counter.inc(deleted)
            log_session_event("swept", user_id, count=deleted, request_id=self.request_id)
        return deleted

    def active_sessions(self, user_id: int) -> List[SessionRecord]:
        return [to_session_record(s) for s in self.sessions.get_active_by_user(user_id, self.clock())]
