"""Scheduled job: purge expired sessions for every user"""

import logging
import sys

from banking_gateway.config import settings
from banking_gateway.infrastructure.database.session import SessionLocal
from banking_gateway.infrastructure.observability.logging import setup_logging
from banking_gateway.services.session_authority import SessionAuthority


def run_sweep(session_factory=SessionLocal) -> int:
    """Delete expired sessions and return how many went"""
    db = session_factory()
    try:
        return SessionAuthority(db, request_id="session-sweep-job").sweep_expired()
    finally:
        db.close()


def main() -> int:
    setup_logging(settings.log_level)
    try:
        deleted = run_sweep()
    except Exception as e:
        logging.error(f"Session sweep failed: {e}")
        return 1

    logging.info("Session sweep finished", extra={"sessions_deleted": deleted})
    return 0


if __name__ == "__main__":
    sys.exit(main())
