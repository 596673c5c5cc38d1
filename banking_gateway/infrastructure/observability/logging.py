"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from banking_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def token_fingerprint(token: Optional[str]) -> Optional[str]:
    """Last characters of a token, enough to correlate log lines without leaking it"""
    if not token:
        return None
    return f"...{token[-8:]}"


def log_session_event(event: str, user_id: Optional[int], count: int = 1, request_id: str = "unknown") -> None:
    """Log structured session lifecycle event (issued, revoked, swept)"""
    logging.info(
        "Session event",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": f"session_{event}",
            "count": count,
        },
    )


def log_funding(
    request_id: str,
    user_id: int,
    account_id: int,
    amount_cents: int,
    new_balance_cents: int,
    duration_ms: float,
) -> None:
    """Log structured funding outcome for analysis"""
    logging.info(
        "Funding completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "account_id": account_id,
            "step": "funding_complete",
            "amount_cents": amount_cents,
            "new_balance_cents": new_balance_cents,
            "duration_ms": duration_ms,
        },
    )
