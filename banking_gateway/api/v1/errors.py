"""Mapping from domain exceptions to HTTP errors"""

from fastapi import HTTPException

from banking_gateway.domain.exceptions import (
    ConflictError,
    DomainException,
    InternalError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)

STATUS_BY_EXCEPTION = {
    ConflictError: 409,
    NotFoundError: 404,
    UnauthenticatedError: 401,
    InvalidInputError: 400,
    InternalError: 500,
}


def to_http_exception(exc: DomainException) -> HTTPException:
    status_code = STATUS_BY_EXCEPTION.get(type(exc), 500)
    # Internal details stay in the logs
    detail = "Internal server error" if status_code == 500 else str(exc)
    return HTTPException(status_code=status_code, detail=detail)
