"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConflictError(DomainException):
    """Resource already exists (duplicate account type, registered email)"""

    pass


class NotFoundError(DomainException):
    """Resource is absent or not owned by the caller"""

    pass


class UnauthenticatedError(DomainException):
    """Missing or invalid session, or bad credentials"""

    pass


class InvalidInputError(DomainException):
    """Request violates an operation precondition"""

    pass


class InternalError(DomainException):
    """Store returned something inconsistent with what was just written"""

    pass
