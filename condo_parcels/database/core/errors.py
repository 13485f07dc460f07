"""Service layer exception classes.

Every failure a caller can see carries a stable ``ErrorKind`` and a message
that says what to correct. The HTTP layer maps kinds to status codes.

Exception Hierarchy:
    DomainError (base)
    ├── ValidationError
    │   └── InvalidStatusError
    ├── NotFoundError
    ├── ForbiddenError
    ├── UnauthorizedError
    └── ConflictError
"""

import enum

from condo_parcels.database.entities.package import PackageStatus


class ErrorKind(str, enum.Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHORIZED = "UNAUTHORIZED"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class DomainError(Exception):
    """Base exception for all service layer errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ValidationError(DomainError):
    """Raised when a request is missing a field or carries a malformed value."""

    kind = ErrorKind.VALIDATION_ERROR


class InvalidStatusError(ValidationError):
    """Raised when a status outside ARRIVED / PICKED_UP / RETURNED is requested.

    Example:
        >>> raise InvalidStatusError("BOGUS")
        InvalidStatusError: Invalid status 'BOGUS'; expected one of ARRIVED, PICKED_UP, RETURNED
    """

    def __init__(self, status):
        self.status = status
        super().__init__(
            f"Invalid status '{status}'; expected one of {', '.join(PackageStatus.values())}"
        )


class NotFoundError(DomainError):
    """Raised when a referenced package, tenant, staff member or directory row does not exist."""

    kind = ErrorKind.NOT_FOUND


class ForbiddenError(DomainError):
    """Raised when the caller is authenticated but may not touch the resource."""

    kind = ErrorKind.FORBIDDEN


class UnauthorizedError(DomainError):
    """Raised when the token is missing, malformed or expired, or credentials are wrong."""

    kind = ErrorKind.UNAUTHORIZED


class ConflictError(DomainError):
    """Raised on duplicate keys or a cascade blocked by unexpected dependent rows."""

    kind = ErrorKind.CONFLICT


def from_integrity_error(exc, detail: str | None = None) -> DomainError:
    """Map a database constraint violation to the matching domain error.

    Foreign-key violations mean the request referenced something that does not
    exist (``ValidationError``); anything else is treated as a duplicate key
    (``ConflictError``).
    """
    message = str(getattr(exc, "orig", exc)).lower()
    if "foreign key" in message:
        return ValidationError(detail or "Referenced record does not exist")
    return ConflictError(detail or "Record conflicts with an existing one")
