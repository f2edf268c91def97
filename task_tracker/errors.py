"""Error taxonomy: the closed set of failure kinds the API can report.

Every expected failure is raised as an AppError carrying one ErrorKind. The
status code for a kind lives only in STATUS_BY_KIND, so handlers never pick
HTTP codes themselves.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    STORE_FAILURE = "store_failure"
    UNKNOWN = "unknown"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INVALID_TOKEN: 403,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.FOREIGN_KEY_VIOLATION: 400,
    ErrorKind.STORE_FAILURE: 500,
    ErrorKind.UNKNOWN: 500,
}

# Kinds whose response must invite the client to (re)authenticate
CHALLENGE_KINDS = frozenset({ErrorKind.UNAUTHENTICATED, ErrorKind.TOKEN_EXPIRED})

GENERIC_SERVER_MESSAGE = "An unexpected error occurred on the server."


class AppError(Exception):
    """Base exception for every failure the responder knows how to render."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    default_message: str = GENERIC_SERVER_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    def to_response(self, debug: bool = False) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationFailed(AppError):
    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Validation failed."

    def __init__(self, violations: Sequence[Any], message: Optional[str] = None):
        super().__init__(message)
        self.violations = list(violations)

    def to_response(self, debug: bool = False) -> Dict[str, Any]:
        errors: List[Dict[str, Any]] = [v.to_dict(include_value=debug) for v in self.violations]
        return {"message": self.message, "errors": errors}


class Unauthenticated(AppError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authentication token not provided."


class InvalidCredentials(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Incorrect email or password."


class InvalidToken(AppError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid authentication token."


class TokenExpired(AppError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Authentication token has expired."


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found."


class Conflict(AppError):
    kind = ErrorKind.CONFLICT
    default_message = "The resource you are trying to create already exists."


class ForeignKeyViolation(AppError):
    kind = ErrorKind.FOREIGN_KEY_VIOLATION
    default_message = "A related resource was not found or is invalid."


class StoreFailure(AppError):
    kind = ErrorKind.STORE_FAILURE


def classify_integrity_error(exc: IntegrityError) -> AppError:
    """Map a driver-level constraint violation onto the taxonomy."""
    detail = str(getattr(exc, "orig", exc)).lower()
    if "foreign key" in detail:
        return ForeignKeyViolation()
    if "unique" in detail or "duplicate" in detail:
        return Conflict()
    return StoreFailure()
