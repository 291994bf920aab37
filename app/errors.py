# app/errors.py
from __future__ import annotations

import errno
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure classes surfaced by the operation layer and the auth gate."""
    NOT_FOUND = "NotFound"
    PARENT_NOT_FOUND = "ParentNotFound"
    BAD_TYPE = "BadType"
    ALREADY_EXISTS = "AlreadyExists"
    NOT_EMPTY = "NotEmpty"
    BAD_REQUEST = "BadRequest"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    UNAUTHORIZED = "Unauthorized"
    CONFLICT = "Conflict"
    INTERNAL = "Internal"


class ApiError(Exception):
    """
    Structured failure: a kind, a human message and a machine code.
    Transports render it as {"error": message, "code": code}.
    """
    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_code: str = "INTERNAL"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_code = "NOT_FOUND"


class ParentNotFoundError(ApiError):
    kind = ErrorKind.PARENT_NOT_FOUND
    status_code = 404
    default_code = "PARENT_NOT_FOUND"


class BadTypeError(ApiError):
    kind = ErrorKind.BAD_TYPE
    status_code = 400
    default_code = "BAD_TYPE"


class AlreadyExistsError(ApiError):
    kind = ErrorKind.ALREADY_EXISTS
    status_code = 409
    default_code = "ALREADY_EXISTS"


class NotEmptyError(ApiError):
    kind = ErrorKind.NOT_EMPTY
    status_code = 409
    default_code = "NOT_EMPTY"


class BadRequestError(ApiError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400
    default_code = "BAD_REQUEST"


class PayloadTooLargeError(ApiError):
    kind = ErrorKind.PAYLOAD_TOO_LARGE
    status_code = 413
    default_code = "PAYLOAD_TOO_LARGE"


class UnauthorizedError(ApiError):
    kind = ErrorKind.UNAUTHORIZED
    status_code = 401
    default_code = "TOKEN_INVALID"


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    default_code = "CONFLICT"


class InternalError(ApiError):
    kind = ErrorKind.INTERNAL
    status_code = 500
    default_code = "INTERNAL"


_ERRNO_ERRORS = {
    errno.ENOENT: NotFoundError,
    errno.ENOTDIR: BadTypeError,
    errno.EISDIR: BadTypeError,
    errno.EEXIST: AlreadyExistsError,
    errno.ENOTEMPTY: NotEmptyError,
}


def classify_os_error(exc: OSError, path: str) -> ApiError:
    """
    Translate an OS-level failure into the structured taxonomy.
    Unrecognized errno values become Internal with the raw message attached.
    """
    shown = path or "/"
    cls = _ERRNO_ERRORS.get(exc.errno)
    if cls is None:
        return InternalError("Internal server error", details=f"{exc.strerror or exc}: {shown}")
    return cls(f"{exc.strerror or cls.kind.value}: {shown}")
