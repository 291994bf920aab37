# app/services/auth.py
import hmac
import logging
import threading
from typing import Optional

from app.errors import BadRequestError, ConflictError, UnauthorizedError
from app.logging import redact_str

logger = logging.getLogger(__name__)


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


class TokenStore:
    """
    Holds the single shared bearer token for the process.

    The token can be registered once (or pre-seeded from settings).
    Re-registering the identical token is accepted; a different one is a
    conflict and leaves the stored token untouched.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token.strip() if token and token.strip() else None
        self._lock = threading.Lock()

    def is_set(self) -> bool:
        return self._token is not None

    def set_token(self, token) -> None:
        if not isinstance(token, str) or not token.strip():
            raise BadRequestError("Invalid token format", code="TOKEN_INVALID_FORMAT")
        candidate = token.strip()
        with self._lock:
            if self._token is None:
                self._token = candidate
                logger.info("auth token registered")
                return
            if _same(candidate, self._token):
                return
        logger.warning("auth setup rejected: a different token is already set")
        raise ConflictError("Token already set", code="TOKEN_ALREADY_SET")

    def check_authorization(self, header: Optional[str]) -> None:
        """Raise UnauthorizedError unless `header` is 'Bearer <registered token>'."""
        if not header or not header.startswith("Bearer "):
            logger.warning("request without bearer token")
            raise UnauthorizedError("No token provided", code="TOKEN_MISSING")
        token = header.split(" ", 1)[1].strip()
        if self._token is None or not _same(token, self._token):
            logger.warning("invalid bearer token: %s", redact_str(header))
            raise UnauthorizedError("Invalid token", code="TOKEN_INVALID")
