# app/services/paths.py
import os
from pathlib import Path
from typing import Literal

from app.errors import BadRequestError

TraversalPolicy = Literal["contain", "reject"]


class PathSanitizer:
    """
    Turn an untrusted path string into a root-relative path.

    Resolution is purely lexical: '.' and '..' segments are collapsed against
    the root without touching the filesystem and symlinks are not followed.
    Backslashes count as separators. Percent-encoded sequences are taken
    literally (decoding belongs to the transport).

    A candidate that lands outside the root is handled per policy:
      - "contain": keep only its final segment, so it becomes a root-level name
      - "reject":  raise BadRequestError

    Results use forward slashes, never start with '/', and the root itself
    is the empty string.
    """

    def __init__(self, root: Path, policy: TraversalPolicy = "contain"):
        self.root = os.path.normpath(os.path.abspath(os.fspath(root)))
        self.policy = policy

    def _contains(self, candidate: str) -> bool:
        if candidate == self.root:
            return True
        prefix = self.root if self.root.endswith(os.sep) else self.root + os.sep
        return candidate.startswith(prefix)

    def sanitize(self, raw: str) -> str:
        candidate = os.path.normpath(os.path.join(self.root, raw.replace("\\", "/")))
        if self._contains(candidate):
            rel = os.path.relpath(candidate, self.root)
            return "" if rel == os.curdir else rel.replace(os.sep, "/")

        if self.policy == "reject":
            raise BadRequestError("Path escapes the root directory", code="PATH_ESCAPES_ROOT")
        return os.path.basename(candidate)

    def resolve(self, rel: str) -> Path:
        """Join an already sanitized path onto the root."""
        return Path(self.root, rel) if rel else Path(self.root)
