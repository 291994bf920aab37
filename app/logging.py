# app/logging.py
import logging
import os
import re
from typing import Optional

BEARER_RE = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_str(s: str) -> str:
    return BEARER_RE.sub(r"\1[redacted-token]", s)


def log_fs_call(logger: logging.Logger, op: str, path: str):
    logger.info("fs_call %s /%s", op, path)
