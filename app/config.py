# app/config.py
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Sandboxed tree (created at startup if absent)
    DATA_ROOT: Path = Path("./data")
    # "contain": escaping paths collapse to their basename; "reject": 400
    TRAVERSAL_POLICY: Literal["contain", "reject"] = "contain"

    # Transfers
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024
    READ_CHUNK_SIZE: int = 64 * 1024

    # Optional pre-registered bearer token; otherwise set once via /api/auth/setup
    AUTH_TOKEN: str | None = None

    # HTTP transport
    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = 3000

    # Browser origins (comma separated, "*" for any)
    HTTP_ALLOWED_ORIGINS: str = "*"
    HTTP_ALLOW_NO_ORIGIN: bool = True            # allow non-browser clients

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
