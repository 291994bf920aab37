# app/di.py
from dataclasses import dataclass
from typing import Optional

from app.config import Settings
from app.services.auth import TokenStore
from app.services.filesystem import FileSystemService
from app.services.paths import PathSanitizer

@dataclass
class Container:
    settings: Settings
    sanitizer: PathSanitizer
    fs_service: FileSystemService
    token_store: TokenStore

def build_container(settings: Optional[Settings] = None) -> Container:
    s = settings or Settings()
    sanitizer = PathSanitizer(s.DATA_ROOT, policy=s.TRAVERSAL_POLICY)
    fs = FileSystemService(sanitizer, max_upload_bytes=s.MAX_UPLOAD_BYTES,
                           chunk_size=s.READ_CHUNK_SIZE)
    tokens = TokenStore(s.AUTH_TOKEN)

    return Container(s, sanitizer, fs, tokens)
