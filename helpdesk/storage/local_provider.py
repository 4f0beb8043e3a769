"""
Local filesystem storage provider.
Upload and download URLs point back at this API and carry a short-lived signature.
"""
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import structlog

from ..auth.security import create_file_token
from ..config import settings
from .provider import StorageProvider


log = structlog.get_logger(__name__)


class LocalStorageProvider(StorageProvider):
    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.storage_dir)
        (self.base_dir / "uploads").mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        clean_key = key.lstrip("/").replace("..", "").replace("\\", "/")
        return self.base_dir / "uploads" / clean_key

    def _url(self, key: str, purpose: str, expires_s: int) -> str:
        token = create_file_token(key, purpose, expires_s)
        return f"{settings.public_base_url}/api/files/local/{quote(key.lstrip('/'))}?token={token}"

    def generate_upload_url(self, key: str, content_type: str, expires_s: int) -> str:
        return self._url(key, "upload", expires_s)

    def get_download_url(self, key: str, expires_s: int) -> Optional[str]:
        if not self.exists(key):
            return None
        return self._url(key, "download", expires_s)

    def exists(self, key: str) -> bool:
        return self._get_path(key).is_file()

    def write(self, key: str, data: bytes) -> None:
        path = self._get_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        log.info("file_stored", key=key, size=len(data))

    def read(self, key: str) -> bytes:
        return self._get_path(key).read_bytes()
