"""
Blob storage and content fetching.

Uploaded files are written to local disk and served back over HTTP; pipelines
only ever read content back through the public URL with a plain fetch.
"""

import logging
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote

import httpx

from productflow.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Blob could not be written."""


class InvalidKeyError(StorageError):
    """Key resolves outside the storage root."""


class LocalBlobStorage:
    """Filesystem-backed blob store; files are served under ``/files``."""

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None) -> None:
        self.root = Path(root or settings.STORAGE_ROOT)
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def _path_for(self, key: str) -> Path:
        normalized = key.lstrip("/")
        path = (self.root / normalized).resolve()
        if self.root.resolve() not in path.parents:
            raise InvalidKeyError(f"Invalid storage key: {key}")
        return path

    def url_for(self, key: str) -> str:
        """Public URL of ``key``; path segments are percent-encoded."""
        return f"{self.public_base_url}/files/{quote(key.lstrip('/'), safe='/')}"

    def put(self, key: str, data: bytes, mime_type: str) -> Dict[str, str]:
        """Write ``data`` under ``key`` and return ``{"key", "url"}``."""
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to store {key}: {exc}") from exc

        logger.info("Stored blob key=%s bytes=%d mime=%s", key, len(data), mime_type)
        return {"key": key.lstrip("/"), "url": self.url_for(key)}

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning("Failed to delete blob key=%s: %s", key, exc)


class ContentFetcher:
    """Read stored file content back over HTTP."""

    def __init__(self, timeout_seconds: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout_seconds = timeout_seconds or settings.FILE_FETCH_TIMEOUT_SECONDS
        self._transport = transport

    async def fetch_text(self, url: str) -> str:
        """Body of ``url`` as text. Raises ``httpx.HTTPError`` on transport errors and error statuses."""
        timeout = httpx.Timeout(self.timeout_seconds)
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=self._transport) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
