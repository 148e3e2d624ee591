"""Object storage for rendered PDFs."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Tuple

from .errors import StorageError
from .log import get_logger
from .schemas import DocumentCategory

logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def pdf_object_key(user_id: str, category: DocumentCategory, day: date) -> str:
    """Return ``{user}/{category}/{category}-guide-{YYYY-MM-DD}.pdf``."""

    kind = DocumentCategory(category).value
    return f"{user_id}/{kind}/{kind}-guide-{day.isoformat()}.pdf"


class ObjectStorage(ABC):
    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> str:
        """Store ``data`` at ``key`` (overwriting) and return its public URL."""

    @abstractmethod
    async def remove(self, key: str) -> None: ...


class InMemoryObjectStorage(ObjectStorage):
    """Keep uploaded objects in a dict; used for local runs and tests."""

    def __init__(self, base_url: str = "memory://business-documents") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, Tuple[bytes, str]] = {}

    async def upload(self, key: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> str:
        self.objects[key] = (data, content_type)
        return f"{self.base_url}/{key}"

    async def remove(self, key: str) -> None:
        self.objects.pop(key, None)


class SupabaseObjectStorage(ObjectStorage):
    """Upload to a Supabase Storage bucket with ``upsert`` enabled."""

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    def _bucket(self) -> Any:
        return self._client.storage.from_(self.bucket)

    async def upload(self, key: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> str:
        def _upload() -> str:
            self._bucket().upload(
                key,
                data,
                {"content-type": content_type, "upsert": "true"},
            )
            return self._bucket().get_public_url(key)

        try:
            url = await asyncio.to_thread(_upload)
        except Exception as exc:
            message = str(exc)
            logger.error("Error uploading %s to bucket %s: %s", key, self.bucket, message)
            if "permission" in message or "policy" in message:
                logger.error("Storage permission error; check policies on bucket %s", self.bucket)
            elif "bucket" in message or "not found" in message:
                logger.error("Bucket %s is missing or misconfigured", self.bucket)
            raise StorageError(f"Upload of {key} failed: {message}") from exc
        return url.rstrip("?")

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(lambda: self._bucket().remove([key]))
        except Exception as exc:
            logger.error("Error deleting %s from bucket %s: %s", key, self.bucket, exc)
            raise StorageError(f"Delete of {key} failed: {exc}") from exc
