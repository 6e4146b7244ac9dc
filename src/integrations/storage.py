"""Supabase Storage helpers for generated and original images."""

from __future__ import annotations

from typing import Any, List, Optional

from config.database import get_supabase_client
from core.logging import LoggerMixin
from generation.errors import StorageError
from generation.models import StoredBlob


class BlobStorage(LoggerMixin):
    """Upload, resolve and remove objects in Supabase Storage buckets."""

    def __init__(self, supabase: Optional[Any] = None) -> None:
        self._supabase = supabase or get_supabase_client()

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> StoredBlob:
        """
        Upload bytes and return the blob with its public URL.

        Raises:
            StorageError: If the upload is rejected
        """
        try:
            self._supabase.storage.from_(bucket).upload(
                path,
                data,
                {"content-type": content_type},
            )
        except Exception as e:
            raise StorageError(f"Storage upload failed: {e}", bucket=bucket, path=path) from e

        self.logger.info("Uploaded blob", bucket=bucket, path=path, size=len(data))
        return StoredBlob(bucket=bucket, path=path, public_url=self.public_url(bucket, path))

    def public_url(self, bucket: str, path: str) -> str:
        url = self._supabase.storage.from_(bucket).get_public_url(path)
        # Some storage3 releases append an empty query string
        return url.rstrip("?") if isinstance(url, str) else url

    def remove(self, bucket: str, paths: List[str]) -> None:
        """
        Delete objects from a bucket.

        Raises:
            StorageError: If the delete is rejected
        """
        if not paths:
            return
        try:
            self._supabase.storage.from_(bucket).remove(paths)
        except Exception as e:
            raise StorageError(f"Storage remove failed: {e}", bucket=bucket) from e
        self.logger.info("Removed blobs", bucket=bucket, count=len(paths))
