"""Service for uploading files to Supabase Storage."""

import asyncio
import os
from typing import Any, Dict, Optional
import httpx
from pydantic_settings import BaseSettings
from supabase import Client, ClientOptions, StorageException, SupabaseException, create_client

from profile_form.utils.logger import get_logger

logger = get_logger(__name__)


class StorageSettings(BaseSettings):
    """Storage configuration settings."""

    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_key: str = os.getenv("SUPABASE_KEY", "")
    storage_bucket: str = os.getenv("STORAGE_BUCKET", "nome_do_seu_bucket")
    upload_timeout: float = float(os.getenv("UPLOAD_TIMEOUT", "30"))

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


class UploadError(RuntimeError):
    """The storage backend did not accept the file."""


class StorageService:
    """Service for storing files in a Supabase Storage bucket."""

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        client: Optional[Client] = None
    ):
        """
        Initialize storage service.

        Args:
            settings: Storage settings (uses defaults if None)
            client: Supabase client to reuse (created from settings on first upload if None)
        """
        self.settings = settings or StorageSettings()
        self.bucket = self.settings.storage_bucket
        self.timeout = self.settings.upload_timeout
        self._client = client

    @property
    def client(self) -> Client:
        """
        The Supabase client, created on first use.

        Raises:
            UploadError: If the URL or key is missing or malformed
        """
        if self._client is None:
            if not self.settings.supabase_url:
                raise UploadError("Storage URL is not configured (set SUPABASE_URL)")

            options = ClientOptions(storage_client_timeout=int(self.timeout))
            try:
                self._client = create_client(
                    self.settings.supabase_url,
                    self.settings.supabase_key,
                    options=options
                )
            except SupabaseException as e:
                raise UploadError(f"Invalid storage configuration: {e}") from e
        return self._client

    def _file_options(self, content_type: str) -> Dict[str, str]:
        return {
            "content-type": content_type,
            "cache-control": "3600",
            "x-upsert": "false",
        }

    def _upload_blocking(self, key: str, content: bytes, content_type: str) -> Any:
        bucket = self.client.storage.from_(self.bucket)
        return bucket.upload(key, content, self._file_options(content_type))

    async def upload(
        self,
        key: str,
        content: bytes,
        content_type: str = "application/octet-stream"
    ) -> str:
        """
        Upload a file to the bucket.

        The Supabase client is synchronous, so the call runs in a worker thread.

        Args:
            key: Object key, used as given
            content: File bytes
            content_type: MIME type stored with the object

        Returns:
            str: The stored object key

        Raises:
            UploadError: If the client is not configured or the upload fails
        """
        logger.info("Uploading %s (%d bytes) to bucket %s", key, len(content), self.bucket)

        try:
            await asyncio.to_thread(self._upload_blocking, key, content, content_type)
        except StorageException as e:
            logger.warning("Upload of %s rejected: %s", key, e)
            raise UploadError(f"Storage rejected the upload: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning("Upload of %s timed out after %ss", key, self.timeout)
            raise UploadError(f"Upload timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.warning("Upload of %s failed: %s", key, e)
            raise UploadError(f"Failed to communicate with storage: {str(e)}") from e

        return key
