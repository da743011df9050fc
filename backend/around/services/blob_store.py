"""
Blob store adapter over MinIO / S3.

Media is written to a single bucket under the post's minted id and made
publicly readable at write time, so the returned locator can be fetched
by anyone, including the scoring service.
"""

import logging
from typing import BinaryIO, Optional

import urllib3
from minio import Minio
from minio.error import MinioException
from urllib3.exceptions import HTTPError, TimeoutError as UrllibTimeoutError

from around.core.config import settings
from around.core.errors import BlobStoreError

logger = logging.getLogger(__name__)

# Unknown stream length: upload in 10 MiB multipart chunks
PART_SIZE = 10 * 1024 * 1024

PUBLIC_READ_HEADERS = {"x-amz-acl": "public-read"}


def _is_timeout(error: Exception) -> bool:
    # Exhausted retries wrap the timeout in MaxRetryError.reason
    return isinstance(error, UrllibTimeoutError) or isinstance(
        getattr(error, "reason", None), UrllibTimeoutError
    )


class BlobStore:
    """
    Write-only media store returning public locators.

    Example:
        >>> blobs = BlobStore(build_client(), "around-media", "http://localhost:9000")
        >>> blobs.write("5b0e7c52", open("a.jpg", "rb"), "image/jpeg")
        'http://localhost:9000/around-media/5b0e7c52'
    """

    def __init__(self, client: Minio, bucket: str, public_base_url: str):
        self._client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    def public_url(self, object_name: str) -> str:
        return f"{self.public_base_url}/{self.bucket}/{object_name}"

    def write(
        self,
        object_name: str,
        stream: BinaryIO,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload ``stream`` as ``object_name`` with a public-read ACL.

        Returns:
            Public URL of the stored object

        Raises:
            BlobStoreError: Bucket missing or upload failed. ``timed_out`` is
                set when the upload may still have completed server side.
        """
        try:
            if not self._client.bucket_exists(bucket_name=self.bucket):
                raise BlobStoreError(f"Bucket {self.bucket} does not exist")

            self._client.put_object(
                bucket_name=self.bucket,
                object_name=object_name,
                data=stream,
                length=-1,
                part_size=PART_SIZE,
                content_type=content_type or "application/octet-stream",
                metadata=PUBLIC_READ_HEADERS,
            )
        except (MinioException, HTTPError) as e:
            raise BlobStoreError(
                f"Failed to write {object_name}: {e}", timed_out=_is_timeout(e)
            ) from e

        locator = self.public_url(object_name)
        logger.info(f"Media saved: {locator}")
        return locator


# ================================
# Client lifecycle
# ================================

_blob_store: Optional[BlobStore] = None


def build_client() -> Minio:
    """
    MinIO client whose socket operations are bounded by
    BLOB_STORE_TIMEOUT_SECONDS. Uploads are streamed, so they are not retried.
    """
    timeout = settings.BLOB_STORE_TIMEOUT_SECONDS
    http_client = urllib3.PoolManager(
        timeout=urllib3.Timeout(connect=timeout, read=timeout),
        retries=urllib3.Retry(total=0),
    )
    return Minio(
        endpoint=settings.MINIO_ENDPOINT,
        access_key=settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_SECRET_KEY,
        secure=settings.MINIO_SECURE,
        http_client=http_client,
    )


def get_blob_store() -> BlobStore:
    """Get the shared blob store (created on first use)."""
    global _blob_store

    if _blob_store is None:
        logger.info(
            f"MinIO client initialized (endpoint={settings.MINIO_ENDPOINT}, "
            f"bucket={settings.MEDIA_BUCKET})"
        )
        _blob_store = BlobStore(
            build_client(),
            settings.MEDIA_BUCKET,
            settings.media_public_base_url,
        )

    return _blob_store
