"""
Blob Store Gateway - S3 / MinIO compatible object storage.

Issues presigned upload / download URLs and deletes objects by key. The
relational engines treat it as best-effort: failures surface as
``StorageError`` and callers decide whether the operation can proceed.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from backoffice.core.config import settings
from backoffice.core.errors import StorageError
from backoffice.storage.keys import build_storage_keys
from backoffice.utils.log_sanitizer import mask_storage_key, sanitize

logger = logging.getLogger(__name__)


@dataclass
class UploadUrlResult:
    upload_url: str
    storage_key: str
    thumbnail_storage_key: Optional[str]
    expires_at: datetime


class S3BlobStore:
    """
    Usage:
        store = S3BlobStore()
        result = store.generate_upload_url(account_id, "receipts", "image/jpeg", ".jpg")
        url = store.get_photo_url(result.storage_key)
    """

    def __init__(
        self,
        bucket: str = None,
        endpoint: str = None,
        public_endpoint: str = None,
        upload_expiry: int = None,
        download_expiry: int = None,
    ):
        self.bucket = bucket or settings.S3_BUCKET
        self.endpoint = endpoint or settings.S3_ENDPOINT
        self.public_endpoint = public_endpoint or settings.S3_PUBLIC_ENDPOINT
        self.upload_expiry = upload_expiry or settings.S3_UPLOAD_URL_EXPIRY
        self.download_expiry = download_expiry or settings.S3_DOWNLOAD_URL_EXPIRY
        self._client = None
        self._url_client = None

    def _make_client(self, endpoint: str):
        protocol = "https" if settings.S3_USE_SSL else "http"
        return boto3.client(
            "s3",
            endpoint_url=f"{protocol}://{endpoint}",
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            region_name=settings.S3_REGION,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )

    @property
    def client(self):
        """S3 client for internal operations (lazy)."""
        if self._client is None:
            self._client = self._make_client(self.endpoint)
        return self._client

    @property
    def url_client(self):
        """S3 client for presigned URLs; signs against the public endpoint."""
        if self._url_client is None:
            self._url_client = self._make_client(self.public_endpoint or self.endpoint)
        return self._url_client

    # -------------------------------------------------
    # PRESIGNED URLS
    # -------------------------------------------------

    def generate_upload_url(
        self,
        account_id: uuid.UUID,
        namespace: str,
        content_type: str,
        extension: str,
        original_file_name: Optional[str] = None,
        with_thumbnail: bool = True,
    ) -> UploadUrlResult:
        storage_key, thumbnail_key = build_storage_keys(account_id, namespace, extension)

        logger.info(
            "Generating upload URL for %s (%s)",
            mask_storage_key(storage_key),
            sanitize(original_file_name),
        )

        url = self.presigned_put_url(storage_key, content_type)
        return UploadUrlResult(
            upload_url=url,
            storage_key=storage_key,
            thumbnail_storage_key=thumbnail_key if with_thumbnail else None,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self.upload_expiry),
        )

    def presigned_put_url(self, storage_key: str, content_type: str) -> str:
        try:
            return self.url_client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": storage_key,
                    "ContentType": content_type,
                },
                ExpiresIn=self.upload_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to presign upload for %s: %s", mask_storage_key(storage_key), e)
            raise StorageError("Could not generate upload URL", original_error=e)

    def presigned_download_url(self, storage_key: str) -> str:
        try:
            return self.url_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": storage_key},
                ExpiresIn=self.download_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to presign download for %s: %s", mask_storage_key(storage_key), e)
            raise StorageError("Could not generate download URL", original_error=e)

    def get_photo_url(self, storage_key: str) -> str:
        return self.presigned_download_url(storage_key)

    def get_thumbnail_url(self, thumbnail_storage_key: str) -> str:
        return self.presigned_download_url(thumbnail_storage_key)

    # -------------------------------------------------
    # DELETION (idempotent: a missing object is not an error)
    # -------------------------------------------------

    def delete_file(self, storage_key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=storage_key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                return
            logger.error("Failed to delete %s: %s", mask_storage_key(storage_key), e)
            raise StorageError("Could not delete object", original_error=e)
        except BotoCoreError as e:
            logger.error("Failed to delete %s: %s", mask_storage_key(storage_key), e)
            raise StorageError("Could not delete object", original_error=e)

        logger.info("Deleted object %s", mask_storage_key(storage_key))

    def delete_photo(self, storage_key: str, thumbnail_storage_key: Optional[str] = None) -> None:
        self.delete_file(storage_key)
        if thumbnail_storage_key:
            self.delete_file(thumbnail_storage_key)


@lru_cache(maxsize=1)
def get_blob_store() -> S3BlobStore:
    return S3BlobStore()
