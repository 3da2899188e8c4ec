from __future__ import annotations

import logging
from typing import Optional

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from ..base import DeleteOutcome, ResourceType, StorageBackend, StorageError, StoredObject, guess_format

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_missing(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code")) in _MISSING_CODES


class S3Backend(StorageBackend):
    """S3-compatible object store (AWS, MinIO, R2...).

    Objects are keyed ``<resource_type>/<object_id>`` so the same id uploaded
    as an image and as raw bytes never collide, mirroring how typed media
    providers namespace assets.
    """

    name = "s3"

    def __init__(
        self,
        bucket: str,
        *,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
        session: Optional[aioboto3.Session] = None,
    ):
        if not bucket:
            raise ValueError("S3 bucket is required")
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._session = session or aioboto3.Session()

    def _client(self):
        return self._session.client(
            "s3",
            region_name=self.region,
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self._access_key,
            aws_secret_access_key=self._secret_key,
        )

    @staticmethod
    def key_for(object_id: str, resource_type: ResourceType) -> str:
        return f"{resource_type}/{object_id}"

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def put(self, object_id, data, content_type, *, resource_type, filename=None):
        key = self.key_for(object_id, resource_type)
        try:
            async with self._client() as s3:
                await s3.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc, extra={"object_id": key})
            raise StorageError(f"Failed to upload file to storage: {exc}") from exc
        url = self.url_for(key)
        secure = url.replace("http://", "https://", 1) if url.startswith("http://") else url
        return StoredObject(
            object_id=object_id,
            resource_type=resource_type,
            url=url,
            secure_url=secure,
            size=len(data),
            format=guess_format(filename, content_type),
        )

    async def delete(self, object_id, resource_type):
        key = self.key_for(object_id, resource_type)
        try:
            async with self._client() as s3:
                try:
                    await s3.head_object(Bucket=self.bucket, Key=key)
                except ClientError as exc:
                    if _is_missing(exc):
                        return DeleteOutcome.NOT_FOUND
                    raise
                await s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to delete file from storage: {exc}") from exc
        return DeleteOutcome.OK

    async def exists(self, object_id, resource_type):
        key = self.key_for(object_id, resource_type)
        try:
            async with self._client() as s3:
                await s3.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_missing(exc):
                return False
            raise StorageError(str(exc)) from exc
        except BotoCoreError as exc:
            raise StorageError(str(exc)) from exc
        return True

    async def ping(self) -> bool:
        try:
            async with self._client() as s3:
                await s3.head_bucket(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as exc:
            logger.warning("S3 bucket %s unreachable: %s", self.bucket, exc)
            return False
        return True
