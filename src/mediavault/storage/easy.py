from __future__ import annotations

import logging
from typing import Optional

from .backends import MemoryBackend, S3Backend
from .base import StorageBackend
from .settings import StorageSettings, get_storage_settings

logger = logging.getLogger(__name__)


def easy_storage(
    backend: Optional[str] = None,
    *,
    settings: Optional[StorageSettings] = None,
    **kwargs,
) -> StorageBackend:
    """Build a storage backend from explicit arguments or ``STORAGE_*`` settings.

    Examples:
        >>> easy_storage(backend="memory")
        >>> easy_storage(backend="s3", bucket="media", region="eu-west-1")
    """
    settings = settings or get_storage_settings()
    kind = (backend or settings.backend).lower()

    if kind == "memory":
        logger.info("Using in-memory object storage")
        return MemoryBackend(**kwargs)

    if kind == "s3":
        secret = settings.s3_secret_key.get_secret_value() if settings.s3_secret_key else None
        bucket = kwargs.pop("bucket", settings.s3_bucket)
        if not bucket:
            raise ValueError("STORAGE_S3_BUCKET must be set for the s3 backend")
        params = {
            "region": settings.s3_region,
            "endpoint_url": settings.s3_endpoint_url,
            "access_key": settings.s3_access_key,
            "secret_key": secret,
            "public_base_url": settings.public_base_url,
        }
        params.update(kwargs)
        logger.info("Using S3 object storage (bucket=%s)", bucket)
        return S3Backend(bucket, **params)

    raise ValueError(f"Unknown storage backend: {kind!r}")
