"""Object store contract.

Backends address objects by the opaque ``object_id`` they hand back from
:meth:`StorageBackend.put` plus the resource type the object was stored
under. Callers never build ids for objects they did not upload.
"""

from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePath
from typing import Optional
from uuid import uuid4

from mediavault.exceptions import UpstreamError


class ResourceType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    RAW = "raw"


class DeleteOutcome(StrEnum):
    OK = "ok"
    NOT_FOUND = "not_found"


# order tried when a record does not know how its object was stored
DELETE_FALLBACK_ORDER: tuple[ResourceType, ...] = (
    ResourceType.IMAGE,
    ResourceType.VIDEO,
    ResourceType.RAW,
)


@dataclass(frozen=True)
class StoredObject:
    object_id: str
    resource_type: ResourceType
    url: str
    secure_url: str
    size: int
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class StorageError(UpstreamError):
    default_message = "Object storage failure"


def resolve_resource_type(mime_type: str | None) -> ResourceType:
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return ResourceType.IMAGE
    # audio is stored alongside video by the providers we target
    if mime.startswith(("video/", "audio/")):
        return ResourceType.VIDEO
    return ResourceType.RAW


_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def build_object_id(
    folder: str,
    filename: str,
    *,
    now_ms: int | None = None,
    unique: str | None = None,
) -> str:
    """``<folder>/<epoch-ms>-<token>-<safe stem>.<ext>``.

    ``token`` is random unless ``unique`` is given, so uploads landing in the
    same millisecond get distinct ids even when their names sanitize alike.
    """
    path = PurePath(filename or "file")
    stem = _UNSAFE.sub("_", path.stem).strip("_") or "file"
    ext = _UNSAFE.sub("", path.suffix.lstrip(".")).lower()
    name = f"{stem}.{ext}" if ext else stem
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    token = unique if unique is not None else uuid4().hex[:8]
    key = f"{ts}-{token}-{name}"
    folder = folder.strip("/")
    return f"{folder}/{key}" if folder else key


def guess_format(filename: str | None, mime_type: str | None) -> Optional[str]:
    suffix = PurePath(filename or "").suffix.lstrip(".").lower()
    if suffix:
        return suffix
    if mime_type and "/" in mime_type:
        return mime_type.split("/", 1)[1].split(";", 1)[0].lower() or None
    return None


class StorageBackend(ABC):
    name: str = "storage"

    @abstractmethod
    async def put(
        self,
        object_id: str,
        data: bytes,
        content_type: str,
        *,
        resource_type: ResourceType,
        filename: str | None = None,
    ) -> StoredObject:
        """Store ``data``; raise :class:`StorageError` on failure."""

    @abstractmethod
    async def delete(self, object_id: str, resource_type: ResourceType) -> DeleteOutcome:
        """Remove the object stored under ``resource_type``; raise :class:`StorageError` on failure."""

    @abstractmethod
    async def exists(self, object_id: str, resource_type: ResourceType) -> bool: ...

    async def ping(self) -> bool:
        return True


__all__ = [
    "DELETE_FALLBACK_ORDER",
    "DeleteOutcome",
    "ResourceType",
    "StorageBackend",
    "StorageError",
    "StoredObject",
    "build_object_id",
    "guess_format",
    "resolve_resource_type",
]
