from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

from mediavault.utils import utcnow

from ..base import DeleteOutcome, ResourceType, StorageBackend, StoredObject, guess_format


@dataclass
class _Blob:
    data: bytes
    content_type: str
    created_at: datetime = field(default_factory=utcnow)


class MemoryBackend(StorageBackend):
    """Process-local object store for tests and local runs."""

    name = "memory"

    def __init__(self, base_url: str = "memory://"):
        self.base_url = base_url
        self._objects: dict[str, _Blob] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _key(object_id: str, resource_type: ResourceType) -> str:
        return f"{resource_type}/{object_id}"

    def url_for(self, object_id: str, resource_type: ResourceType) -> str:
        return f"{self.base_url}{self._key(object_id, resource_type)}"

    async def put(self, object_id, data, content_type, *, resource_type, filename=None):
        async with self._lock:
            self._objects[self._key(object_id, resource_type)] = _Blob(data, content_type)
        url = self.url_for(object_id, resource_type)
        return StoredObject(
            object_id=object_id,
            resource_type=resource_type,
            url=url,
            secure_url=url,
            size=len(data),
            format=guess_format(filename, content_type),
        )

    async def delete(self, object_id, resource_type):
        async with self._lock:
            blob = self._objects.pop(self._key(object_id, resource_type), None)
        return DeleteOutcome.OK if blob is not None else DeleteOutcome.NOT_FOUND

    async def exists(self, object_id, resource_type):
        return self._key(object_id, resource_type) in self._objects

    async def get(self, object_id: str, resource_type: ResourceType) -> bytes | None:
        blob = self._objects.get(self._key(object_id, resource_type))
        return blob.data if blob else None

    def __len__(self) -> int:
        return len(self._objects)
