from .base import (
    DeleteOutcome,
    ResourceType,
    StorageBackend,
    StorageError,
    StoredObject,
    build_object_id,
    resolve_resource_type,
)
from .easy import easy_storage
from .settings import StorageSettings, get_storage_settings

__all__ = [
    "DeleteOutcome",
    "ResourceType",
    "StorageBackend",
    "StorageError",
    "StorageSettings",
    "StoredObject",
    "build_object_id",
    "easy_storage",
    "get_storage_settings",
    "resolve_resource_type",
]
