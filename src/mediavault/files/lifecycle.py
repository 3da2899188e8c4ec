"""Upload, edit, count and delete file records together with their stored objects.

Ordering rules:

* upload writes the object before the record; a failed object write leaves
  nothing behind, a failed record write leaks the object (logged with its id);
* delete removes the object before the record; a failed object delete keeps
  the record so metadata never points at nothing without anyone knowing;
* owner usage counters are adjusted last and best effort.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from bson import ObjectId

from mediavault.auth.repository import UserRepository
from mediavault.exceptions import (
    ForbiddenError,
    InvalidInputError,
    MediaVaultError,
    NotFoundError,
)
from mediavault.models import parse_model
from mediavault.storage.base import (
    DELETE_FALLBACK_ORDER,
    DeleteOutcome,
    ResourceType,
    StorageBackend,
    StorageError,
    build_object_id,
    resolve_resource_type,
)
from mediavault.utils import format_bytes, utcnow

from .keywords import derive_search_keywords, file_type_from_mime
from .models import (
    FilePatch,
    FileRecord,
    FileStats,
    FileTypeStats,
    IncomingFile,
    MediaMetadata,
    UploadForm,
)
from .repository import FileRepository
from .settings import UploadSettings

logger = logging.getLogger(__name__)


def _keywords_for(record: FileRecord) -> list[str]:
    return derive_search_keywords(
        title=record.title,
        description=record.description,
        tags=record.tags,
        original_name=record.original_name,
        file_type=record.file_type,
        category=record.category,
    )


class FileLifecycleManager:
    def __init__(
        self,
        files: FileRepository,
        users: UserRepository,
        storage: StorageBackend,
        *,
        upload_settings: Optional[UploadSettings] = None,
        storage_folder: str = "multimedia-app",
        clock: Callable[[], datetime] = utcnow,
    ):
        self.files = files
        self.users = users
        self.storage = storage
        self.upload_settings = upload_settings or UploadSettings()
        self.storage_folder = storage_folder
        self.clock = clock

    # ------------------------------------------------------------------ upload
    def check_upload(self, incoming: Optional[IncomingFile]) -> None:
        if incoming is None or not incoming.filename:
            raise InvalidInputError("No file uploaded")
        if incoming.size == 0:
            raise InvalidInputError("Uploaded file is empty")
        mime = (incoming.content_type or "").lower()
        if mime not in self.upload_settings.allowed_mime_type_set:
            raise InvalidInputError(f"File type {incoming.content_type} is not allowed")
        if incoming.size > self.upload_settings.max_file_size:
            raise InvalidInputError(
                f"File too large. Maximum size is {format_bytes(self.upload_settings.max_file_size)}"
            )

    async def upload(
        self,
        owner_id: str,
        incoming: Optional[IncomingFile],
        form: UploadForm | dict[str, Any] | None = None,
    ) -> FileRecord:
        self.check_upload(incoming)
        if not isinstance(form, UploadForm):
            form = parse_model(UploadForm, form or {})

        mime = incoming.content_type.lower()
        resource_type = resolve_resource_type(mime)
        object_id = build_object_id(self.storage_folder, incoming.filename)

        # nothing has been written yet, so a storage failure needs no cleanup
        stored = await self.storage.put(
            object_id,
            incoming.data,
            mime,
            resource_type=resource_type,
            filename=incoming.filename,
        )

        now = self.clock()
        record = FileRecord(
            id=str(ObjectId()),
            title=form.title or incoming.filename,
            description=form.description,
            original_name=incoming.filename,
            storage_object_id=stored.object_id,
            storage_resource_type=str(stored.resource_type),
            url=stored.url,
            secure_url=stored.secure_url,
            file_type=file_type_from_mime(mime),
            mime_type=mime,
            size=stored.size,
            tags=form.tags,
            category=form.category,
            is_public=form.is_public,
            owner_id=owner_id,
            metadata=MediaMetadata(width=stored.width, height=stored.height, format=stored.format),
            created_at=now,
            updated_at=now,
        )
        record.search_keywords = _keywords_for(record)

        try:
            await self.files.insert(record)
        except MediaVaultError:
            logger.error(
                "Record write failed after upload; stored object %s (%s) is orphaned",
                stored.object_id,
                stored.resource_type,
                extra={"user_id": owner_id, "file_id": record.id, "object_id": stored.object_id},
            )
            raise

        await self._adjust_usage(owner_id, files=1, size=record.size)
        logger.info(
            "File %s uploaded by %s (%d bytes)",
            record.id,
            owner_id,
            record.size,
            extra={"user_id": owner_id, "file_id": record.id, "object_id": stored.object_id},
        )
        return record

    # ------------------------------------------------------------------ delete
    async def delete(self, owner_id: str, file_id: str) -> None:
        record = await self.files.get(file_id)
        if record is None:
            raise NotFoundError("File not found")
        if record.owner_id != owner_id:
            raise ForbiddenError("Access denied. You can only delete your own files.")

        await self._delete_object(record)

        if not await self.files.delete(file_id, owner_id):
            # removed concurrently; the other request owns the counter update
            raise NotFoundError("File not found")
        await self._adjust_usage(owner_id, files=-1, size=-record.size)
        logger.info(
            "File %s deleted by %s",
            file_id,
            owner_id,
            extra={"user_id": owner_id, "file_id": file_id, "object_id": record.storage_object_id},
        )

    async def _delete_object(self, record: FileRecord) -> DeleteOutcome:
        if record.storage_resource_type:
            return await self.storage.delete(
                record.storage_object_id, ResourceType(record.storage_resource_type)
            )

        # legacy records do not know their resource type
        for resource_type in DELETE_FALLBACK_ORDER:
            try:
                outcome = await self.storage.delete(record.storage_object_id, resource_type)
            except StorageError as exc:
                logger.info(
                    "Delete of %s as %s failed, trying next type: %s",
                    record.storage_object_id,
                    resource_type,
                    exc,
                    extra={"file_id": record.id, "object_id": record.storage_object_id},
                )
                continue
            return outcome
        raise StorageError("Could not delete file with any resource type")

    # ------------------------------------------------------------------ read / edit
    async def get(self, viewer_id: str, file_id: str) -> FileRecord:
        record = await self.files.get(file_id)
        # private files of other owners look exactly like missing ones
        if record is None or (record.owner_id != viewer_id and not record.is_public):
            raise NotFoundError("File not found")
        return record

    async def update(
        self, owner_id: str, file_id: str, patch: FilePatch | dict[str, Any]
    ) -> FileRecord:
        if not isinstance(patch, FilePatch):
            patch = parse_model(FilePatch, patch)

        record = await self.files.get(file_id)
        if record is None:
            raise NotFoundError("File not found")
        if record.owner_id != owner_id:
            raise ForbiddenError("Access denied. You can only update your own files.")

        changes = patch.changes()
        merged = record.model_copy(update=changes)
        changes["search_keywords"] = _keywords_for(merged)
        changes["updated_at"] = self.clock()

        updated = await self.files.update(file_id, owner_id, changes)
        if updated is None:
            raise NotFoundError("File not found")
        return updated

    async def increment_view(self, viewer_id: str, file_id: str) -> int:
        count = await self.files.increment(file_id, viewer_id, "view_count")
        if count is None:
            raise NotFoundError("File not found")
        return count

    async def record_download(self, viewer_id: str, file_id: str) -> int:
        count = await self.files.increment(file_id, viewer_id, "download_count")
        if count is None:
            raise NotFoundError("File not found")
        return count

    # ------------------------------------------------------------------ usage
    async def stats(self, owner_id: str) -> FileStats:
        rows = await self.files.stats_by_type(owner_id)
        total_size = sum(r["total_size"] for r in rows)
        return FileStats(
            total_files=sum(r["count"] for r in rows),
            total_size=total_size,
            total_size_formatted=format_bytes(total_size),
            total_views=sum(r["total_views"] for r in rows),
            file_types=[
                FileTypeStats(
                    type=r["type"],
                    count=r["count"],
                    total_size=r["total_size"],
                    total_size_formatted=format_bytes(r["total_size"]),
                    total_views=r["total_views"],
                )
                for r in rows
            ],
        )

    async def recompute_usage(self, owner_id: str) -> tuple[int, int]:
        """Derive ``(total_files, storage_used)`` from the records and store it on the user."""
        stats = await self.stats(owner_id)
        try:
            await self.users.set_usage(
                owner_id, total_files=stats.total_files, storage_used=stats.total_size
            )
        except MediaVaultError as exc:
            logger.warning(
                "Failed to write back usage for user %s: %s",
                owner_id,
                exc,
                extra={"user_id": owner_id},
            )
        return stats.total_files, stats.total_size

    async def _adjust_usage(self, owner_id: str, *, files: int, size: int) -> None:
        try:
            await self.users.adjust_usage(owner_id, files=files, size=size)
        except MediaVaultError as exc:
            logger.warning(
                "Usage counter update for user %s failed (files %+d, bytes %+d): %s",
                owner_id,
                files,
                size,
                exc,
                extra={"user_id": owner_id},
            )
