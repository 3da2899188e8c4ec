from __future__ import annotations

from typing import Any, Optional

from .models import FileRecord
from .repository import FileFilter, FileRepository


class InMemoryFileRepository(FileRepository):
    """Insertion ordered store; insertion order plays the role of ``_id`` order."""

    def __init__(self) -> None:
        self._records: dict[str, FileRecord] = {}

    def _ordered(self, where: FileFilter) -> list[FileRecord]:
        return [r for r in self._records.values() if where.matches(r)]

    async def insert(self, record: FileRecord) -> FileRecord:
        self._records[record.id] = record.model_copy(deep=True)
        return record

    async def get(self, file_id: str) -> Optional[FileRecord]:
        record = self._records.get(file_id)
        return record.model_copy(deep=True) if record else None

    async def update(self, file_id, owner_id, fields):
        record = self._records.get(file_id)
        if record is None or record.owner_id != owner_id:
            return None
        # re-validate so enum values and nested models keep their shape
        updated = FileRecord.model_validate({**record.model_dump(), **fields})
        self._records[file_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, file_id, owner_id):
        record = self._records.get(file_id)
        if record is None or record.owner_id != owner_id:
            return False
        del self._records[file_id]
        return True

    async def increment(self, file_id, viewer_id, field):
        record = self._records.get(file_id)
        if record is None or not (record.owner_id == viewer_id or record.is_public):
            return None
        value = getattr(record, field) + 1
        self._records[file_id] = record.model_copy(update={field: value})
        return value

    async def count(self, where):
        return len(self._ordered(where))

    async def list_sorted(self, where, *, sort_field, descending, offset, limit):
        position = {file_id: i for i, file_id in enumerate(self._records)}
        rows = sorted(
            self._ordered(where),
            key=lambda r: (getattr(r, sort_field), position[r.id]),
            reverse=descending,
        )
        return [r.model_copy(deep=True) for r in rows[offset : offset + limit]]

    async def candidates(self, where, *, limit=None):
        rows = self._ordered(where)
        if limit is not None:
            rows = rows[:limit]
        return [r.model_copy(deep=True) for r in rows]

    async def stats_by_type(self, owner_id: str) -> list[dict[str, Any]]:
        groups: dict[str, dict[str, Any]] = {}
        for record in self._records.values():
            if record.owner_id != owner_id:
                continue
            row = groups.setdefault(
                str(record.file_type),
                {"type": str(record.file_type), "count": 0, "total_size": 0, "total_views": 0},
            )
            row["count"] += 1
            row["total_size"] += record.size
            row["total_views"] += record.view_count
        return [groups[k] for k in sorted(groups)]
