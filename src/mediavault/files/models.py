from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from mediavault.models import CamelModel


class FileType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class Category(StrEnum):
    PERSONAL = "personal"
    WORK = "work"
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


def _tags(value: Any) -> Any:
    # imported lazily: keywords imports FileType from this module
    from .keywords import MAX_TAGS, normalize_tags

    if value is None:
        return value
    tags = normalize_tags(value)
    if len(tags) > MAX_TAGS:
        raise ValueError(f"Maximum {MAX_TAGS} tags allowed")
    return tags


class MediaMetadata(CamelModel):
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    bitrate: Optional[int] = None
    format: Optional[str] = None


class FileRecord(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    original_name: str
    storage_object_id: str
    storage_resource_type: Optional[str] = None
    url: str
    secure_url: str
    file_type: FileType
    mime_type: str
    size: int = Field(ge=0)
    tags: list[str] = Field(default_factory=list)
    category: Category = Category.OTHER
    is_public: bool = False
    view_count: int = Field(default=0, ge=0)
    download_count: int = Field(default=0, ge=0)
    owner_id: str
    metadata: MediaMetadata = Field(default_factory=MediaMetadata)
    search_keywords: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    # only populated on search results, never persisted
    relevance_score: Optional[float] = None

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(exclude={"id", "relevance_score"})
        doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "FileRecord":
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


class UploadForm(CamelModel):
    """Client supplied metadata accompanying an upload."""

    title: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    tags: list[str] = Field(default_factory=list)
    category: Category = Category.OTHER
    is_public: bool = False

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        return _tags(v) if v is not None else []


class FilePatch(CamelModel):
    """Partial update; unknown and immutable fields are dropped."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    tags: Optional[list[str]] = None
    category: Optional[Category] = None
    is_public: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> Any:
        return _tags(v)

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        data = self.model_dump(include=self.model_fields_set)
        if "title" in data and data["title"] is None:
            data.pop("title")
        for key in ("tags", "category", "is_public"):
            if key in data and data[key] is None:
                data.pop(key)
        return data


class FileTypeStats(CamelModel):
    type: FileType
    count: int
    total_size: int
    total_size_formatted: str
    total_views: int


class FileStats(CamelModel):
    total_files: int = 0
    total_size: int = 0
    total_size_formatted: str = "0 Bytes"
    total_views: int = 0
    file_types: list[FileTypeStats] = Field(default_factory=list)


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded payload as received from the HTTP layer."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


__all__ = [
    "Category",
    "FilePatch",
    "FileRecord",
    "FileStats",
    "FileType",
    "FileTypeStats",
    "IncomingFile",
    "MediaMetadata",
    "UploadForm",
]
