from __future__ import annotations

import math
from enum import StrEnum
from typing import Optional

from pydantic import Field

from mediavault.files.models import Category, FileRecord, FileType
from mediavault.models import CamelModel


class SortBy(StrEnum):
    RELEVANCE = "relevance"
    DATE = "date"
    NAME = "name"
    SIZE = "size"
    VIEWS = "views"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class SearchParams(CamelModel):
    query: Optional[str] = Field(default=None, max_length=100)
    file_type: Optional[FileType] = None
    category: Optional[Category] = None
    sort_by: SortBy = SortBy.DATE
    sort_order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=50)


class PageInfo(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool
    limit: int

    @classmethod
    def build(cls, *, page: int, limit: int, total_items: int) -> "PageInfo":
        skip = (page - 1) * limit
        return cls(
            current_page=page,
            total_pages=math.ceil(total_items / limit),
            total_items=total_items,
            has_next=skip + limit < total_items,
            has_prev=page > 1,
            limit=limit,
        )


class SearchResult(CamelModel):
    items: list[FileRecord]
    page: PageInfo
    query: Optional[str] = None
