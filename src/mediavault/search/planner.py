from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from mediavault.files.repository import FileFilter

from .models import SearchParams, SortBy, SortOrder


class SearchMode(StrEnum):
    LISTING = "listing"  # store sorts and paginates
    SEARCH = "search"  # application scores, sorts and paginates


SORT_FIELDS: dict[SortBy, str] = {
    SortBy.DATE: "created_at",
    SortBy.NAME: "title",
    SortBy.SIZE: "size",
    SortBy.VIEWS: "view_count",
}


@dataclass(frozen=True)
class QueryPlan:
    mode: SearchMode
    where: FileFilter
    page: int
    limit: int
    query: Optional[str] = None
    # listing mode only
    sort_field: Optional[str] = None
    descending: bool = True

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def query_lower(self) -> str:
        return (self.query or "").lower()


def normalize_query(raw: Optional[str]) -> Optional[str]:
    text = (raw or "").strip()
    return text or None


def plan_query(owner_id: str, params: SearchParams) -> QueryPlan:
    """Pick the execution path for an owner scoped search or listing.

    A non-blank query always ranks by relevance, whatever ``sort_by`` says.
    A blank query lists by the requested field; ``relevance`` has nothing to
    rank on then and falls back to newest first.
    """
    if not owner_id:
        raise ValueError("owner_id is required")

    query = normalize_query(params.query)
    file_type = str(params.file_type) if params.file_type else None
    category = str(params.category) if params.category else None

    if query is not None:
        return QueryPlan(
            mode=SearchMode.SEARCH,
            where=FileFilter(owner_id=owner_id, file_type=file_type, category=category, text=query),
            page=params.page,
            limit=params.limit,
            query=query,
        )

    sort_by = SortBy(params.sort_by)
    if sort_by is SortBy.RELEVANCE:
        sort_field, descending = SORT_FIELDS[SortBy.DATE], True
    else:
        sort_field, descending = SORT_FIELDS[sort_by], SortOrder(params.sort_order) is SortOrder.DESC

    return QueryPlan(
        mode=SearchMode.LISTING,
        where=FileFilter(owner_id=owner_id, file_type=file_type, category=category),
        page=params.page,
        limit=params.limit,
        sort_field=sort_field,
        descending=descending,
    )
