from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, File, Form, Query, UploadFile, status

from mediavault.files.models import Category, FileRecord, FileType, IncomingFile
from mediavault.search.models import SearchParams, SearchResult, SortBy, SortOrder

from ..dependencies import CurrentUser, ServicesDep
from ..responses import ok

ROUTER_PREFIX = "/files"
ROUTER_TAG = "files"

router = APIRouter()


def file_out(record: FileRecord) -> dict[str, Any]:
    data = record.model_dump(mode="json", by_alias=True)
    if record.relevance_score is None:
        data.pop("relevanceScore", None)
    return data


def _page_out(result: SearchResult) -> dict[str, Any]:
    body: dict[str, Any] = {
        "files": [file_out(r) for r in result.items],
        "pagination": result.page,
    }
    if result.query is not None:
        body["query"] = result.query
    return body


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_file(
    user: CurrentUser,
    services: ServicesDep,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    is_public: Optional[str] = Form(None, alias="isPublic"),
):
    incoming = None
    if file is not None and file.filename:
        incoming = IncomingFile(
            filename=file.filename,
            content_type=file.content_type or "application/octet-stream",
            data=await file.read(),
        )
    form = {
        k: v
        for k, v in {
            "title": title,
            "description": description,
            "tags": tags,
            "category": category,
            "is_public": is_public,
        }.items()
        if v not in (None, "")
    }
    record = await services.lifecycle.upload(user.id, incoming, form)
    return ok({"file": file_out(record)}, "File uploaded successfully", status.HTTP_201_CREATED)


@router.get("")
async def list_files(
    user: CurrentUser,
    services: ServicesDep,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    file_type: Optional[FileType] = Query(None, alias="fileType"),
    category: Optional[Category] = Query(None),
    sort_by: SortBy = Query(SortBy.DATE, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
):
    params = SearchParams(
        file_type=file_type,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result = await services.search.search(user.id, params)
    return ok(_page_out(result), "Files retrieved successfully")


@router.get("/search")
async def search_files(
    user: CurrentUser,
    services: ServicesDep,
    q: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    file_type: Optional[FileType] = Query(None, alias="fileType"),
    category: Optional[Category] = Query(None),
    sort_by: SortBy = Query(SortBy.RELEVANCE, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
):
    params = SearchParams(
        query=q,
        file_type=file_type,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result = await services.search.search(user.id, params)
    return ok(_page_out(result), "Search completed successfully")


@router.get("/stats")
async def file_stats(user: CurrentUser, services: ServicesDep):
    stats = await services.lifecycle.stats(user.id)
    return ok(stats, "File statistics retrieved successfully")


@router.get("/{file_id}")
async def get_file(file_id: str, user: CurrentUser, services: ServicesDep):
    record = await services.lifecycle.get(user.id, file_id)
    return ok({"file": file_out(record)}, "File retrieved successfully")


@router.put("/{file_id}")
async def update_file(
    file_id: str,
    user: CurrentUser,
    services: ServicesDep,
    patch: Optional[dict[str, Any]] = Body(None),
):
    record = await services.lifecycle.update(user.id, file_id, patch or {})
    return ok({"file": file_out(record)}, "File updated successfully")


@router.put("/{file_id}/view")
async def increment_view(file_id: str, user: CurrentUser, services: ServicesDep):
    count = await services.lifecycle.increment_view(user.id, file_id)
    return ok({"viewCount": count}, "View count updated")


@router.put("/{file_id}/download")
async def record_download(file_id: str, user: CurrentUser, services: ServicesDep):
    count = await services.lifecycle.record_download(user.id, file_id)
    return ok({"downloadCount": count}, "Download count updated")


@router.delete("/{file_id}")
async def delete_file(file_id: str, user: CurrentUser, services: ServicesDep):
    await services.lifecycle.delete(user.id, file_id)
    return ok(message="File deleted successfully")
