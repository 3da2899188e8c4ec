"""Derived fields of a file record.

``search_keywords`` must stay a pure function of the record's title,
description, tags, original filename, file type and category. Every write
path recomputes it through :func:`derive_search_keywords`; nothing else sets it.
"""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Iterable

from .models import FileType

MIN_KEYWORD_LENGTH = 3
MAX_TAGS = 10

_WHITESPACE = re.compile(r"\s+")
_FILENAME_SEPARATORS = re.compile(r"[\s._-]+")


def file_type_from_mime(mime_type: str | None) -> FileType:
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return FileType.IMAGE
    if mime.startswith("video/"):
        return FileType.VIDEO
    if mime.startswith("audio/"):
        return FileType.AUDIO
    return FileType.DOCUMENT


def normalize_tags(raw: str | Iterable[str] | None) -> list[str]:
    """Split comma separated input, trim, lowercase and drop empties/duplicates."""
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw
    tags: list[str] = []
    for part in parts:
        tag = str(part).strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def filename_stem(original_name: str | None) -> str:
    if not original_name:
        return ""
    name = PurePath(original_name).name
    stem, dot, _ext = name.rpartition(".")
    # ".bashrc" style names have no extension to strip
    return stem if dot and stem else name


def derive_search_keywords(
    *,
    title: str | None,
    description: str | None,
    tags: Iterable[str],
    original_name: str | None,
    file_type: str,
    category: str,
) -> list[str]:
    tokens: list[str] = []
    if title:
        tokens.extend(_WHITESPACE.split(title.lower()))
    if description:
        tokens.extend(_WHITESPACE.split(description.lower()))
    tokens.extend(t.lower() for t in tags)
    tokens.extend(_FILENAME_SEPARATORS.split(filename_stem(original_name).lower()))
    tokens.append(str(file_type).lower())
    tokens.append(str(category).lower())

    keywords: list[str] = []
    seen: set[str] = set()
    for token in tokens:
        if len(token) < MIN_KEYWORD_LENGTH or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
    return keywords
