"""Query-time relevance for search mode.

All contributions are additive and unnormalized:

==============================  =======================================
title equals query              +20  (else title contains query: +10)
description contains query      +5
a tag equals query              +15  (else a tag contains query: +7)
a search keyword contains query +3
popularity                      ``ln(view_count + 1)``
recency                         ``(30 - age_days) * 0.1`` while younger than 30 days
==============================  =======================================

Matches are lowercase substring matches, not token matches. Ties are left
to the caller's stable sort, so equal scores keep store order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence

from mediavault.utils import as_utc

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass(frozen=True)
class ScoreWeights:
    title_exact: float = 20.0
    title_contains: float = 10.0
    description_contains: float = 5.0
    tag_exact: float = 15.0
    tag_contains: float = 7.0
    keyword_contains: float = 3.0
    recency_window_days: float = 30.0
    recency_per_day: float = 0.1


DEFAULT_WEIGHTS = ScoreWeights()


class Scorable(Protocol):
    title: str
    description: Optional[str]
    tags: Sequence[str]
    search_keywords: Sequence[str]
    view_count: int
    created_at: datetime


def age_in_days(created_at: datetime, now: datetime) -> float:
    seconds = (as_utc(now) - as_utc(created_at)).total_seconds()
    # clock skew can put created_at slightly in the future
    return max(seconds, 0.0) / SECONDS_PER_DAY


def score(
    record: Scorable,
    query_lower: str,
    now: datetime,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """Relevance of ``record`` for a lowercase, trimmed, non-empty query."""
    if not query_lower:
        raise ValueError("score() needs a non-empty query; empty queries are listings")

    total = 0.0
    title = (record.title or "").strip().lower()
    if title == query_lower:
        total += weights.title_exact
    elif query_lower in title:
        total += weights.title_contains

    if query_lower in (record.description or "").lower():
        total += weights.description_contains

    tags = [t.lower() for t in record.tags or ()]
    if any(t == query_lower for t in tags):
        total += weights.tag_exact
    elif any(query_lower in t for t in tags):
        total += weights.tag_contains

    if any(query_lower in k.lower() for k in record.search_keywords or ()):
        total += weights.keyword_contains

    total += math.log(max(record.view_count, 0) + 1)

    age = age_in_days(record.created_at, now)
    if age < weights.recency_window_days:
        total += (weights.recency_window_days - age) * weights.recency_per_day

    return total
