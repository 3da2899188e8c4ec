from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from mediavault.files.models import FileRecord
from mediavault.files.repository import FileRepository
from mediavault.utils import utcnow

from .models import PageInfo, SearchParams, SearchResult
from .planner import QueryPlan, SearchMode, plan_query
from .scoring import DEFAULT_WEIGHTS, ScoreWeights, score
from .settings import SearchSettings

logger = logging.getLogger(__name__)


def rank(
    candidates: list[FileRecord],
    query_lower: str,
    now: datetime,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[FileRecord]:
    """Score every candidate and order by score, highest first.

    ``sorted(..., reverse=True)`` is stable, so equal scores keep the order
    the candidates arrived in (store order).
    """
    scored = [
        c.model_copy(update={"relevance_score": score(c, query_lower, now, weights)})
        for c in candidates
    ]
    return sorted(scored, key=lambda r: r.relevance_score, reverse=True)


class SearchExecutor:
    def __init__(
        self,
        files: FileRepository,
        settings: Optional[SearchSettings] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        weights: ScoreWeights = DEFAULT_WEIGHTS,
    ):
        self.files = files
        self.settings = settings or SearchSettings()
        self.clock = clock
        self.weights = weights

    async def search(self, owner_id: str, params: SearchParams) -> SearchResult:
        plan = plan_query(owner_id, params)
        if plan.mode is SearchMode.SEARCH:
            items, total = await self._ranked(plan)
        else:
            items, total = await self._listing(plan)
        return SearchResult(
            items=items,
            page=PageInfo.build(page=plan.page, limit=plan.limit, total_items=total),
            query=plan.query,
        )

    async def _listing(self, plan: QueryPlan) -> tuple[list[FileRecord], int]:
        total = await self.files.count(plan.where)
        items = await self.files.list_sorted(
            plan.where,
            sort_field=plan.sort_field,
            descending=plan.descending,
            offset=plan.skip,
            limit=plan.limit,
        )
        return items, total

    async def _ranked(self, plan: QueryPlan) -> tuple[list[FileRecord], int]:
        cap = self.settings.max_ranked_candidates
        if cap is None:
            candidates = await self.files.candidates(plan.where)
        else:
            matched = await self.files.count(plan.where)
            candidates = await self.files.candidates(plan.where, limit=cap)
            if matched > len(candidates):
                logger.warning(
                    "Search for owner %s matched %d records; ranking only the first %d",
                    plan.where.owner_id,
                    matched,
                    len(candidates),
                    extra={"user_id": plan.where.owner_id},
                )
        ranked = rank(candidates, plan.query_lower, self.clock(), self.weights)
        return ranked[plan.skip : plan.skip + plan.limit], len(ranked)
