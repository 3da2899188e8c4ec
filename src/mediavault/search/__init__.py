from .executor import SearchExecutor, rank
from .models import PageInfo, SearchParams, SearchResult, SortBy, SortOrder
from .planner import QueryPlan, SearchMode, plan_query
from .scoring import ScoreWeights, score

__all__ = [
    "PageInfo",
    "QueryPlan",
    "ScoreWeights",
    "SearchExecutor",
    "SearchMode",
    "SearchParams",
    "SearchResult",
    "SortBy",
    "SortOrder",
    "plan_query",
    "rank",
    "score",
]
