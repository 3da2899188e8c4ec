from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    # unset ranks every candidate; set to cap how many records one search scores
    max_ranked_candidates: Optional[int] = Field(default=None, ge=1)

    model_config = SettingsConfigDict(env_prefix="SEARCH_", env_file=".env", extra="ignore")


@lru_cache
def get_search_settings() -> SearchSettings:
    return SearchSettings()
