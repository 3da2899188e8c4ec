from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """
    Metadata store settings.

    Env: MONGO_URL, MONGO_DB, MONGO_SERVER_SELECTION_TIMEOUT_MS, MONGO_MAX_POOL_SIZE.
    Without MONGO_URL non-prod environments run on in-memory repositories.
    """

    url: Optional[str] = Field(default=None)
    db: str = Field(default="mediavault")
    server_selection_timeout_ms: int = Field(default=8000)
    max_pool_size: int = Field(default=10)

    model_config = SettingsConfigDict(env_prefix="MONGO_", env_file=".env", extra="ignore")


@lru_cache
def get_mongo_settings(**kwargs) -> MongoSettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return MongoSettings(**filtered)
