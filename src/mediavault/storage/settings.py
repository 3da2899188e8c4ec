from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    backend: Literal["memory", "s3"] = "memory"
    # every object id is prefixed with this folder
    folder: str = "multimedia-app"

    s3_bucket: Optional[str] = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: Optional[str] = None
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[SecretStr] = None
    public_base_url: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="STORAGE_", env_file=".env", extra="ignore")


@lru_cache
def get_storage_settings() -> StorageSettings:
    return StorageSettings()
