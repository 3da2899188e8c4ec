from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "MediaVault"
    version: str = "1.0.0"
    api_prefix: str = "/api"
    cors_origins: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_prefix="APP_",  # APP_NAME, APP_API_PREFIX, APP_CORS_ORIGINS
        env_file=".env",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_app_settings(**kwargs) -> AppSettings:
    # Only include kwargs that are not None, so defaults in AppSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return AppSettings(**filtered_kwargs)
