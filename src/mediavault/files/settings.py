from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_MIME_TYPES = ",".join(
    [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "video/mp4",
        "video/avi",
        "video/quicktime",
        "audio/mpeg",
        "audio/wav",
        "audio/aac",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    ]
)


class UploadSettings(BaseSettings):
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1)
    # comma separated, e.g. UPLOAD_ALLOWED_MIME_TYPES="image/png,application/pdf"
    allowed_mime_types: str = DEFAULT_ALLOWED_MIME_TYPES

    model_config = SettingsConfigDict(env_prefix="UPLOAD_", env_file=".env", extra="ignore")

    @property
    def allowed_mime_type_set(self) -> frozenset[str]:
        return frozenset(m.strip().lower() for m in self.allowed_mime_types.split(",") if m.strip())


@lru_cache
def get_upload_settings() -> UploadSettings:
    return UploadSettings()
