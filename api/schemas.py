from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field, field_validator


# Constants for validation
MAX_URL_LENGTH = 2048
MAX_PATH_LENGTH = 1024
MAX_PROXY_URL_LENGTH = 512
MAX_SECRET_LENGTH = 256


class ExtractRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=MAX_URL_LENGTH)

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('URL cannot be empty')
        return v


class ConfigUpdateRequest(BaseModel):
    youtube_api_key: str | None = Field(default=None, max_length=MAX_SECRET_LENGTH)
    screenshot_token: str | None = Field(default=None, max_length=MAX_SECRET_LENGTH)
    screenshot_endpoint: str | None = Field(default=None, max_length=MAX_URL_LENGTH)
    capture_images: bool | None = None
    page_render_mode: str | None = None
    proxy_url: str | None = Field(default=None, max_length=MAX_PROXY_URL_LENGTH)
    request_timeout_sec: float | None = Field(default=None, gt=0, le=300)
    request_delay_sec: float | None = Field(default=None, ge=0, le=60)
    max_playlist_items: int | None = Field(default=None, ge=0)
    demo_listing_on_empty: bool | None = None
    export_dir: str | None = Field(default=None, max_length=MAX_PATH_LENGTH)
    export_date_format: str | None = Field(default=None, max_length=64)
    export_formats: List[str] | None = None

    @field_validator('page_render_mode')
    @classmethod
    def validate_render_mode(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if v not in ("http", "browser"):
            raise ValueError('page_render_mode must be "http" or "browser"')
        return v
