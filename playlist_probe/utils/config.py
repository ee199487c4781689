from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any


CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

API_KEY_ENV = "PLAYLIST_PROBE_API_KEY"
SCREENSHOT_TOKEN_ENV = "PLAYLIST_PROBE_SCREENSHOT_TOKEN"

EXPORT_FORMATS = ("xlsx", "docx", "html", "csv")
PAGE_RENDER_MODES = {"http", "browser"}

# {token} and {url} are substituted; {url} is percent-encoded.
DEFAULT_SCREENSHOT_ENDPOINT = (
    "https://shot.screenshotapi.net/screenshot?token={token}&url={url}"
    "&width=1280&height=720&output=image&file_type=png&wait_for_event=load"
)


def _normalize_format_list(value: object, *, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    out: list[str] = []
    for x in value:
        s = str(x).strip().lower().lstrip(".")
        if s in EXPORT_FORMATS and s not in out:
            out.append(s)
    return out or list(default)


@dataclass
class AppConfig:
    # --- Sources ---
    # YouTube Data API v3 key. Empty means "go straight to page extraction".
    youtube_api_key: str = ""
    # http: plain page fetch | browser: headless Chromium (JS-rendered DOM)
    page_render_mode: str = "http"
    # Example: http://127.0.0.1:7890
    proxy_url: str = ""
    request_timeout_sec: float = 25.0
    # Pause before every outbound request; per-item calls are rate-sensitive.
    request_delay_sec: float = 0.0
    # 0 = no limit
    max_playlist_items: int = 0
    # Use the built-in demo ids when page extraction lists nothing.
    demo_listing_on_empty: bool = False

    # --- Image capture ---
    capture_images: bool = True
    screenshot_token: str = ""
    screenshot_endpoint: str = DEFAULT_SCREENSHOT_ENDPOINT

    # --- Export ---
    export_dir: str = "exports"
    # strftime pattern for publish dates in exported artifacts
    export_date_format: str = "%d/%m/%Y"
    export_formats: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.youtube_api_key = str(self.youtube_api_key or "").strip()
        self.screenshot_token = str(self.screenshot_token or "").strip()
        self.proxy_url = str(self.proxy_url or "").strip()

        if self.page_render_mode not in PAGE_RENDER_MODES:
            self.page_render_mode = "http"

        try:
            self.request_timeout_sec = float(self.request_timeout_sec)
        except (TypeError, ValueError):
            self.request_timeout_sec = 25.0
        if self.request_timeout_sec <= 0:
            self.request_timeout_sec = 25.0

        try:
            self.request_delay_sec = max(0.0, float(self.request_delay_sec))
        except (TypeError, ValueError):
            self.request_delay_sec = 0.0

        try:
            self.max_playlist_items = max(0, int(self.max_playlist_items))
        except (TypeError, ValueError):
            self.max_playlist_items = 0

        endpoint = str(self.screenshot_endpoint or "").strip()
        if "{url}" not in endpoint:
            endpoint = DEFAULT_SCREENSHOT_ENDPOINT
        self.screenshot_endpoint = endpoint

        if not str(self.export_date_format or "").strip():
            self.export_date_format = "%d/%m/%Y"

        self.export_formats = _normalize_format_list(self.export_formats, default=["xlsx", "docx"])

    @property
    def has_api_key(self) -> bool:
        return bool(self.youtube_api_key)

    def snapshot(self) -> AppConfig:
        """Detached copy used for the lifetime of one extraction run."""
        return replace(self, export_formats=list(self.export_formats))

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {k: v for k, v in self.__dict__.items()}

    def to_public_dict(self) -> dict[str, Any]:
        """Same as to_dict() with credentials masked."""
        d = self.to_dict()
        for key in ("youtube_api_key", "screenshot_token"):
            d[key] = _mask(d.get(key) or "")
        return d


def _mask(secret: str) -> str:
    if not secret:
        return ""
    if len(secret) <= 6:
        return "*" * len(secret)
    return secret[:3] + "*" * (len(secret) - 6) + secret[-3:]


def apply_env_overrides(cfg: AppConfig) -> AppConfig:
    api_key = os.environ.get(API_KEY_ENV, "").strip()
    if api_key:
        cfg.youtube_api_key = api_key
    token = os.environ.get(SCREENSHOT_TOKEN_ENV, "").strip()
    if token:
        cfg.screenshot_token = token
    return cfg


def load_config() -> AppConfig:
    if not CONFIG_PATH.exists():
        return apply_env_overrides(AppConfig())
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return apply_env_overrides(AppConfig())
    if not isinstance(data, dict):
        return apply_env_overrides(AppConfig())

    cfg = AppConfig()
    for k, v in data.items():
        if hasattr(cfg, k):
            setattr(cfg, k, v)
    # Re-normalize after applying persisted values.
    cfg.__post_init__()
    return apply_env_overrides(cfg)


def save_config(cfg: AppConfig) -> None:
    CONFIG_PATH.write_text(json.dumps(cfg.to_dict(), ensure_ascii=False, indent=4), encoding="utf-8")
