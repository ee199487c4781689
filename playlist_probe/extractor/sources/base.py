from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, Callable

from playlist_probe.utils.logger import logger
from playlist_probe.utils.network import HttpClient


@dataclass(frozen=True)
class PlaylistEntry:
    video_id: str
    title: str | None = None
    position: int = 0


class BaseSource(ABC):
    """Shared HTTP/logging plumbing for the metadata sources."""

    name: str

    def __init__(self, cfg: Any = None, log_fn: Callable[[str], None] | None = None, http: HttpClient | None = None):
        self.cfg = cfg
        self._log = log_fn
        self.http = http or HttpClient(
            timeout=float(getattr(cfg, "request_timeout_sec", 25.0) or 25.0),
            delay_sec=float(getattr(cfg, "request_delay_sec", 0.0) or 0.0),
            proxy_url=getattr(cfg, "proxy_url", "") or None,
            log_fn=log_fn,
        )

    # -- Logging --

    def _emit(self, msg: str) -> None:
        logger.debug(f"[{self.name}] {msg}")
        if self._log:
            try:
                self._log(msg)
            except Exception as e:
                logger.debug(f"log callback failed: {e}")

    def _item_limit(self) -> int:
        try:
            return max(0, int(getattr(self.cfg, "max_playlist_items", 0) or 0))
        except (TypeError, ValueError):
            return 0
