"""
HTTP helpers shared by the sources and the image capturers.
"""
from __future__ import annotations

import time
from typing import Callable

from curl_cffi import requests

from playlist_probe.errors import SourceUnavailable
from playlist_probe.utils.logger import logger


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


def build_proxies(proxy_url: str | None) -> dict[str, str] | None:
    pu = str(proxy_url or "").strip()
    if not pu:
        return None
    return {"http": pu, "https": pu}


class HttpClient:
    """Thin wrapper over curl_cffi with logging, pacing and status checking.

    Non-200 responses and transport errors raise SourceUnavailable; callers
    decide whether that is fatal.
    """

    def __init__(
        self,
        *,
        timeout: float = 25.0,
        delay_sec: float = 0.0,
        proxy_url: str | None = None,
        headers: dict[str, str] | None = None,
        log_fn: Callable[[str], None] | None = None,
    ):
        self.timeout = timeout
        self.delay_sec = delay_sec
        self.proxies = build_proxies(proxy_url)
        self.headers = {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept-Language": "en-US,en;q=0.9",
        }
        if headers:
            self.headers.update(headers)
        self._log = log_fn

    def _emit(self, msg: str) -> None:
        logger.debug(msg)
        if self._log:
            try:
                self._log(msg)
            except Exception as e:
                logger.debug(f"log callback failed: {e}")

    def _apply_delay(self) -> None:
        if self.delay_sec and self.delay_sec > 0:
            time.sleep(float(self.delay_sec))

    def get(self, url: str, *, params: dict | None = None, log_url: str | None = None):
        """GET url and return the response; raises SourceUnavailable unless 200."""
        shown = log_url or url
        self._emit(f"GET {shown}")
        self._apply_delay()
        try:
            r = requests.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
                impersonate="chrome",
                proxies=self.proxies,
            )
        except Exception as e:
            self._emit(f"!! request error {shown}: {e}")
            raise SourceUnavailable(f"request error {shown}: {e}") from e
        self._emit(f"<- {r.status_code} {shown}")
        if r.status_code != 200:
            raise SourceUnavailable(f"HTTP {r.status_code}: {shown}", status=r.status_code)
        return r

    def get_text(self, url: str, **kwargs) -> str:
        return self.get(url, **kwargs).text

    def get_json(self, url: str, **kwargs) -> dict:
        r = self.get(url, **kwargs)
        try:
            payload = r.json()
        except ValueError as e:
            raise SourceUnavailable(f"invalid JSON from {kwargs.get('log_url') or url}") from e
        if not isinstance(payload, dict):
            raise SourceUnavailable(f"unexpected JSON payload from {kwargs.get('log_url') or url}")
        return payload

    def get_bytes(self, url: str, **kwargs) -> bytes:
        content = self.get(url, **kwargs).content
        if not content:
            raise SourceUnavailable(f"empty body: {kwargs.get('log_url') or url}")
        return content
