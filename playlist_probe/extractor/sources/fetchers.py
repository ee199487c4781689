from __future__ import annotations

from typing import Protocol

from playlist_probe.errors import SourceUnavailable
from playlist_probe.utils.network import HttpClient


class PageFetcher(Protocol):
    def fetch(self, url: str) -> str:
        """Return page HTML; raise SourceUnavailable when the page cannot be loaded."""
        ...


class HttpPageFetcher:
    """Server-rendered HTML only; the embedded JSON blobs carry most fields."""

    mode = "http"

    def __init__(self, http: HttpClient):
        self.http = http

    def fetch(self, url: str) -> str:
        return self.http.get_text(url)


class BrowserPageFetcher:
    """Fully rendered DOM through headless Chromium."""

    mode = "browser"

    def __init__(self, proxy_url: str | None = None, browser=None):
        if browser is None:
            from playlist_probe.utils.browser import BrowserManager

            browser = BrowserManager(proxy_url=proxy_url)
        self.browser = browser

    def fetch(self, url: str) -> str:
        html = self.browser.render(url)
        if not html:
            raise SourceUnavailable(f"browser could not render {url}")
        return html


def build_page_fetcher(cfg, http: HttpClient) -> PageFetcher:
    if getattr(cfg, "page_render_mode", "http") == "browser":
        return BrowserPageFetcher(proxy_url=getattr(cfg, "proxy_url", "") or None)
    return HttpPageFetcher(http)
