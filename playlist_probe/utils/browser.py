"""
Headless browser page rendering, for pages whose useful DOM only exists after JavaScript runs.
"""
import subprocess
import time
from typing import Optional

from patchright.sync_api import sync_playwright, Page, Browser, BrowserContext

from playlist_probe.utils.logger import logger
from playlist_probe.utils.network import DEFAULT_USER_AGENT


class BrowserManager:
    """Renders a URL in headless Chromium and returns the resulting HTML."""

    _chromium_checked: bool = False  # Class-level: only run install once per process

    # Waited for in order; the first one that shows up ends the wait.
    content_selectors = (
        "ytd-playlist-video-renderer",
        "h1.ytd-watch-metadata",
        "h1.title",
        "#info-strings",
        "ytd-app",
    )
    consent_selectors = (
        "button[aria-label*='Accept all']",
        "button[aria-label*='Aceitar tudo']",
        "form[action*='consent'] button",
    )

    def __init__(self, headless: bool = True, proxy_url: str | None = None, scroll_rounds: int = 3):
        self.headless = headless
        self.proxy_url = (proxy_url or "").strip() or None
        self.scroll_rounds = scroll_rounds
        self._ensure_patchright_chromium_installed()

    def _ensure_patchright_chromium_installed(self):
        """Make sure the patchright Chromium build is present (once per process)."""
        if BrowserManager._chromium_checked:
            return
        try:
            subprocess.run(
                ["patchright", "install", "chromium"],
                capture_output=True,
                text=True,
                check=False,
            )
            BrowserManager._chromium_checked = True
        except FileNotFoundError:
            logger.error("patchright command not found; please ensure patchright is installed")
            raise

    def render(self, url: str) -> Optional[str]:
        """Return the rendered HTML for url, or None when the page could not be loaded."""
        logger.info(f"Launching browser to visit: {url}")

        with sync_playwright() as p:
            browser = self._launch_browser(p)
            context = self._create_context(browser)
            page = context.new_page()

            try:
                return self._process_page(page, url)
            except Exception as e:
                logger.error(f"Error rendering page {url}: {e}")
                return None
            finally:
                browser.close()

    def _launch_browser(self, p) -> Browser:
        launch_kwargs = {
            "headless": self.headless,
            "args": [
                "--disable-gpu",
                "--disable-dev-shm-usage",
                "--no-sandbox",
                "--no-first-run",
                "--window-size=1280,720",
            ],
        }
        if self.proxy_url:
            launch_kwargs["proxy"] = {"server": self.proxy_url}
        return p.chromium.launch(**launch_kwargs)

    def _create_context(self, browser: Browser) -> BrowserContext:
        return browser.new_context(
            viewport={"width": 1280, "height": 720},
            locale="en-US",
            user_agent=DEFAULT_USER_AGENT,
        )

    def _process_page(self, page: Page, url: str) -> str:
        response = page.goto(url, wait_until="domcontentloaded")
        if response:
            logger.info(f"HTTP status: {response.status}")

        self._dismiss_consent(page)
        self._wait_for_content(page)
        self._scroll_page(page)
        return page.content()

    def _dismiss_consent(self, page: Page):
        for selector in self.consent_selectors:
            try:
                if page.is_visible(selector):
                    logger.info(f"Dismissing consent dialog: {selector}")
                    page.click(selector)
                    page.wait_for_load_state("domcontentloaded")
                    return
            except Exception as e:
                logger.debug(f"consent selector {selector} failed: {e}")

    def _wait_for_content(self, page: Page):
        for selector in self.content_selectors:
            try:
                page.wait_for_selector(selector, timeout=5000)
                logger.info(f"Found content element: {selector}")
                return
            except Exception:
                continue
        logger.warning("No known content element found; waiting a fixed duration...")
        time.sleep(3)

    def _scroll_page(self, page: Page):
        # Long playlists load more entries as the page scrolls.
        for _ in range(self.scroll_rounds):
            page.evaluate("window.scrollBy(0, document.documentElement.scrollHeight)")
            time.sleep(1)
