"""Playwright-backed browser engine.

Uses a persistent context per browser so the session keeps the cookies and
logins of earlier runs.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..errors import BrowserError
from .engine import Link, PageInfo, ScrollDirection

logger = logging.getLogger(__name__)

APP_NAME = "pycowork"

# browser id -> (playwright engine, channel)
SUPPORTED_BROWSERS: dict[str, tuple[str, str | None]] = {
    "chrome": ("chromium", "chrome"),
    "edge": ("chromium", "msedge"),
    "chromium": ("chromium", None),
    "firefox": ("firefox", None),
    "webkit": ("webkit", None),
}

MAX_LINKS = 200

_LINKS_SCRIPT = """els => els.map(e => ({
    text: (e.innerText || e.getAttribute('aria-label') || '').trim().slice(0, 100),
    href: e.href
}))"""

_SCROLL_SCRIPTS: dict[str, str] = {
    "up": "window.scrollBy(0, -window.innerHeight * 0.8)",
    "down": "window.scrollBy(0, window.innerHeight * 0.8)",
    "top": "window.scrollTo(0, 0)",
    "bottom": "window.scrollTo(0, document.body.scrollHeight)",
}


def _profile_dir(browser: str) -> Path:
    d = Path(user_data_dir(APP_NAME)) / "browser-profiles" / browser
    d.mkdir(parents=True, exist_ok=True)
    return d


class PlaywrightEngine:
    def __init__(self, browser: str, *, headless: bool = False, timeout_ms: int = 30_000, profile_dir: Path | None = None):
        if browser not in SUPPORTED_BROWSERS:
            known = ", ".join(SUPPORTED_BROWSERS)
            raise BrowserError(f"Unsupported browser '{browser}'. Known browsers: {known}")
        self.browser = browser
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.profile_dir = profile_dir
        self._playwright: Any = None
        self._context: Any = None
        self._page: Any = None

    @property
    def is_open(self) -> bool:
        return self._page is not None and not self._page.is_closed()

    async def open(self) -> None:
        if self.is_open:
            return
        engine_name, channel = SUPPORTED_BROWSERS[self.browser]
        self._playwright = await async_playwright().start()
        launch_options: dict[str, Any] = {"headless": self.headless}
        if channel:
            launch_options["channel"] = channel
        try:
            browser_type = getattr(self._playwright, engine_name)
            self._context = await browser_type.launch_persistent_context(
                str(self.profile_dir or _profile_dir(self.browser)), **launch_options
            )
        except PlaywrightError as e:
            await self._playwright.stop()
            self._playwright = None
            raise BrowserError(f"Failed to launch {self.browser}: {e.message}") from e
        self._context.set_default_timeout(self.timeout_ms)
        self._page = self._context.pages[0] if self._context.pages else await self._context.new_page()
        logger.info("browser initialized: %s (headless=%s)", self.browser, self.headless)

    async def _locate(self, selector: str) -> Any:
        """CSS selector first, then visible text."""
        try:
            loc = self._page.locator(selector)
            if await loc.count() > 0:
                return loc.first
        except PlaywrightError:
            # not valid CSS; try it as text
            pass
        loc = self._page.get_by_text(selector)
        if await loc.count() > 0:
            return loc.first
        raise BrowserError(f"Element not found: {selector}")

    async def navigate(self, url: str) -> PageInfo:
        try:
            await self._page.goto(url, wait_until="domcontentloaded")
        except PlaywrightError as e:
            raise BrowserError(f"Navigation failed: {e.message}") from e
        return await self.page_info()

    async def page_info(self) -> PageInfo:
        return PageInfo(url=self._page.url, title=await self._page.title())

    async def click(self, selector: str) -> None:
        target = await self._locate(selector)
        try:
            await target.click()
            await self._page.wait_for_load_state("domcontentloaded")
        except PlaywrightError as e:
            raise BrowserError(f"Click failed: {e.message}") from e

    async def type(self, selector: str, text: str) -> None:
        target = await self._locate(selector)
        try:
            await target.fill(text)
        except PlaywrightError as e:
            raise BrowserError(f"Type failed: {e.message}") from e

    async def press(self, key: str) -> None:
        try:
            await self._page.keyboard.press(key)
            await self._page.wait_for_load_state("domcontentloaded")
        except PlaywrightError as e:
            raise BrowserError(f"Key press failed: {e.message}") from e

    async def scroll(self, direction: ScrollDirection) -> None:
        await self._page.evaluate(_SCROLL_SCRIPTS[direction])
        # let lazy-loaded content settle
        await self._page.wait_for_timeout(500)

    async def content(self, selector: str | None = None) -> str:
        if selector:
            target = await self._locate(selector)
            return await target.inner_text()
        main = self._page.locator("main")
        if await main.count() > 0:
            return await main.first.inner_text()
        return await self._page.inner_text("body")

    async def links(self) -> list[Link]:
        raw = await self._page.eval_on_selector_all("a[href]", _LINKS_SCRIPT)
        return [Link(text=str(r.get("text") or ""), href=str(r.get("href") or "")) for r in raw[:MAX_LINKS]]

    async def screenshot(self) -> bytes:
        return await self._page.screenshot(type="png")

    async def close(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._page = None
        self._context = None
        self._playwright = None
