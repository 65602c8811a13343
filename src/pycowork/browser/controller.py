from __future__ import annotations

import asyncio
import base64
import logging
from enum import Enum
from typing import Any, Callable, Optional

from ..config.settings import SettingsStore
from ..errors import BrowserError, BrowserNotConfigured, NoPageOpen
from ..util.format import truncate
from .engine import SCROLL_DIRECTIONS, BrowserEngine, ScrollDirection
from .state import BrowserUIState

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str], BrowserEngine]

CONTENT_LIMIT = 50_000


class BrowserState(str, Enum):
    UNCONFIGURED = "unconfigured"
    NO_SESSION = "no_session"
    SESSION_OPEN = "session_open"


def screenshot_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


class BrowserSessionController:
    """Owns the single browser session used by the browser tools.

    UNCONFIGURED -> NO_SESSION happens only through ``select_browser`` (the
    user's choice). ``navigate`` opens or reuses the session, ``close`` tears
    it down. Every other action needs an open page.
    """

    def __init__(self, engine_factory: EngineFactory, settings: SettingsStore, ui: BrowserUIState):
        self._engine_factory = engine_factory
        self._settings = settings
        self._ui = ui
        self._engine: Optional[BrowserEngine] = None
        self._engine_browser: Optional[str] = None
        # serializes session open, replace and close
        self._lock = asyncio.Lock()

    @property
    def ui(self) -> BrowserUIState:
        return self._ui

    @property
    def preferred_browser(self) -> str | None:
        return self._settings.get().preferred_browser

    @property
    def state(self) -> BrowserState:
        if not self.preferred_browser:
            return BrowserState.UNCONFIGURED
        if self._engine is not None and self._engine.is_open:
            return BrowserState.SESSION_OPEN
        return BrowserState.NO_SESSION

    def ensure_configured(self) -> str:
        browser = self.preferred_browser
        if not browser:
            self._ui.request_selection()
            raise BrowserNotConfigured()
        return browser

    async def select_browser(self, browser: str) -> None:
        """Persist the user's browser choice and replay any pending operation."""
        self._settings.update(preferred_browser=browser)
        self._ui.dismiss_selection()
        if self._engine is not None and self._engine_browser != browser:
            await self.close()
        await self._ui.execute_pending_operation()

    def _page(self) -> BrowserEngine:
        if self._engine is None or not self._engine.is_open:
            raise NoPageOpen()
        return self._engine

    async def _snapshot(self, engine: BrowserEngine) -> str:
        return screenshot_data_url(await engine.screenshot())

    async def _session(self, browser: str) -> BrowserEngine:
        async with self._lock:
            if self._engine is not None and self._engine.is_open and self._engine_browser == browser:
                return self._engine
            await self._close_engine()
            engine = self._engine_factory(browser)
            await engine.open()
            self._engine, self._engine_browser = engine, browser
            logger.info("opened %s browser session", browser)
            return engine

    async def navigate(self, url: str) -> dict[str, Any]:
        engine = await self._session(self.ensure_configured())
        info = await engine.navigate(url)
        return {"url": info.url, "title": info.title, "screenshot": await self._snapshot(engine)}

    async def click(self, selector: str) -> dict[str, Any]:
        self.ensure_configured()
        engine = self._page()
        await engine.click(selector)
        info = await engine.page_info()
        return {"url": info.url, "title": info.title, "screenshot": await self._snapshot(engine)}

    async def type(self, selector: str, text: str) -> dict[str, Any]:
        self.ensure_configured()
        engine = self._page()
        await engine.type(selector, text)
        return {"screenshot": await self._snapshot(engine)}

    async def press(self, key: str) -> dict[str, Any]:
        self.ensure_configured()
        engine = self._page()
        await engine.press(key)
        info = await engine.page_info()
        return {"url": info.url, "screenshot": await self._snapshot(engine)}

    async def scroll(self, direction: ScrollDirection) -> dict[str, Any]:
        self.ensure_configured()
        if direction not in SCROLL_DIRECTIONS:
            raise BrowserError(f"Invalid scroll direction: {direction}")
        engine = self._page()
        await engine.scroll(direction)
        return {"screenshot": await self._snapshot(engine)}

    async def get_content(self, selector: str | None = None) -> dict[str, Any]:
        self.ensure_configured()
        engine = self._page()
        text = await engine.content(selector)
        info = await engine.page_info()
        return {
            "url": info.url,
            "title": info.title,
            "content": truncate(text, CONTENT_LIMIT, "\n... (truncated)"),
            "screenshot": await self._snapshot(engine),
        }

    async def get_links(self) -> dict[str, Any]:
        self.ensure_configured()
        links = await self._page().links()
        return {"count": len(links), "links": [{"text": l.text, "href": l.href} for l in links]}

    async def screenshot(self) -> dict[str, Any]:
        self.ensure_configured()
        engine = self._page()
        info = await engine.page_info()
        return {"url": info.url, "title": info.title, "image": await self._snapshot(engine)}

    async def close(self) -> None:
        async with self._lock:
            await self._close_engine()

    async def _close_engine(self) -> None:
        engine, self._engine, self._engine_browser = self._engine, None, None
        if engine is not None:
            await engine.close()
            logger.info("browser session closed")
