from __future__ import annotations

import json
from pathlib import Path

import pytest

from pycowork.browser.controller import BrowserSessionController
from pycowork.browser.engine import Link, PageInfo
from pycowork.browser.state import BrowserUIState
from pycowork.config.models import Settings
from pycowork.config.settings import MemorySettingsStore
from pycowork.errors import BrowserError
from pycowork.tools.base import ToolContext
from pycowork.tools.builtin import register_builtin_tools
from pycowork.tools.registry import ToolRegistry

PNG_1PX = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000001e221bc330000000049454e44ae426082"
)


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path, monkeypatch):
    # platformdirs honours XDG_* on Linux; keep settings and logs out of $HOME
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))


@pytest.fixture
def workspace(tmp_path) -> Path:
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def ctx(workspace) -> ToolContext:
    return ToolContext(cwd=str(workspace))


@pytest.fixture
def registry() -> ToolRegistry:
    reg = ToolRegistry()
    register_builtin_tools(reg)
    return reg


class FakeEngine:
    """In-memory stand-in for a Playwright session."""

    def __init__(self, browser: str):
        self.browser = browser
        self.opened = False
        self.closed = False
        self.url = "about:blank"
        self.title = ""
        self.calls: list[tuple] = []
        self.elements = {"#q": "search box", "Sign In": "button"}

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed

    async def open(self) -> None:
        self.opened = True

    async def navigate(self, url: str) -> PageInfo:
        self.calls.append(("navigate", url))
        self.url, self.title = url, f"Title of {url}"
        return PageInfo(url=self.url, title=self.title)

    async def page_info(self) -> PageInfo:
        return PageInfo(url=self.url, title=self.title)

    async def click(self, selector: str) -> None:
        if selector not in self.elements:
            raise BrowserError(f"Element not found: {selector}")
        self.calls.append(("click", selector))

    async def type(self, selector: str, text: str) -> None:
        if selector not in self.elements:
            raise BrowserError(f"Element not found: {selector}")
        self.calls.append(("type", selector, text))

    async def press(self, key: str) -> None:
        self.calls.append(("press", key))

    async def scroll(self, direction) -> None:
        self.calls.append(("scroll", direction))

    async def content(self, selector=None) -> str:
        if selector and selector not in self.elements:
            raise BrowserError(f"Element not found: {selector}")
        return self.elements[selector] if selector else f"Main content of {self.url}"

    async def links(self) -> list[Link]:
        return [Link(text="Home", href=self.url + "/home")]

    async def screenshot(self) -> bytes:
        return PNG_1PX

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def engines() -> list[FakeEngine]:
    return []


def _controller(engines: list[FakeEngine], preferred: str | None) -> BrowserSessionController:
    def factory(browser: str) -> FakeEngine:
        e = FakeEngine(browser)
        engines.append(e)
        return e

    return BrowserSessionController(factory, MemorySettingsStore(Settings(preferred_browser=preferred)), BrowserUIState())


@pytest.fixture
def browser(engines) -> BrowserSessionController:
    return _controller(engines, "chrome")


@pytest.fixture
def unconfigured_browser(engines) -> BrowserSessionController:
    return _controller(engines, None)


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200):
        self._body = body
        self.status = status

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeUrlopen:
    """Maps request URLs to canned responses (or exceptions)."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requested: list[str] = []

    def __call__(self, req, timeout=None):
        url = req.full_url
        self.requested.append(url)
        value = self.routes.get(url)
        if value is None:
            return FakeResponse(b"not found", status=404)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, FakeResponse):
            return value
        if isinstance(value, (dict, list)):
            return FakeResponse(json.dumps(value).encode("utf-8"))
        return FakeResponse(str(value).encode("utf-8"))
