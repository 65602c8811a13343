from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

ScrollDirection = Literal["up", "down", "top", "bottom"]
SCROLL_DIRECTIONS: tuple[str, ...] = ("up", "down", "top", "bottom")


@dataclass
class PageInfo:
    url: str
    title: str


@dataclass
class Link:
    text: str
    href: str


class BrowserEngine(Protocol):
    """One automated browser session.

    Implementations raise ``BrowserError`` for anything the caller should
    see as a failed action (element not found, navigation error, ...).
    ``selector`` arguments may be CSS selectors or visible text.
    """

    @property
    def is_open(self) -> bool: ...

    async def open(self) -> None: ...

    async def navigate(self, url: str) -> PageInfo: ...

    async def page_info(self) -> PageInfo: ...

    async def click(self, selector: str) -> None: ...

    async def type(self, selector: str, text: str) -> None: ...

    async def press(self, key: str) -> None: ...

    async def scroll(self, direction: ScrollDirection) -> None: ...

    async def content(self, selector: str | None = None) -> str: ...

    async def links(self) -> list[Link]: ...

    async def screenshot(self) -> bytes: ...

    async def close(self) -> None: ...
