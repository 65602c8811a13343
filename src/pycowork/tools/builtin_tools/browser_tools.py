"""Browser tools, all backed by the shared ``BrowserSessionController``.

Every tool checks the configuration gate first: with no preferred browser the
call fails fast with ``needsBrowserSetup`` and the selection dialog is raised.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable

from ..base import Failure, Success, ToolContext, ToolResult, ToolSpec
from ..schema import EnumParam, ObjectParam, StringParam
from ...browser.controller import BrowserSessionController
from ...browser.engine import SCROLL_DIRECTIONS
from ...errors import BrowserError, BrowserNotConfigured

_NO_PARAMS = ObjectParam(properties={}, required=())

NAVIGATE_FIRST = "Navigate to a page first."


async def _run(
    ctx: ToolContext,
    op: Callable[[BrowserSessionController], Awaitable[dict[str, Any]]],
    *,
    fallback: str,
    failed_suggestion: str | None,
    error_suggestion: str | None,
) -> tuple[dict[str, Any] | None, Failure | None]:
    """Run ``op`` against the session and map errors to a Failure.

    ``failed_suggestion`` applies when the browser reported the action as
    failed, ``error_suggestion`` to anything unexpected.
    """
    if ctx.browser is None:
        return None, Failure(message="Browser support is not available in this session.", retryable=False)
    try:
        return await op(ctx.browser), None
    except BrowserNotConfigured as e:
        return None, Failure(
            message=str(e),
            suggestion="Wait for the user to select a browser, then try again.",
            extra={"needsBrowserSetup": True},
        )
    except BrowserError as e:
        return None, Failure(message=str(e) or fallback, suggestion=failed_suggestion)
    except Exception as e:
        return None, Failure(message=str(e) or fallback, suggestion=error_suggestion)


class BrowserNavigateTool:
    spec = ToolSpec(
        name="browserNavigate",
        description=(
            "Navigate to a URL in the browser. Opens a real browser window with the user's logins and cookies. "
            "Use this to visit websites, access user accounts, and browse the web."
        ),
        permission_key="browser",
        params=ObjectParam(
            properties={
                "url": StringParam(description='The URL to navigate to (e.g., "https://twitter.com", "https://github.com")'),
            },
            required=("url",),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        url = args["url"]
        res, err = await _run(
            ctx,
            lambda b: b.navigate(url),
            fallback="Navigation failed",
            failed_suggestion="Check if the URL is valid and try again",
            error_suggestion="The browser may not be available. Try again.",
        )
        if err:
            return err
        return Success({
            "success": True,
            "url": res["url"],
            "title": res["title"],
            "message": f"Navigated to {res['title'] or res['url']}",
            "screenshot": res["screenshot"],
        })


class BrowserGetContentTool:
    spec = ToolSpec(
        name="browserGetContent",
        description=(
            "Get the text content of the current page or a specific element. Use this to read what's on a "
            "webpage after navigating to it."
        ),
        permission_key="browser",
        params=ObjectParam(
            properties={
                "selector": StringParam(
                    description=(
                        "CSS selector to get content from a specific element (optional). If not provided, gets "
                        "the main content of the page."
                    )
                ),
            },
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        selector = args.get("selector")
        res, err = await _run(
            ctx,
            lambda b: b.get_content(selector),
            fallback="Failed to get content",
            failed_suggestion=(
                "The selector may not exist on this page. Try a different one." if selector else NAVIGATE_FIRST
            ),
            error_suggestion="Make sure you have navigated to a page first",
        )
        if err:
            return err
        return Success({"success": True, **res})


class BrowserClickTool:
    spec = ToolSpec(
        name="browserClick",
        description="Click on an element on the page. Use a CSS selector or the text content of the element to click.",
        permission_key="browser",
        params=ObjectParam(
            properties={
                "selector": StringParam(
                    description='CSS selector or text content to click (e.g., "button.submit", "Sign In", "#login-button")'
                ),
            },
            required=("selector",),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        selector = args["selector"]
        res, err = await _run(
            ctx,
            lambda b: b.click(selector),
            fallback="Click failed",
            failed_suggestion="The element may not exist or may not be clickable. Try a different selector.",
            error_suggestion="Check if the element exists and is visible",
        )
        if err:
            return err
        return Success({"success": True, **res, "message": f'Clicked on "{selector}"'})


class BrowserTypeTool:
    spec = ToolSpec(
        name="browserType",
        description="Type text into an input field on the page. Use this to fill in forms, search boxes, etc.",
        permission_key="browser",
        params=ObjectParam(
            properties={
                "selector": StringParam(
                    description='CSS selector for the input field (e.g., "input[name=search]", "#email", ".search-box")'
                ),
                "text": StringParam(description="The text to type into the field"),
            },
            required=("selector", "text"),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        selector, text = args["selector"], args["text"]
        res, err = await _run(
            ctx,
            lambda b: b.type(selector, text),
            fallback="Type failed",
            failed_suggestion="The input field may not exist. Try a different selector.",
            error_suggestion="Check if the input field exists and is editable",
        )
        if err:
            return err
        return Success({"success": True, "message": f'Typed "{text}" into {selector}', **res})


class BrowserPressTool:
    spec = ToolSpec(
        name="browserPress",
        description="Press a key on the keyboard. Use this for Enter, Tab, Escape, arrow keys, etc.",
        permission_key="browser",
        params=ObjectParam(
            properties={
                "key": StringParam(description='The key to press (e.g., "Enter", "Tab", "Escape", "ArrowDown")'),
            },
            required=("key",),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        key = args["key"]
        res, err = await _run(
            ctx,
            lambda b: b.press(key),
            fallback="Key press failed",
            failed_suggestion=f"Check the key name. {NAVIGATE_FIRST}",
            error_suggestion=None,
        )
        if err:
            return err
        return Success({"success": True, **res, "message": f"Pressed {key}"})


class BrowserGetLinksTool:
    spec = ToolSpec(
        name="browserGetLinks",
        description="Get all links on the current page. Useful for finding URLs to navigate to.",
        permission_key="browser",
        params=_NO_PARAMS,
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        res, err = await _run(
            ctx,
            lambda b: b.get_links(),
            fallback="Failed to get links",
            failed_suggestion=NAVIGATE_FIRST,
            error_suggestion=None,
        )
        if err:
            return err
        return Success({"success": True, **res})


class BrowserScrollTool:
    spec = ToolSpec(
        name="browserScroll",
        description="Scroll the page up, down, or to the top/bottom.",
        permission_key="browser",
        params=ObjectParam(
            properties={
                "direction": EnumParam(
                    values=SCROLL_DIRECTIONS,
                    description=(
                        'Direction to scroll: "up" (scroll up), "down" (scroll down), "top" (scroll to top), '
                        '"bottom" (scroll to bottom)'
                    ),
                ),
            },
            required=("direction",),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        direction = args["direction"]
        res, err = await _run(
            ctx,
            lambda b: b.scroll(direction),
            fallback="Scroll failed",
            failed_suggestion=NAVIGATE_FIRST,
            error_suggestion=None,
        )
        if err:
            return err
        return Success({"success": True, "message": f"Scrolled {direction}", **res})


class BrowserScreenshotTool:
    spec = ToolSpec(
        name="browserScreenshot",
        description="Take a screenshot of the current page. Returns a base64-encoded image.",
        permission_key="browser",
        params=_NO_PARAMS,
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        res, err = await _run(
            ctx,
            lambda b: b.screenshot(),
            fallback="Screenshot failed",
            failed_suggestion=NAVIGATE_FIRST,
            error_suggestion=None,
        )
        if err:
            return err
        return Success({"success": True, **res, "message": "Screenshot captured"})


class BrowserCloseTool:
    spec = ToolSpec(
        name="browserClose",
        description="Close the browser window. Use this when done with web browsing.",
        permission_key="browser",
        params=_NO_PARAMS,
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        async def op(b: BrowserSessionController) -> dict[str, Any]:
            b.ensure_configured()
            await b.close()
            return {}

        _, err = await _run(ctx, op, fallback="Close failed", failed_suggestion=None, error_suggestion=None)
        if err:
            return err
        return Success({"success": True, "message": "Browser closed"})
