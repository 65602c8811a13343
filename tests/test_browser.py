import asyncio

import pytest

from pycowork.browser.controller import BrowserSessionController, BrowserState
from pycowork.browser.state import BrowserUIState
from pycowork.config.models import Settings
from pycowork.config.settings import MemorySettingsStore
from pycowork.errors import BrowserNotConfigured, NoPageOpen
from pycowork.tools.base import ToolContext

from conftest import FakeEngine

BROWSER_TOOLS = [
    ("browserNavigate", {"url": "https://example.com"}),
    ("browserGetContent", {}),
    ("browserClick", {"selector": "#q"}),
    ("browserType", {"selector": "#q", "text": "hi"}),
    ("browserPress", {"key": "Enter"}),
    ("browserGetLinks", {}),
    ("browserScroll", {"direction": "down"}),
    ("browserScreenshot", {}),
    ("browserClose", {}),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("name,args", BROWSER_TOOLS)
async def test_unconfigured_browser_asks_for_setup(registry, workspace, unconfigured_browser, engines, name, args):
    ctx = ToolContext(cwd=str(workspace), browser=unconfigured_browser)

    d = (await registry.invoke(name, args, ctx)).to_dict()

    assert d["error"] is True
    assert d["needsBrowserSetup"] is True
    assert unconfigured_browser.ui.show_selection_dialog is True
    assert unconfigured_browser.ui.selection_requests == 1
    assert engines == []


@pytest.mark.asyncio
async def test_selection_replays_pending_operation(unconfigured_browser, engines):
    with pytest.raises(BrowserNotConfigured):
        await unconfigured_browser.navigate("https://example.com")

    unconfigured_browser.ui.set_pending_operation(lambda: unconfigured_browser.navigate("https://example.com"))
    await unconfigured_browser.select_browser("firefox")

    assert unconfigured_browser.ui.show_selection_dialog is False
    assert unconfigured_browser.ui.pending_operation is None
    assert unconfigured_browser.state is BrowserState.SESSION_OPEN
    assert engines[0].browser == "firefox"


@pytest.mark.asyncio
async def test_state_machine(browser, engines):
    assert browser.state is BrowserState.NO_SESSION
    await browser.navigate("https://a.test")
    assert browser.state is BrowserState.SESSION_OPEN
    await browser.navigate("https://b.test")
    assert len(engines) == 1
    await browser.close()
    assert browser.state is BrowserState.NO_SESSION
    assert engines[0].closed


@pytest.mark.asyncio
async def test_actions_need_an_open_page(browser):
    with pytest.raises(NoPageOpen):
        await browser.click("#q")


@pytest.mark.asyncio
async def test_navigate_tool(registry, workspace, browser):
    ctx = ToolContext(cwd=str(workspace), browser=browser)
    d = (await registry.invoke("browserNavigate", {"url": "https://example.com"}, ctx)).to_dict()
    assert d["success"] is True
    assert d["message"] == "Navigated to Title of https://example.com"
    assert d["screenshot"].startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_page_tools_after_navigation(registry, workspace, browser, engines):
    ctx = ToolContext(cwd=str(workspace), browser=browser)
    await registry.invoke("browserNavigate", {"url": "https://example.com"}, ctx)

    click = (await registry.invoke("browserClick", {"selector": "Sign In"}, ctx)).to_dict()
    typed = (await registry.invoke("browserType", {"selector": "#q", "text": "cats"}, ctx)).to_dict()
    content = (await registry.invoke("browserGetContent", {}, ctx)).to_dict()
    links = (await registry.invoke("browserGetLinks", {}, ctx)).to_dict()
    shot = (await registry.invoke("browserScreenshot", {}, ctx)).to_dict()
    scrolled = (await registry.invoke("browserScroll", {"direction": "bottom"}, ctx)).to_dict()

    assert click["message"] == 'Clicked on "Sign In"'
    assert typed["message"] == 'Typed "cats" into #q'
    assert content["content"] == "Main content of https://example.com"
    assert links["count"] == 1
    assert shot["image"].startswith("data:image/png;base64,")
    assert scrolled["message"] == "Scrolled bottom"
    assert ("type", "#q", "cats") in engines[0].calls


@pytest.mark.asyncio
async def test_missing_element_suggests_other_selector(registry, workspace, browser):
    ctx = ToolContext(cwd=str(workspace), browser=browser)
    await registry.invoke("browserNavigate", {"url": "https://example.com"}, ctx)
    d = (await registry.invoke("browserClick", {"selector": ".nope"}, ctx)).to_dict()
    assert d["message"] == "Element not found: .nope"
    assert d["suggestion"] == "The element may not exist or may not be clickable. Try a different selector."


@pytest.mark.asyncio
async def test_get_content_without_page(registry, workspace, browser):
    ctx = ToolContext(cwd=str(workspace), browser=browser)
    d = (await registry.invoke("browserGetContent", {}, ctx)).to_dict()
    assert d["message"] == "No page is open. Navigate to a URL first."
    assert d["suggestion"] == "Navigate to a page first."


@pytest.mark.asyncio
async def test_close_tool(registry, workspace, browser, engines):
    ctx = ToolContext(cwd=str(workspace), browser=browser)
    await registry.invoke("browserNavigate", {"url": "https://example.com"}, ctx)
    d = (await registry.invoke("browserClose", {}, ctx)).to_dict()
    assert d == {"success": True, "message": "Browser closed"}
    assert engines[0].closed


@pytest.mark.asyncio
async def test_browser_tools_without_controller(registry, ctx):
    d = (await registry.invoke("browserScreenshot", {}, ctx)).to_dict()
    assert d["error"] is True
    assert d["retryable"] is False


class SlowOpenEngine(FakeEngine):
    async def open(self) -> None:
        await asyncio.sleep(0.01)
        await super().open()


@pytest.mark.asyncio
async def test_concurrent_navigations_share_one_session():
    started: list[SlowOpenEngine] = []

    def factory(name):
        e = SlowOpenEngine(name)
        started.append(e)
        return e

    ctrl = BrowserSessionController(factory, MemorySettingsStore(Settings(preferred_browser="chrome")), BrowserUIState())
    await asyncio.gather(ctrl.navigate("https://a.test"), ctrl.navigate("https://b.test"))

    assert len(started) == 1
    assert [c[0] for c in started[0].calls] == ["navigate", "navigate"]

    await ctrl.close()
    assert all(not e.is_open for e in started)
    assert ctrl.state is BrowserState.NO_SESSION
