import asyncio

import pytest

from pycowork.app_context import AppContext
from pycowork.events.store import PREVIEW_CHARS, EventStore
from pycowork.util.debounce import Debouncer


def test_event_store_skips_corrupt_lines(tmp_path):
    store = EventStore.open("sess", root=tmp_path)
    store.append("a", {"n": 1})
    with store.path.open("a", encoding="utf-8") as f:
        f.write("{truncated\n")
    store.record_tool_result("grep", is_error=False, elapsed_ms=3, result={"text": "y" * 10000})

    events = list(store.iter_events())
    assert [e.type for e in events] == ["a", "tool.result"]
    assert len(events[1].data["content_preview"]) == PREVIEW_CHARS


@pytest.mark.asyncio
async def test_app_context_traces_store_changes(workspace):
    app = AppContext.from_env(workspace, session_id="trace-test")
    await app.tools.invoke("todoWrite", {"todos": [{"content": "a", "status": "pending"}]}, app.tool_context())

    [ev] = list(app.events.iter_events("todos.updated"))
    assert ev.data["todos"][0]["content"] == "a"
    assert [e.type for e in app.events.iter_events("tool.result")] == ["tool.result"]
    await app.aclose()


@pytest.mark.asyncio
async def test_debouncer_runs_only_last_call():
    seen = []
    d = Debouncer(0.01, seen.append)
    d.call(1)
    d.call(2)
    task = d.call(3)
    assert d.pending
    await task
    await asyncio.sleep(0.02)
    assert seen == [3]
    assert not d.pending


@pytest.mark.asyncio
async def test_debouncer_cancel():
    seen = []
    d = Debouncer(0.01, seen.append)
    task = d.call(1)
    d.cancel()
    await asyncio.sleep(0.02)
    assert task.cancelled()
    assert seen == []


@pytest.mark.asyncio
async def test_debouncer_awaits_coroutines():
    async def double(x):
        return x * 2

    assert await Debouncer(0, double).call(4) == 8


def test_event_store_last_returns_latest_of_type(tmp_path):
    store = EventStore.open("sess", root=tmp_path)
    assert store.last("todos.updated") is None
    store.append("todos.updated", {"todos": [1]})
    store.append("questions.updated", {"questionSet": None})
    store.append("todos.updated", {"todos": [2]})
    assert store.last("todos.updated").data == {"todos": [2]}
