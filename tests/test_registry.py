import pytest

from pycowork.errors import SchemaViolation, UnknownTool
from pycowork.events.store import EventStore
from pycowork.tools.base import Success, ToolSpec
from pycowork.tools.registry import ToolRegistry
from pycowork.tools.schema import ObjectParam, StringParam

EXPECTED_TOOLS = {
    "listDirectory", "glob", "grep", "readFile", "viewImage", "todoWrite", "askQuestion", "bash",
    "browserNavigate", "browserGetContent", "browserClick", "browserType", "browserPress",
    "browserGetLinks", "browserScroll", "browserScreenshot", "browserClose",
    "searchSkills", "installSkill",
}


class EchoTool:
    spec = ToolSpec(
        name="echo",
        description="Echo text back",
        params=ObjectParam(properties={"text": StringParam()}, required=("text",)),
        permission_key="read",
    )

    def __init__(self):
        self.calls = 0

    async def execute(self, ctx, args):
        self.calls += 1
        return Success({"text": args["text"]})


class BoomTool:
    spec = ToolSpec(name="boom", description="Always raises", params=ObjectParam(), permission_key="read")

    async def execute(self, ctx, args):
        raise RuntimeError("kaput")


def test_builtin_catalog(registry):
    assert set(registry.names()) == EXPECTED_TOOLS
    for tool in registry.to_openai_tools():
        assert tool["type"] == "function"
        assert tool["function"]["parameters"]["type"] == "object"


def test_duplicate_registration_is_rejected():
    reg = ToolRegistry()
    reg.register(EchoTool())
    with pytest.raises(ValueError):
        reg.register(EchoTool())


@pytest.mark.asyncio
async def test_unknown_tool(ctx):
    with pytest.raises(UnknownTool):
        await ToolRegistry().invoke("nope", {}, ctx)


@pytest.mark.asyncio
async def test_invalid_arguments_never_reach_the_executor(ctx, tmp_path):
    events = EventStore.open("s1", root=tmp_path)
    reg = ToolRegistry(events=events)
    tool = EchoTool()
    reg.register(tool)

    with pytest.raises(SchemaViolation):
        await reg.invoke("echo", {"text": 5}, ctx)

    assert tool.calls == 0
    [ev] = list(events.iter_events("tool.schema_violation"))
    assert ev.data["tool"] == "echo"


@pytest.mark.asyncio
async def test_executor_exception_becomes_failure(ctx, tmp_path):
    events = EventStore.open("s2", root=tmp_path)
    reg = ToolRegistry(events=events)
    reg.register(BoomTool())

    res = await reg.invoke("boom", {}, ctx)

    assert res.is_error
    assert res.to_dict() == {"error": True, "message": "Tool boom exception: kaput"}
    [ev] = list(events.iter_events("tool.result"))
    assert ev.data["tool"] == "boom"
    assert ev.data["is_error"] is True
