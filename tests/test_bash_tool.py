import pytest

from pycowork.errors import CommandBlocked, CommandTimeout
from pycowork.tools.builtin_tools.bash_tool import BashTool
from pycowork.util.subprocess import CmdResult, run_shell


class RecordingRunner:
    def __init__(self, result=None):
        self.result = result or CmdResult(returncode=0, stdout="ok\n", stderr="")
        self.calls = []

    async def __call__(self, command, cwd=None, timeout_ms=None, max_buffer=None):
        self.calls.append({"command": command, "cwd": cwd, "timeout_ms": timeout_ms})
        return self.result


@pytest.mark.asyncio
async def test_timeout_is_clamped_to_maximum(ctx):
    runner = RecordingRunner()
    tool = BashTool(runner=runner)
    await tool.execute(ctx, {"command": "echo hi", "timeout": 999999})
    assert runner.calls[0]["timeout_ms"] == 120000


@pytest.mark.asyncio
async def test_default_timeout_applies(ctx):
    runner = RecordingRunner()
    tool = BashTool(runner=runner)
    await tool.execute(ctx, {"command": "echo hi"})
    assert runner.calls[0]["timeout_ms"] == 30000
    assert runner.calls[0]["cwd"] == ctx.cwd


@pytest.mark.asyncio
async def test_blocked_command_never_reaches_runner(ctx):
    runner = RecordingRunner()
    res = await BashTool(runner=runner).execute(ctx, {"command": "sudo   RM -rf /"})
    d = res.to_dict()
    assert runner.calls == []
    assert d["error"] is True
    assert d["blocked"] is True
    assert "blocked for safety" in d["message"]
    assert d["pattern"]
    assert d["pattern"] in d["message"]


@pytest.mark.asyncio
async def test_non_zero_exit_is_failure(ctx):
    runner = RecordingRunner(CmdResult(returncode=2, stdout="", stderr="boom"))
    d = (await BashTool(runner=runner).execute(ctx, {"command": "false"})).to_dict()
    assert d["message"] == "Command failed with exit code 2"
    assert d["suggestion"] == "Error output: boom"
    assert d["exitCode"] == 2


@pytest.mark.asyncio
async def test_success_payload(ctx):
    d = (await BashTool(runner=RecordingRunner()).execute(ctx, {"command": "echo ok"})).to_dict()
    assert d == {"success": True, "exitCode": 0, "stdout": "ok\n"}


@pytest.mark.asyncio
async def test_timeout_is_reported(ctx):
    async def slow(command, **kw):
        raise CommandTimeout(kw["timeout_ms"])

    d = (await BashTool(runner=slow).execute(ctx, {"command": "sleep 100", "timeout": 1000})).to_dict()
    assert d["timedOut"] is True
    assert d["message"] == "Command timed out after 1 seconds"


@pytest.mark.asyncio
async def test_run_shell_captures_output(tmp_path):
    res = await run_shell("echo hello && echo oops 1>&2", cwd=str(tmp_path))
    assert res.returncode == 0
    assert res.stdout.strip() == "hello"
    assert res.stderr.strip() == "oops"


@pytest.mark.asyncio
async def test_run_shell_kills_on_timeout(tmp_path):
    with pytest.raises(CommandTimeout):
        await run_shell("sleep 5", cwd=str(tmp_path), timeout_ms=200)


@pytest.mark.asyncio
async def test_run_shell_caps_output(tmp_path):
    res = await run_shell("head -c 5000 /dev/zero | tr '\\0' a", cwd=str(tmp_path), max_buffer=100)
    assert res.stdout == "a" * 100


@pytest.mark.asyncio
async def test_run_shell_rechecks_gate():
    with pytest.raises(CommandBlocked):
        await run_shell("rm -rf /tmp/x")


@pytest.mark.asyncio
async def test_timeout_above_cap_goes_through_registry(registry, ctx, monkeypatch):
    runner = RecordingRunner()
    monkeypatch.setattr(registry.get("bash"), "runner", runner)
    await registry.invoke("bash", {"command": "ls", "timeout": 200000}, ctx)
    assert runner.calls[0]["timeout_ms"] == 120000


@pytest.mark.asyncio
async def test_fractional_timeout_is_truncated(registry, ctx, monkeypatch):
    runner = RecordingRunner()
    monkeypatch.setattr(registry.get("bash"), "runner", runner)
    res = await registry.invoke("bash", {"command": "ls", "timeout": 1500.5}, ctx)
    assert not res.is_error
    assert runner.calls[0]["timeout_ms"] == 1500
