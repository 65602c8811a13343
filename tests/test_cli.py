import json
import logging

import pytest
from typer.testing import CliRunner

from pycowork.main import app

runner = CliRunner()
TODO_ARGS = json.dumps({"todos": [{"content": "write docs", "status": "pending"}]})


def test_tools_lists_catalog():
    result = runner.invoke(app, ["tools"])
    assert result.exit_code == 0
    assert "browserNavigate" in result.output


def test_schema_for_one_tool():
    result = runner.invoke(app, ["schema", "grep"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["name"] == "grep"
    assert data["parameters"]["required"] == ["pattern", "path"]


def test_schema_unknown_tool():
    assert runner.invoke(app, ["schema", "nope"]).exit_code == 2


def test_call_with_bad_arguments_exits_2(workspace):
    result = runner.invoke(app, ["call", "grep", "--args", '{"pattern": 1}', "--cwd", str(workspace)])
    assert result.exit_code == 2
    assert "Invalid arguments for grep" in result.output


def test_call_then_read_todos(workspace):
    args = json.dumps({"todos": [{"content": "ship it", "status": "in_progress"}]})
    result = runner.invoke(app, ["call", "todoWrite", "--args", args, "--cwd", str(workspace), "--session", "cli1"])
    assert result.exit_code == 0

    shown = runner.invoke(app, ["todos", "--session", "cli1"])
    assert "ship it" in shown.output


def test_browser_set_and_show():
    assert runner.invoke(app, ["browser", "set", "netscape"]).exit_code == 2
    assert runner.invoke(app, ["browser", "set", "firefox"]).exit_code == 0
    assert "firefox" in runner.invoke(app, ["browser", "show"]).output


def test_permissions_grant_and_list():
    assert runner.invoke(app, ["permissions", "grant", "/docs", "read"]).exit_code == 0
    assert "/docs" in runner.invoke(app, ["permissions", "list"]).output


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)


def test_config_log_level_applies_to_call(workspace, restore_root_level):
    (workspace / "pycowork.yaml").write_text("log_level: debug\n", encoding="utf-8")
    result = runner.invoke(app, ["call", "todoWrite", "--args", TODO_ARGS, "--cwd", str(workspace)])
    assert result.exit_code == 0
    assert restore_root_level.level == logging.DEBUG


def test_log_level_option_overrides_config(workspace, restore_root_level):
    (workspace / "pycowork.yaml").write_text("log_level: debug\n", encoding="utf-8")
    args = ["--log-level", "error", "call", "todoWrite", "--args", TODO_ARGS, "--cwd", str(workspace)]
    assert runner.invoke(app, args).exit_code == 0
    assert restore_root_level.level == logging.ERROR
