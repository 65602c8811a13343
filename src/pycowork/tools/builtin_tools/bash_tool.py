from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ..base import ToolSpec, ToolResult, ToolContext, Success, Failure
from ..safety import find_blocked_pattern
from ..schema import NumberParam, ObjectParam, StringParam
from ...errors import CommandBlocked, CommandTimeout
from ...util import fs
from ...util.subprocess import CmdResult, run_shell

logger = logging.getLogger(__name__)

ShellRunner = Callable[..., Awaitable[CmdResult]]

DESCRIPTION = """Execute a shell command. Use this for running scripts, installing packages, checking versions, etc.

IMPORTANT SAFETY NOTES:
- This runs without a sandbox, so be VERY careful
- NEVER use destructive commands like rm -rf, rm -r, or rm with force flags
- NEVER delete files or directories
- NEVER modify system files
- NEVER run sudo commands
- Prefer read-only operations when possible
- Always double-check the command before running

Examples of SAFE commands:
- ls, pwd, cat, head, tail
- npm install, npm run build, npm test
- git status, git log, git diff
- python script.py, node script.js

Examples of BLOCKED commands (will be rejected):
- rm -rf, rm -r, rm --force
- sudo anything
- chmod 777, chown
- dd, mkfs"""

BLOCKED_SUGGESTION = "This command is blocked for safety reasons. Use a non-destructive alternative."


@dataclass
class BashTool:
    spec: ToolSpec = ToolSpec(
        name="bash",
        description=DESCRIPTION,
        permission_key="bash",
        params=ObjectParam(
            properties={
                "command": StringParam(description="The shell command to execute"),
                "cwd": StringParam(description="The working directory to run the command in (optional)"),
                "timeout": NumberParam(
                    minimum=1,
                    default=30000,
                    description="Timeout in milliseconds (default: 30000, max: 120000)",
                ),
            },
            required=("command",),
        ),
    )
    runner: ShellRunner = run_shell

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        command = args["command"]
        cfg = ctx.config.bash
        timeout = min(int(args.get("timeout") or cfg.default_timeout_ms), cfg.max_timeout_ms)
        cwd = str(fs.resolve_path(ctx.cwd, args["cwd"])) if args.get("cwd") else ctx.cwd

        blocked = find_blocked_pattern(command)
        try:
            if blocked is not None:
                raise CommandBlocked(command, blocked.pattern)
            res = await self.runner(command, cwd=cwd, timeout_ms=timeout, max_buffer=cfg.max_buffer_bytes)
        except CommandBlocked as e:
            logger.warning("blocked command %r (pattern %s)", command, e.pattern)
            return Failure(message=str(e), suggestion=BLOCKED_SUGGESTION, extra={"blocked": True, "pattern": e.pattern})
        except CommandTimeout as e:
            return Failure(
                message=str(e),
                suggestion=f"The command took too long. Try a faster command or a larger timeout (max {cfg.max_timeout_ms}ms).",
                extra={"timedOut": True},
            )
        except Exception as e:
            return Failure(
                message=str(e) or "Failed to execute command",
                suggestion="This command may be blocked for safety reasons, or the path may be invalid",
            )

        if res.returncode != 0:
            return Failure(
                message=f"Command failed with exit code {res.returncode}",
                suggestion=f"Error output: {res.stderr}" if res.stderr else "Check the command syntax and try again",
                extra={"exitCode": res.returncode, "stdout": res.stdout, "stderr": res.stderr},
            )

        payload: dict[str, Any] = {"success": True, "exitCode": 0, "stdout": res.stdout}
        if res.stderr:
            payload["stderr"] = res.stderr
        return Success(payload)
