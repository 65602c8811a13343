from __future__ import annotations

import asyncio
import logging
import os
import shutil
import signal
from dataclasses import dataclass
from typing import Optional

from ..errors import CommandBlocked, CommandTimeout
from ..tools.safety import find_blocked_pattern

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
MAX_BUFFER_BYTES = 10 * 1024 * 1024


@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str


def _shell_argv(command: str) -> list[str]:
    # Use a real shell so built-ins like `cd`, pipes, &&, env expansion work.
    if os.name == "nt":
        return ["cmd.exe", "/c", command]
    shell = "bash" if shutil.which("bash") else "sh"
    return [shell, "-c", command]


async def _drain(stream: Optional[asyncio.StreamReader], limit: int) -> bytes:
    if stream is None:
        return b""
    buf = bytearray()
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            break
        # keep reading so the child never blocks on a full pipe; drop the excess
        if len(buf) < limit:
            buf.extend(chunk[: limit - len(buf)])
    return bytes(buf)


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        if os.name != "nt":
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass


async def run_shell(
    command: str,
    cwd: Optional[str] = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    max_buffer: int = MAX_BUFFER_BYTES,
) -> CmdResult:
    """Run ``command`` through the platform shell.

    Raises ``CommandBlocked`` for denylisted commands and ``CommandTimeout``
    when the process outlives ``timeout_ms`` (it is killed first). A non-zero
    exit is a normal return.
    """
    blocked = find_blocked_pattern(command)
    if blocked is not None:
        raise CommandBlocked(command, blocked.pattern)

    proc = await asyncio.create_subprocess_exec(
        *_shell_argv(command),
        cwd=cwd or os.getcwd(),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        start_new_session=(os.name != "nt"),
    )
    try:
        out, err, code = await asyncio.wait_for(
            asyncio.gather(_drain(proc.stdout, max_buffer), _drain(proc.stderr, max_buffer), proc.wait()),
            timeout=timeout_ms / 1000,
        )
    except asyncio.TimeoutError:
        logger.info("command timed out after %sms: %s", timeout_ms, command)
        _kill(proc)
        await proc.wait()
        raise CommandTimeout(timeout_ms) from None

    return CmdResult(
        returncode=code,
        stdout=out.decode("utf-8", errors="replace"),
        stderr=err.decode("utf-8", errors="replace"),
    )
