"""Denylist for shell commands.

This is not a sandbox. It only rejects the enumerated classes of destructive
commands; anything else runs with the full privileges of this process.
"""
from __future__ import annotations

import re

BLOCKED_PATTERNS: tuple[re.Pattern[str], ...] = (
    # rm with recursive/force flags
    re.compile(r"\brm\s+(-[a-zA-Z]*f|-[a-zA-Z]*r|--force|--recursive)", re.IGNORECASE),
    re.compile(r"\brm\s+-rf\b", re.IGNORECASE),
    re.compile(r"\brm\s+-fr\b", re.IGNORECASE),
    re.compile(r"\bsudo\s+rm\b", re.IGNORECASE),
    # filesystem format
    re.compile(r"\bmkfs\b", re.IGNORECASE),
    # raw disk writes
    re.compile(r"\bdd\s+.*\bof=", re.IGNORECASE),
    # fork bomb, e.g. :(){ :|:& };:
    re.compile(r"(:|\b\w+)\s*\(\s*\)\s*\{.*\1\s*\|\s*\1", re.IGNORECASE),
    re.compile(r"\bchmod\s+(-[a-zA-Z]*\s+)*(0?000|0?777|a-rwx)\b", re.IGNORECASE),
    re.compile(r"\bchown\s+.*/", re.IGNORECASE),
    # writes to raw device files
    re.compile(r">\s*/dev/(sda|hda|null)", re.IGNORECASE),
)


def find_blocked_pattern(command: str) -> re.Pattern[str] | None:
    for rx in BLOCKED_PATTERNS:
        if rx.search(command):
            return rx
    return None


def is_blocked(command: str) -> bool:
    return find_blocked_pattern(command) is not None
