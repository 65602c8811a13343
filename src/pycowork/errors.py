from __future__ import annotations

from typing import Iterable


class PyCoworkError(Exception):
    pass


class UnknownTool(PyCoworkError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class SchemaViolation(PyCoworkError):
    """Tool arguments did not match the tool's parameter schema.

    Raised before the executor runs. The agent runtime should treat it as a
    malformed call and retry with corrected arguments.
    """

    def __init__(self, tool: str, errors: Iterable[str]):
        self.tool = tool
        self.errors = list(errors)
        super().__init__(f"Invalid arguments for {tool}: " + "; ".join(self.errors))


class CommandBlocked(PyCoworkError):
    def __init__(self, command: str, pattern: str):
        self.command = command
        self.pattern = pattern
        super().__init__(
            f'This command has been blocked for safety. The pattern "{pattern}" is not allowed. '
            "Destructive commands like rm -rf, sudo rm, mkfs, dd, etc. are not permitted."
        )


class CommandTimeout(PyCoworkError):
    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(f"Command timed out after {timeout_ms / 1000:g} seconds")


class CapabilityUnavailable(PyCoworkError):
    """A primitive is not wired into the running process; only a restart fixes it."""


class BrowserError(PyCoworkError):
    pass


class BrowserNotConfigured(BrowserError):
    def __init__(self) -> None:
        super().__init__(
            "Browser not configured. A dialog has been shown to the user to select their preferred browser."
        )


class NoPageOpen(BrowserError):
    def __init__(self) -> None:
        super().__init__("No page is open. Navigate to a URL first.")


class SkillRegistryError(PyCoworkError):
    pass


class ConfigError(PyCoworkError):
    pass
