from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import SchemaViolation, UnknownTool
from ..events.store import EventStore
from .base import Failure, Tool, ToolContext, ToolResult, ToolSpec
from .schema import validate

logger = logging.getLogger(__name__)


@dataclass
class ToolRegistry:
    _tools: Dict[str, Tool] = None  # type: ignore
    events: Optional[EventStore] = None

    def __post_init__(self):
        if self._tools is None:
            self._tools = {}

    def register(self, tool: Tool) -> None:
        name = tool.spec.name
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = tool

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise UnknownTool(name)
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def to_openai_tools(self) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {"name": s.name, "description": s.description, "parameters": s.parameters},
            }
            for s in self.list_specs()
        ]

    async def invoke(self, name: str, args: Any, ctx: ToolContext) -> ToolResult:
        """Validate ``args`` and run the tool.

        ``UnknownTool`` and ``SchemaViolation`` propagate: the call was
        malformed and the executor never ran. Anything the executor raises is
        returned as a ``Failure``.
        """
        tool = self.get(name)
        try:
            clean = validate(tool.spec.params, args, tool=name)
        except SchemaViolation as e:
            logger.info("rejected %s call: %s", name, e)
            if self.events:
                self.events.append("tool.schema_violation", {"tool": name, "errors": e.errors})
            raise

        t0 = time.perf_counter()
        try:
            res = await tool.execute(ctx, clean)
        except Exception as e:
            logger.exception("tool %s raised", name)
            res = Failure(message=f"Tool {name} exception: {e}")
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        logger.debug("tool %s finished in %dms (error=%s)", name, elapsed_ms, res.is_error)
        if self.events:
            self.events.record_tool_result(name, is_error=res.is_error, elapsed_ms=elapsed_ms, result=res.to_dict())
        return res
