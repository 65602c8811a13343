from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext, Success, guarded
from ..schema import NumberParam, ObjectParam, StringParam
from ...util import fs


@dataclass
class GrepTool:
    spec: ToolSpec = ToolSpec(
        name="grep",
        description="Search inside files for text matching a pattern. Returns the files and lines where matches are found.",
        permission_key="read",
        params=ObjectParam(
            properties={
                "pattern": StringParam(description="The text or pattern to search for"),
                "path": StringParam(description="The file or directory to search in"),
                "maxResults": NumberParam(
                    integer=True,
                    minimum=1,
                    description="Maximum number of results to return (default: 50)",
                ),
            },
            required=("pattern", "path"),
        ),
    )

    @guarded("Failed to search file contents", suggestion="Check if the path exists and is readable")
    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        pattern = args["pattern"]
        path = args["path"]
        max_results = args.get("maxResults") or ctx.config.grep.default_max_results
        target = fs.resolve_path(ctx.cwd, path)

        matches = await asyncio.to_thread(fs.grep, pattern, target, max_results)
        if not matches:
            return Success({"matches": [], "message": f'No matches found for "{pattern}" in {path}'})
        return Success({
            "matches": [m.to_dict() for m in matches],
            "count": len(matches),
            "message": f'Found {len(matches)} matches for "{pattern}"',
        })
