from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext, Success, guarded
from ..schema import ObjectParam, StringParam
from ...util import fs
from .listdir import entry_to_dict


@dataclass
class GlobTool:
    spec: ToolSpec = ToolSpec(
        name="glob",
        description=(
            'Find files matching a glob pattern. Use patterns like "*.txt" for text files, "**/*.js" for all '
            'JavaScript files recursively, or "report*.pdf" for PDFs starting with "report".'
        ),
        permission_key="read",
        params=ObjectParam(
            properties={
                "pattern": StringParam(description='The glob pattern to match (e.g., "*.pdf", "**/*.ts", "config*")'),
                "path": StringParam(
                    description="The directory to search in. If not provided, searches from the current location."
                ),
            },
            required=("pattern",),
        ),
    )

    @guarded("Failed to search for files", suggestion="Check if the search path exists and the pattern is valid")
    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        pattern = args["pattern"]
        path = args.get("path")
        base = fs.resolve_path(ctx.cwd, path) if path else fs.resolve_path(ctx.cwd, ".")
        entries = await asyncio.to_thread(fs.glob_entries, pattern, base)
        if not entries:
            where = f" in {path}" if path else ""
            return Success({"files": [], "message": f'No files found matching pattern "{pattern}"{where}'})
        files = [entry_to_dict(e) for e in entries]
        return Success({
            "files": files,
            "count": len(files),
            "message": f'Found {len(files)} item(s) matching "{pattern}"',
        })
