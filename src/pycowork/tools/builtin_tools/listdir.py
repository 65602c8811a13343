from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext, Success, guarded
from ..schema import ObjectParam, StringParam
from ...util import fs
from ...util.format import format_file_size


def entry_to_dict(entry: fs.FileEntry) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": entry.name,
        "path": entry.path,
        "type": "folder" if entry.is_directory else "file",
    }
    if not entry.is_directory and entry.size:
        d["size"] = format_file_size(entry.size)
    return d


@dataclass
class ListDirTool:
    spec: ToolSpec = ToolSpec(
        name="listDirectory",
        description="List the contents of a directory. Returns file names, sizes, and whether each item is a folder.",
        permission_key="read",
        params=ObjectParam(
            properties={
                "path": StringParam(
                    description='The absolute path to the directory to list (e.g., "/Users/john/Desktop")'
                ),
            },
            required=("path",),
        ),
    )

    @guarded("Failed to list directory", suggestion="Check if the path exists and you have permission to access it")
    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        target = fs.resolve_path(ctx.cwd, args["path"])
        entries = await asyncio.to_thread(fs.list_directory, target)
        items = [entry_to_dict(e) for e in entries]
        return Success({
            "path": str(target),
            "entries": items,
            "count": len(items),
            "message": f"{len(items)} item(s) in {target}",
        })
