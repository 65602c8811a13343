from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext, Success, Failure, guarded
from ..schema import ObjectParam, StringParam
from ...errors import CapabilityUnavailable
from ...util import fs

logger = logging.getLogger(__name__)

RESTART_SUGGESTION = (
    'IMPORTANT: Tell the user this error: "The image viewing feature requires a full app restart. '
    'Please close and reopen the app, then try again." Do NOT retry this tool - it will fail until the '
    "app is restarted."
)
RETRY_SUGGESTION = (
    "Check if the file exists, is a valid image format (PNG, JPG, GIF, WEBP), and you have permission to "
    "read it. You may retry once if the path was incorrect."
)


@dataclass
class ReadFileTool:
    spec: ToolSpec = ToolSpec(
        name="readFile",
        description="Read the full contents of a text file. Use this after you have found the file you need.",
        permission_key="read",
        params=ObjectParam(
            properties={"path": StringParam(description="The absolute path to the file to read")},
            required=("path",),
        ),
    )

    @guarded("Failed to read file", suggestion="Check if the file exists and you have permission to read it")
    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        content = await asyncio.to_thread(fs.read_text, fs.resolve_path(ctx.cwd, path))
        return Success({"path": path, "content": content, "length": len(content)})


@dataclass
class ViewImageTool:
    spec: ToolSpec = ToolSpec(
        name="viewImage",
        description=(
            "View an image file. Use this to see the contents of images (PNG, JPG, GIF, etc.) so you can describe "
            "or analyze them. Returns the image as a data URL that you can see. If this tool fails, tell the user "
            "the specific error and suggest they restart the app if it says the image reader is not initialized."
        ),
        permission_key="read",
        params=ObjectParam(
            properties={"path": StringParam(description="The absolute path to the image file to view")},
            required=("path",),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        try:
            if ctx.read_base64 is None:
                raise CapabilityUnavailable("Image reader is not initialized in this process.")
            result = await asyncio.to_thread(ctx.read_base64, str(fs.resolve_path(ctx.cwd, path)))
        except CapabilityUnavailable as e:
            logger.warning("viewImage unavailable: %s", e)
            return Failure(
                message=str(e),
                suggestion=RESTART_SUGGESTION,
                requires_restart=True,
                retryable=False,
            )
        except Exception as e:
            return Failure(
                message=str(e) or "Failed to read image",
                suggestion=RETRY_SUGGESTION,
                requires_restart=False,
                retryable=True,
            )
        return Success({
            "path": path,
            "mimeType": result.mime_type,
            "type": "image",
            "image": result.data_url,
            "message": "Image loaded successfully. The image is now visible to you.",
        })
