from __future__ import annotations

from .registry import ToolRegistry

from .builtin_tools.listdir import ListDirTool
from .builtin_tools.glob_tool import GlobTool
from .builtin_tools.grep_tool import GrepTool
from .builtin_tools.file_read import ReadFileTool, ViewImageTool
from .builtin_tools.todo_tools import TodoWriteTool
from .builtin_tools.question_tool import QuestionTool
from .builtin_tools.bash_tool import BashTool
from .builtin_tools.browser_tools import (
    BrowserClickTool,
    BrowserCloseTool,
    BrowserGetContentTool,
    BrowserGetLinksTool,
    BrowserNavigateTool,
    BrowserPressTool,
    BrowserScreenshotTool,
    BrowserScrollTool,
    BrowserTypeTool,
)
from .builtin_tools.skill_tools import InstallSkillTool, SearchSkillsTool


def register_builtin_tools(registry: ToolRegistry) -> None:
    registry.register(ListDirTool())
    registry.register(GlobTool())
    registry.register(GrepTool())
    registry.register(ReadFileTool())
    registry.register(ViewImageTool())
    registry.register(TodoWriteTool())
    registry.register(QuestionTool())
    registry.register(BashTool())
    registry.register(BrowserNavigateTool())
    registry.register(BrowserGetContentTool())
    registry.register(BrowserClickTool())
    registry.register(BrowserTypeTool())
    registry.register(BrowserPressTool())
    registry.register(BrowserGetLinksTool())
    registry.register(BrowserScrollTool())
    registry.register(BrowserScreenshotTool())
    registry.register(BrowserCloseTool())
    registry.register(SearchSkillsTool())
    registry.register(InstallSkillTool())
