from __future__ import annotations

from typing import Any

from ..base import ToolContext, ToolResult, ToolSpec, Success, guarded
from ..schema import ArrayParam, EnumParam, ObjectParam, StringParam
from ...stores.todo import TODO_STATUSES, TodoItem, new_todo_id


class TodoWriteTool:
    """Replace the todo panel's list with the one the agent sends.

    Each call is the complete, authoritative list. Items left out are dropped;
    sending an existing id keeps that item's identity.
    """

    spec = ToolSpec(
        name="todoWrite",
        description=(
            "Update the TODO panel to show progress on multi-step tasks. Use this to help the user see what you "
            "are working on. Always send the full list; items you omit are removed."
        ),
        params=ObjectParam(
            properties={
                "todos": ArrayParam(
                    items=ObjectParam(
                        properties={
                            "id": StringParam(description="ID of existing todo to update"),
                            "content": StringParam(description="Short description of the task"),
                            "status": EnumParam(
                                values=TODO_STATUSES,
                                description=(
                                    "Current status: pending (not started), in_progress (working on it), "
                                    "or completed (done)"
                                ),
                            ),
                        },
                        required=("content", "status"),
                    ),
                ),
            },
            required=("todos",),
        ),
        permission_key="edit",
    )

    @guarded("Failed to update todos")
    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        todos = [
            TodoItem(id=t.get("id") or new_todo_id(i), content=t["content"], status=t["status"])
            for i, t in enumerate(args["todos"])
        ]
        ctx.todos.set_todos(todos)
        return Success({
            "success": True,
            "message": f"Updated {len(todos)} todo(s)",
            "todos": [t.to_dict() for t in todos],
        })
