from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, replace
from typing import Any, Iterable, Literal

from .observable import Observable

TodoStatus = Literal["pending", "in_progress", "completed"]
TODO_STATUSES: tuple[str, ...] = ("pending", "in_progress", "completed")


@dataclass(frozen=True)
class TodoItem:
    id: str
    content: str
    status: TodoStatus = "pending"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "status": self.status}


def new_todo_id(index: int | None = None) -> str:
    ms = int(time.time() * 1000)
    if index is not None:
        return f"todo-{ms}-{index}"
    return f"todo-{ms}-{uuid.uuid4().hex[:7]}"


class TodoStore(Observable):
    """Ordered task list the agent writes and the todo panel renders.

    Every mutation swaps in a new list, so snapshots handed out earlier never
    change underneath their holder.
    """

    def __init__(self, todos: Iterable[TodoItem] = ()) -> None:
        super().__init__()
        self._todos: list[TodoItem] = list(todos)

    @property
    def todos(self) -> list[TodoItem]:
        return list(self._todos)

    def __len__(self) -> int:
        return len(self._todos)

    def get(self, todo_id: str) -> TodoItem | None:
        return next((t for t in self._todos if t.id == todo_id), None)

    def set_todos(self, todos: Iterable[TodoItem]) -> None:
        self._todos = list(todos)
        self._notify()

    def add_todo(self, content: str) -> TodoItem:
        item = TodoItem(id=new_todo_id(), content=content, status="pending")
        self._todos = [*self._todos, item]
        self._notify()
        return item

    def update_todo(self, todo_id: str, *, content: str | None = None, status: TodoStatus | None = None) -> None:
        if status is not None and status not in TODO_STATUSES:
            raise ValueError(f"Invalid status: {status}")
        changes: dict[str, Any] = {}
        if content is not None:
            changes["content"] = content
        if status is not None:
            changes["status"] = status
        self._todos = [replace(t, **changes) if t.id == todo_id else t for t in self._todos]
        self._notify()

    def remove_todo(self, todo_id: str) -> None:
        self._todos = [t for t in self._todos if t.id != todo_id]
        self._notify()

    def clear_todos(self) -> None:
        self._todos = []
        self._notify()
