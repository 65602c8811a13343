from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

from ..stores.observable import Observable

PendingOperation = Callable[[], Awaitable[Any]]


class BrowserUIState(Observable):
    """UI side channel for browser setup.

    Browser tools raise ``show_selection_dialog`` when no browser is chosen;
    the UI shows its picker, persists the choice and may then replay a
    pending operation.
    """

    def __init__(self) -> None:
        super().__init__()
        self.show_selection_dialog = False
        self.pending_operation: Optional[PendingOperation] = None
        self.selection_requests = 0

    def request_selection(self) -> None:
        self.selection_requests += 1
        self.show_selection_dialog = True
        self._notify()

    def dismiss_selection(self) -> None:
        self.show_selection_dialog = False
        self._notify()

    def set_pending_operation(self, op: Optional[PendingOperation]) -> None:
        self.pending_operation = op
        self._notify()

    async def execute_pending_operation(self) -> Any:
        op = self.pending_operation
        if op is None:
            return None
        try:
            return await op()
        finally:
            self.pending_operation = None
            self._notify()
