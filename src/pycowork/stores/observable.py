from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Observable:
    """Synchronous change notification shared by the UI-facing stores."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                # a broken view must not fail the tool call that mutated the store
                logger.exception("store listener %r failed", listener)
