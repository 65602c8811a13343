from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional


class Debouncer:
    """Run ``fn`` once calls have been quiet for ``delay`` seconds.

    Each ``call`` cancels the previously scheduled run. The returned task is
    the cancel handle for that particular run.
    """

    def __init__(self, delay: float, fn: Callable[..., Any]):
        self.delay = delay
        self.fn = fn
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(args, kwargs))
        return self._task

    async def _run(self, args: tuple, kwargs: dict) -> Any:
        await asyncio.sleep(self.delay)
        result = self.fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
