from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ClassVar, Optional, Protocol, Union

from ..config.models import AppConfig
from ..stores.question import QuestionStore
from ..stores.todo import TodoStore
from ..util import fs
from .schema import ObjectParam

if TYPE_CHECKING:
    from ..browser.controller import BrowserSessionController
    from ..skills.client import SkillRegistryClient
    from ..skills.library import SkillLibrary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    params: ObjectParam
    permission_key: str          # "read" | "edit" | "bash" | "browser" | "network"

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON schema for the tool arguments."""
        return self.params.to_json_schema()


@dataclass
class Success:
    payload: dict[str, Any] = field(default_factory=dict)

    is_error: ClassVar[bool] = False

    def to_dict(self) -> dict[str, Any]:
        return dict(self.payload)


@dataclass
class Failure:
    message: str
    suggestion: str | None = None
    retryable: bool | None = None
    requires_restart: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    is_error: ClassVar[bool] = True

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"error": True, "message": self.message}
        if self.suggestion is not None:
            d["suggestion"] = self.suggestion
        if self.retryable is not None:
            d["retryable"] = self.retryable
        if self.requires_restart is not None:
            d["requiresRestart"] = self.requires_restart
        d.update(self.extra)
        return d


ToolResult = Union[Success, Failure]


@dataclass
class ToolContext:
    cwd: str
    # Optional session id, used to tag events
    session_id: str | None = None
    todos: TodoStore = field(default_factory=TodoStore)
    questions: QuestionStore = field(default_factory=QuestionStore)
    browser: Optional["BrowserSessionController"] = None
    skills: Optional["SkillRegistryClient"] = None
    skill_library: Optional["SkillLibrary"] = None
    # None means the binary reader was never wired into this process
    read_base64: Optional[Callable[[str], fs.Base64File]] = fs.read_base64
    config: AppConfig = field(default_factory=AppConfig)


class Tool(Protocol):
    spec: ToolSpec

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult: ...


Executor = Callable[..., Awaitable[ToolResult]]


def guarded(fallback: str, suggestion: str | None = None) -> Callable[[Executor], Executor]:
    """Turn any exception raised by an executor into a ``Failure``.

    ``fallback`` is used when the exception carries no message.
    """

    def deco(fn: Executor) -> Executor:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> ToolResult:
            try:
                return await fn(*args, **kwargs)
            except Exception as e:
                logger.debug("executor %s failed", fn.__qualname__, exc_info=True)
                return Failure(message=str(e) or fallback, suggestion=suggestion)

        return wrapper

    return deco
