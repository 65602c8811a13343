from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .browser.controller import BrowserSessionController
from .browser.engine import BrowserEngine
from .browser.state import BrowserUIState
from .config.loader import load_app_config
from .config.models import AppConfig
from .config.settings import JsonSettingsStore, SettingsStore
from .events.store import EventStore
from .skills.client import SkillRegistryClient
from .skills.library import SkillLibrary
from .stores.question import QuestionStore
from .stores.todo import TodoStore
from .tools.base import ToolContext
from .tools.builtin import register_builtin_tools
from .tools.permissions import JsonPermissionStorage, PermissionManager
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def _trace_stores(events: EventStore, todos: TodoStore, questions: QuestionStore) -> None:
    """Snapshot store changes into the event log so later runs can show them."""

    def on_todos() -> None:
        events.append("todos.updated", {"todos": [t.to_dict() for t in todos.todos]})

    def on_questions() -> None:
        qs = questions.active_question_set
        events.append("questions.updated", {"questionSet": qs.to_dict() if qs else None})

    todos.subscribe(on_todos)
    questions.subscribe(on_questions)


@dataclass
class AppContext:
    """Everything one process shares between the agent runtime and the UI."""

    cwd: Path
    config: AppConfig
    settings: SettingsStore
    todos: TodoStore
    questions: QuestionStore
    browser_ui: BrowserUIState
    browser: BrowserSessionController
    permissions: PermissionManager
    skills: SkillRegistryClient
    skill_library: SkillLibrary
    tools: ToolRegistry
    session_id: str
    events: EventStore | None = None
    config_path: Optional[Path] = None

    @staticmethod
    def from_env(
        cwd: Path,
        *,
        session_id: str | None = None,
        config_path: Path | None = None,
        record_events: bool = True,
    ) -> "AppContext":
        config, loaded_from = load_app_config(cwd=cwd, explicit_path=config_path)
        if loaded_from:
            logger.info("loaded config from %s", loaded_from)

        session_id = session_id or uuid.uuid4().hex[:12]
        events = EventStore.open(session_id) if record_events else None

        settings = JsonSettingsStore.open()
        browser_ui = BrowserUIState()

        def engine_factory(browser: str) -> BrowserEngine:
            # playwright is only imported once a session is actually opened
            from .browser.playwright_engine import PlaywrightEngine

            return PlaywrightEngine(browser, headless=config.browser.headless, timeout_ms=config.browser.timeout_ms)

        tools = ToolRegistry(events=events)
        register_builtin_tools(tools)

        todos, questions = TodoStore(), QuestionStore()
        if events is not None:
            _trace_stores(events, todos, questions)

        return AppContext(
            cwd=cwd,
            config=config,
            settings=settings,
            todos=todos,
            questions=questions,
            browser_ui=browser_ui,
            browser=BrowserSessionController(engine_factory, settings, browser_ui),
            permissions=PermissionManager(JsonPermissionStorage.open()),
            skills=SkillRegistryClient(config.skills.base_url, config.skills.timeout_s),
            skill_library=SkillLibrary.open(),
            tools=tools,
            session_id=session_id,
            events=events,
            config_path=loaded_from,
        )

    def tool_context(self) -> ToolContext:
        return ToolContext(
            cwd=str(self.cwd),
            session_id=self.session_id,
            todos=self.todos,
            questions=self.questions,
            browser=self.browser,
            skills=self.skills,
            skill_library=self.skill_library,
            config=self.config,
        )

    async def aclose(self) -> None:
        await self.browser.close()
