from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .app_context import AppContext
from .config.settings import JsonSettingsStore
from .errors import ConfigError, SchemaViolation, UnknownTool
from .events.store import EventStore
from .skills.client import SkillRegistryClient
from .skills.library import SkillLibrary
from .tools.builtin import register_builtin_tools
from .tools.permissions import JsonPermissionStorage, PermissionManager
from .tools.registry import ToolRegistry

app = typer.Typer(add_completion=False, help="pycowork: tool layer and agent state for a desktop AI assistant.")
browser_app = typer.Typer(add_completion=False, help="Preferred browser setting.")
permissions_app = typer.Typer(add_completion=False, help="File access grants.")
skills_app = typer.Typer(add_completion=False, help="Skill registry and installed skills.")
app.add_typer(browser_app, name="browser")
app.add_typer(permissions_app, name="permissions")
app.add_typer(skills_app, name="skills")

console = Console()

STATUS_STYLE = {"pending": "dim", "in_progress": "yellow", "completed": "green"}

# --log-level from the callback; None defers to the config file
_cli_log_level: Optional[str] = None


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser()
    cwd = (Path.cwd() / cwd).resolve() if not cwd.is_absolute() else cwd.resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


def _registry() -> ToolRegistry:
    tools = ToolRegistry()
    register_builtin_tools(tools)
    return tools


def _last_event_data(session: str, event_type: str) -> dict[str, Any] | None:
    ev = EventStore.open(session).last(event_type)
    return ev.data if ev else None


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (DEBUG/INFO/WARNING/ERROR). Defaults to config log_level."
    ),
):
    global _cli_log_level
    _cli_log_level = log_level
    _setup_logging(log_level or "WARNING")


@app.command()
def tools():
    """List the tools the agent can call."""
    table = Table(title="pycowork tools")
    table.add_column("name", style="bold")
    table.add_column("permission")
    table.add_column("description")
    for spec in _registry().list_specs():
        table.add_row(spec.name, spec.permission_key, spec.description.splitlines()[0])
    console.print(table)


@app.command()
def schema(name: Optional[str] = typer.Argument(None, help="Tool name; omit to print every tool.")):
    """Print tool definitions in the function-calling format."""
    reg = _registry()
    if name is None:
        console.print_json(data=reg.to_openai_tools())
        return
    try:
        spec = reg.get(name).spec
    except UnknownTool as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)
    console.print_json(data={"name": spec.name, "description": spec.description, "parameters": spec.parameters})


@app.command()
def call(
    name: str = typer.Argument(..., help="Tool name."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object."),
    cwd: Path = typer.Option(None, "--cwd", help="Working directory. Defaults to current directory."),
    config: Path = typer.Option(None, "--config", help="Explicit pycowork.yaml path."),
    session: str = typer.Option(None, "--session", help="Session id for the event log (default creates new)."),
):
    """Validate and run one tool call, printing its JSON result."""
    try:
        parsed = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]--args is not valid JSON:[/red] {e}")
        raise typer.Exit(code=2)

    try:
        ctx = AppContext.from_env(_resolve_cwd(cwd), session_id=session, config_path=config)
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {e}")
        raise typer.Exit(code=1)
    _setup_logging(_cli_log_level or ctx.config.log_level)

    async def _run():
        try:
            return await ctx.tools.invoke(name, parsed, ctx.tool_context())
        finally:
            await ctx.aclose()

    try:
        res = asyncio.run(_run())
    except (UnknownTool, SchemaViolation) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    console.print(f"[dim]session {ctx.session_id}[/dim]")
    console.print_json(data=res.to_dict())
    if ctx.browser_ui.show_selection_dialog:
        console.print("[yellow]No browser selected.[/yellow] Run [bold]pycowork browser set NAME[/bold] first.")
    if res.is_error:
        raise typer.Exit(code=1)


@app.command()
def todos(session: str = typer.Option(..., "--session", help="Session id to read.")):
    """Show the todo list as last written in a session."""
    data = _last_event_data(session, "todos.updated")
    items = (data or {}).get("todos") or []
    if not items:
        console.print("No todos.")
        raise typer.Exit(code=0)
    table = Table.grid(padding=(0, 2))
    for t in items:
        status = t.get("status", "pending")
        table.add_row(f"[{STATUS_STYLE.get(status, '')}]{status}[/]", t.get("content", ""))
    console.print(Panel(table, title="Todos", border_style="bright_blue"))


@app.command()
def questions(session: str = typer.Option(..., "--session", help="Session id to read.")):
    """Show the active question set of a session."""
    data = _last_event_data(session, "questions.updated")
    qs = (data or {}).get("questionSet")
    if not qs:
        console.print("No active questions.")
        raise typer.Exit(code=0)
    for i, q in enumerate(qs.get("questions") or []):
        marker = ">" if i == qs.get("currentIndex") else " "
        console.print(f"{marker} [bold]{q['question']}[/bold]")
        for o in q.get("options") or []:
            chosen = "x" if o["id"] == q.get("selectedOptionId") else " "
            console.print(f"    [{chosen}] {o['label']}")
        if q.get("customAnswer"):
            console.print(f"    answer: {q['customAnswer']}")
    if qs.get("submitted"):
        console.print("[green]submitted[/green]")


@browser_app.command("show")
def browser_show():
    """Print the preferred browser."""
    browser = JsonSettingsStore.open().get().preferred_browser
    console.print(browser or "[dim](not configured)[/dim]")


@browser_app.command("set")
def browser_set(name: str = typer.Argument(..., help="chrome, edge, chromium, firefox or webkit.")):
    """Choose the browser the browser tools drive."""
    from .browser.playwright_engine import SUPPORTED_BROWSERS

    if name not in SUPPORTED_BROWSERS:
        console.print(f"[red]Unknown browser:[/red] {name}. Known: {', '.join(SUPPORTED_BROWSERS)}")
        raise typer.Exit(code=2)
    JsonSettingsStore.open().update(preferred_browser=name)
    console.print(f"Preferred browser set to [bold]{name}[/bold]")


def _permissions() -> PermissionManager:
    return PermissionManager(JsonPermissionStorage.open())


@permissions_app.command("list")
def permissions_list():
    records = _permissions().list_permissions()
    if not records:
        console.print("No permissions granted.")
        raise typer.Exit(code=0)
    table = Table()
    table.add_column("path")
    table.add_column("operation")
    table.add_column("scope")
    for r in records:
        table.add_row(r.path, r.operation, r.scope)
    console.print(table)


@permissions_app.command("grant")
def permissions_grant(
    path: str = typer.Argument(...),
    operation: str = typer.Argument(..., help="read, write, ..."),
    scope: str = typer.Option("always", "--scope", help="session or always."),
):
    try:
        rec = _permissions().grant(path, operation, scope)  # type: ignore[arg-type]
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)
    console.print(f"Granted {rec.operation} on {rec.path} ({rec.scope})")


@permissions_app.command("revoke")
def permissions_revoke(path: str = typer.Argument(...), operation: str = typer.Argument(...)):
    _permissions().revoke(path, operation)
    console.print(f"Revoked {operation} on {path}")


@permissions_app.command("clear-session")
def permissions_clear_session():
    """Drop session grants. They only live in one process, so this is a no-op across CLI runs."""
    _permissions().clear_session()
    console.print("Session permissions cleared.")


@skills_app.command("search")
def skills_search(
    query: str = typer.Argument("", help="Search text; empty shows featured skills."),
    config: Path = typer.Option(None, "--config", help="Explicit pycowork.yaml path."),
):
    from .config.loader import load_app_config

    cfg, _ = load_app_config(cwd=Path.cwd(), explicit_path=config)
    _setup_logging(_cli_log_level or cfg.log_level)
    client = SkillRegistryClient(cfg.skills.base_url, cfg.skills.timeout_s)
    results = asyncio.run(client.search(query))
    if not results:
        console.print("No skills found.")
        raise typer.Exit(code=0)
    for s in results:
        console.print(f"- [bold]{s.name}[/bold] ({s.id}) {s.description}")


@skills_app.command("list")
def skills_list():
    """List installed skills."""
    skills = SkillLibrary.open().list_skills()
    if not skills:
        console.print("No skills installed.")
        raise typer.Exit(code=0)
    for s in skills:
        state = "[green]on[/green]" if s.enabled else "[dim]off[/dim]"
        console.print(f"- {state} [bold]{s.name}[/bold] {s.description}")


if __name__ == "__main__":
    app()
