from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Iterator

from platformdirs import user_data_dir

APP_NAME = "pycowork"

PREVIEW_CHARS = 4000


def _events_dir() -> Path:
    d = Path(user_data_dir(APP_NAME)) / "events"
    d.mkdir(parents=True, exist_ok=True)
    return d


@dataclass
class Event:
    ts: float
    type: str
    data: dict[str, Any]


@dataclass
class EventStore:
    """Append-only JSONL trace of tool activity for one session.

    Lines that fail to parse are skipped on read, so a write cut short by a
    crash only loses that one event.
    """

    session_id: str
    path: Path

    @staticmethod
    def open(session_id: str, root: Path | None = None) -> "EventStore":
        d = root if root is not None else _events_dir()
        d.mkdir(parents=True, exist_ok=True)
        return EventStore(session_id=session_id, path=d / f"{session_id}.jsonl")

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        ev = Event(ts=time.time(), type=event_type, data=data)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(ev), ensure_ascii=False, default=str) + "\n")

    def record_tool_result(self, tool: str, *, is_error: bool, elapsed_ms: int, result: dict[str, Any]) -> None:
        preview = json.dumps(result, ensure_ascii=False, default=str)
        self.append(
            "tool.result",
            {
                "tool": tool,
                "is_error": is_error,
                "elapsed_ms": elapsed_ms,
                "content_len": len(preview),
                "content_preview": preview[:PREVIEW_CHARS],
            },
        )

    def iter_events(self, event_type: str | None = None) -> Iterator[Event]:
        if not self.path.exists():
            return
        for line in self.path.read_text(encoding="utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(obj, dict):
                continue
            ev = Event(ts=float(obj.get("ts", 0.0)), type=str(obj.get("type")), data=obj.get("data") or {})
            if event_type is None or ev.type == event_type:
                yield ev

    def last(self, event_type: str) -> Event | None:
        """Most recent event of ``event_type``; used to restore store snapshots."""
        found = None
        for ev in self.iter_events(event_type):
            found = ev
        return found
