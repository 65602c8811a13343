from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal, Protocol

from platformdirs import user_data_dir

APP_NAME = "pycowork"

Scope = Literal["session", "always"]
SCOPES: tuple[str, ...] = ("session", "always")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionRecord:
    path: str
    operation: str
    scope: Scope
    created_at: float

    @property
    def key(self) -> str:
        return f"{self.path}:{self.operation}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_obj(obj: Any) -> "PermissionRecord | None":
        if not isinstance(obj, dict):
            return None
        p, op = obj.get("path"), obj.get("operation")
        if not isinstance(p, str) or not isinstance(op, str):
            return None
        return PermissionRecord(path=p, operation=op, scope="always", created_at=float(obj.get("created_at") or 0.0))


class PermissionStorage(Protocol):
    """Durable home of ``always`` grants, keyed by (path, operation)."""

    def find(self, path: str, operation: str) -> PermissionRecord | None: ...

    def upsert(self, record: PermissionRecord) -> PermissionRecord: ...

    def delete(self, path: str, operation: str) -> None: ...

    def all(self) -> list[PermissionRecord]: ...


@dataclass
class JsonPermissionStorage:
    path: Path

    @staticmethod
    def open(path: Path | None = None) -> "JsonPermissionStorage":
        if path is None:
            root = Path(user_data_dir(APP_NAME))
            root.mkdir(parents=True, exist_ok=True)
            path = root / "permissions.json"
        return JsonPermissionStorage(path=path)

    def all(self) -> list[PermissionRecord]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("ignoring corrupt permissions file %s", self.path)
            return []
        if not isinstance(data, list):
            return []
        return [r for r in (PermissionRecord.from_obj(x) for x in data) if r is not None]

    def _save(self, records: list[PermissionRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([r.to_dict() for r in records], indent=2), encoding="utf-8")

    def find(self, path: str, operation: str) -> PermissionRecord | None:
        for r in self.all():
            if r.path == path and r.operation == operation:
                return r
        return None

    def upsert(self, record: PermissionRecord) -> PermissionRecord:
        records = [r for r in self.all() if r.key != record.key]
        records.append(record)
        self._save(records)
        return record

    def delete(self, path: str, operation: str) -> None:
        records = self.all()
        kept = [r for r in records if not (r.path == path and r.operation == operation)]
        if len(kept) != len(records):
            self._save(kept)


class PermissionManager:
    """Per-(path, operation) grants.

    Session grants live in memory and vanish with the process; ``always``
    grants go to storage. ``check`` consults the session first.
    """

    def __init__(self, storage: PermissionStorage):
        self.storage = storage
        self._session: dict[str, PermissionRecord] = {}

    def check(self, path: str, operation: str) -> PermissionRecord | None:
        hit = self._session.get(f"{path}:{operation}")
        if hit is not None:
            return hit
        return self.storage.find(path, operation)

    def grant(self, path: str, operation: str, scope: Scope) -> PermissionRecord:
        if scope not in SCOPES:
            raise ValueError(f"Invalid permission scope: {scope}")
        rec = PermissionRecord(path=path, operation=operation, scope=scope, created_at=time.time())
        if scope == "session":
            self._session[rec.key] = rec
            return rec
        return self.storage.upsert(rec)

    def revoke(self, path: str, operation: str) -> None:
        self._session.pop(f"{path}:{operation}", None)
        self.storage.delete(path, operation)

    def list_permissions(self) -> list[PermissionRecord]:
        return [*self.storage.all(), *self._session.values()]

    def clear_session(self) -> None:
        self._session.clear()
