from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Protocol

from platformdirs import user_config_dir

from ..errors import ConfigError
from .models import Settings

APP_NAME = "pycowork"

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def get(self) -> Settings: ...

    def update(self, **fields: Any) -> Settings: ...


@dataclass
class MemorySettingsStore:
    settings: Settings

    def get(self) -> Settings:
        return self.settings

    def update(self, **fields: Any) -> Settings:
        self.settings = replace(self.settings, **fields)
        return self.settings


@dataclass
class JsonSettingsStore:
    """Single settings record kept as JSON in the user config dir."""

    path: Path

    @staticmethod
    def open(path: Path | None = None) -> "JsonSettingsStore":
        if path is None:
            root = Path(user_config_dir(APP_NAME))
            root.mkdir(parents=True, exist_ok=True)
            path = root / "settings.json"
        return JsonSettingsStore(path=path)

    def get(self) -> Settings:
        if not self.path.exists():
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("ignoring corrupt settings file %s", self.path)
            return Settings()
        if not isinstance(data, dict):
            return Settings()
        return Settings.from_dict(data)

    def update(self, **fields: Any) -> Settings:
        unknown = set(fields) - set(Settings.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Unknown settings field(s): {', '.join(sorted(unknown))}")
        s = replace(self.get(), **fields)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(s.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        return s
