from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from ..errors import ConfigError
from .models import AppConfig

APP_NAME = "pycowork"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _candidate_paths(cwd: Path) -> list[Path]:
    return [cwd / ".pycowork.yaml", cwd / "pycowork.yaml"]


def _global_candidate_paths() -> list[Path]:
    return [Path(user_config_dir(APP_NAME)) / "pycowork.yaml"]


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        def repl(m: re.Match) -> str:
            var = m.group(1)
            val = os.getenv(var)
            if val is None:
                raise ConfigError(f"Placeholder '${{{var}}}' not found in environment.")
            return val

        return _ENV_PATTERN.sub(repl, value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _load_yaml(p: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p} must contain a mapping at the top level.")
    return data


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dicts(out[k], v)
        else:
            out[k] = v
    return out


def load_app_config(*, cwd: Path, explicit_path: Path | None = None) -> tuple[AppConfig, Path | None]:
    """Load the app config and return it with the last file that contributed.

    Merge order: global < project < explicit_path. A missing explicit path is
    an error; missing global/project files are not.
    """
    merged: dict[str, Any] = {}
    loaded_from: Path | None = None

    for p in _global_candidate_paths():
        if p.is_file():
            merged = _merge_dicts(merged, _load_yaml(p))
            loaded_from = p

    for p in _candidate_paths(cwd):
        if p.is_file():
            merged = _merge_dicts(merged, _load_yaml(p))
            loaded_from = p
            break  # first match wins for project-level

    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if not p.is_file():
            raise ConfigError(f"Config YAML not found: {p}")
        merged = _merge_dicts(merged, _load_yaml(p))
        loaded_from = p

    return AppConfig.from_obj(_expand_env(merged)), loaded_from
