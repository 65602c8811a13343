from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from ..errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _int(obj: dict[str, Any], key: str, default: int) -> int:
    v = obj.get(key, default)
    if isinstance(v, bool) or not isinstance(v, int):
        raise ConfigError(f"{key} must be an integer, got {v!r}")
    return v


@dataclass
class BashConfig:
    default_timeout_ms: int = 30_000
    max_timeout_ms: int = 120_000
    max_buffer_bytes: int = 10 * 1024 * 1024

    @staticmethod
    def from_obj(obj: Any) -> "BashConfig":
        if not isinstance(obj, dict):
            return BashConfig()
        d = BashConfig()
        return BashConfig(
            default_timeout_ms=_int(obj, "default_timeout_ms", d.default_timeout_ms),
            max_timeout_ms=_int(obj, "max_timeout_ms", d.max_timeout_ms),
            max_buffer_bytes=_int(obj, "max_buffer_bytes", d.max_buffer_bytes),
        )


@dataclass
class GrepConfig:
    default_max_results: int = 50

    @staticmethod
    def from_obj(obj: Any) -> "GrepConfig":
        if not isinstance(obj, dict):
            return GrepConfig()
        return GrepConfig(default_max_results=_int(obj, "default_max_results", 50))


@dataclass
class SkillsConfig:
    base_url: str = "https://skillregistry.io"
    timeout_s: float = 15.0

    @staticmethod
    def from_obj(obj: Any) -> "SkillsConfig":
        if not isinstance(obj, dict):
            return SkillsConfig()
        base_url = obj.get("base_url", SkillsConfig.base_url)
        timeout = obj.get("timeout_s", SkillsConfig.timeout_s)
        if not isinstance(base_url, str) or not base_url.strip():
            raise ConfigError("skills.base_url must be a non-empty string")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ConfigError("skills.timeout_s must be a number")
        return SkillsConfig(base_url=base_url.rstrip("/"), timeout_s=float(timeout))


@dataclass
class BrowserConfig:
    headless: bool = False
    timeout_ms: int = 30_000

    @staticmethod
    def from_obj(obj: Any) -> "BrowserConfig":
        if not isinstance(obj, dict):
            return BrowserConfig()
        return BrowserConfig(
            headless=bool(obj.get("headless", False)),
            timeout_ms=_int(obj, "timeout_ms", 30_000),
        )


@dataclass
class AppConfig:
    """Tool limits and service endpoints, loaded from pycowork.yaml."""

    bash: BashConfig = field(default_factory=BashConfig)
    grep: GrepConfig = field(default_factory=GrepConfig)
    skills: SkillsConfig = field(default_factory=SkillsConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    log_level: str = "WARNING"

    @staticmethod
    def from_obj(obj: Any) -> "AppConfig":
        if not isinstance(obj, dict):
            return AppConfig()
        level = obj.get("log_level", "WARNING")
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return AppConfig(
            bash=BashConfig.from_obj(obj.get("bash")),
            grep=GrepConfig.from_obj(obj.get("grep")),
            skills=SkillsConfig.from_obj(obj.get("skills")),
            browser=BrowserConfig.from_obj(obj.get("browser")),
            log_level=level.upper(),
        )


@dataclass
class Settings:
    """User settings record; ``preferred_browser`` of None means unconfigured."""

    preferred_browser: str | None = None
    theme: str = "system"
    default_model: str | None = None
    analytics_opt_in: bool = False
    onboarding_complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Settings":
        known = {k: d[k] for k in Settings.__dataclass_fields__ if k in d}
        return Settings(**known)
