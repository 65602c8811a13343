from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

APP_NAME = "pycowork"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledSkill:
    id: str
    name: str
    description: str
    content: str
    source_url: str | None = None
    enabled: bool = True
    created_at: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_obj(obj: Any) -> "InstalledSkill | None":
        if not isinstance(obj, dict):
            return None
        sid, name = obj.get("id"), obj.get("name")
        if not isinstance(sid, str) or not isinstance(name, str):
            return None
        return InstalledSkill(
            id=sid,
            name=name,
            description=str(obj.get("description") or ""),
            content=str(obj.get("content") or ""),
            source_url=obj.get("source_url") if isinstance(obj.get("source_url"), str) else None,
            enabled=bool(obj.get("enabled", True)),
            created_at=float(obj.get("created_at") or 0.0),
        )


@dataclass
class SkillLibrary:
    """Installed skills, kept as one JSON list in the user data dir."""

    path: Path

    @staticmethod
    def open(path: Path | None = None) -> "SkillLibrary":
        if path is None:
            root = Path(user_data_dir(APP_NAME))
            root.mkdir(parents=True, exist_ok=True)
            path = root / "skills.json"
        return SkillLibrary(path=path)

    def _load(self) -> list[InstalledSkill]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("ignoring corrupt skill library %s", self.path)
            return []
        if not isinstance(data, list):
            return []
        return [s for s in (InstalledSkill.from_obj(x) for x in data) if s is not None]

    def _save(self, skills: list[InstalledSkill]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [s.to_dict() for s in skills]
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def list_skills(self, *, enabled_only: bool = False) -> list[InstalledSkill]:
        skills = self._load()
        if enabled_only:
            return [s for s in skills if s.enabled]
        return skills

    def find_by_name(self, name: str) -> InstalledSkill | None:
        for s in self._load():
            if s.name == name:
                return s
        return None

    def create_skill(self, *, name: str, description: str, content: str, source_url: str | None = None) -> InstalledSkill:
        skill = InstalledSkill(
            id=uuid.uuid4().hex,
            name=name,
            description=description,
            content=content,
            source_url=source_url,
            created_at=time.time(),
        )
        self._save([*self._load(), skill])
        logger.info("installed skill %s", name)
        return skill

    def set_enabled(self, skill_id: str, enabled: bool) -> InstalledSkill:
        skills = self._load()
        for i, s in enumerate(skills):
            if s.id == skill_id:
                skills[i] = replace(s, enabled=enabled)
                self._save(skills)
                return skills[i]
        raise KeyError(skill_id)

    def delete_skill(self, skill_id: str) -> bool:
        skills = self._load()
        kept = [s for s in skills if s.id != skill_id]
        if len(kept) == len(skills):
            return False
        self._save(kept)
        return True
