from __future__ import annotations

import asyncio
import json
import logging
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Callable

from ..errors import SkillRegistryError

logger = logging.getLogger(__name__)

USER_AGENT = "pycowork/0.1"


@dataclass
class SkillSummary:
    id: str
    name: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    download_count: int | None = None

    @staticmethod
    def from_obj(obj: Any) -> "SkillSummary | None":
        if not isinstance(obj, dict):
            return None
        sid = obj.get("id")
        name = obj.get("name")
        if not isinstance(sid, str) or not sid or not isinstance(name, str):
            return None
        tags = obj.get("tags")
        count = obj.get("downloadCount")
        return SkillSummary(
            id=sid,
            name=name,
            description=str(obj.get("description") or ""),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            download_count=count if isinstance(count, int) and not isinstance(count, bool) else None,
        )


class SkillRegistryClient:
    """Client for the public skill registry.

    ``search`` is for the UI and degrades to an empty list; the agent-facing
    ``search_or_raise`` lets the tool report the network error instead.
    """

    def __init__(self, base_url: str = "https://skillregistry.io", timeout_s: float = 15.0, urlopen: Callable[..., Any] = urllib.request.urlopen):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._urlopen = urlopen

    def skill_url(self, skill_id: str) -> str:
        return f"{self.base_url}/skills/{skill_id}"

    def _search_url(self, query: str) -> str:
        q = query.strip()
        if not q:
            return f"{self.base_url}/api/skills/featured"
        return f"{self.base_url}/api/skills?search={urllib.parse.quote(q)}"

    def _get(self, url: str) -> bytes:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with self._urlopen(req, timeout=self.timeout_s) as resp:
                status = getattr(resp, "status", 200)
                if status >= 400:
                    raise SkillRegistryError(f"Skill registry returned HTTP {status} for {url}")
                return resp.read()
        except SkillRegistryError:
            raise
        except Exception as e:
            # urllib raises HTTPError (a URLError) for 4xx/5xx
            raise SkillRegistryError(f"Skill registry request failed: {e}") from e

    def _search_sync(self, query: str) -> list[SkillSummary]:
        raw = self._get(self._search_url(query))
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SkillRegistryError(f"Skill registry returned invalid JSON: {e}") from e
        items = data if isinstance(data, list) else (data.get("skills") or []) if isinstance(data, dict) else []
        out = [SkillSummary.from_obj(x) for x in items]
        return [s for s in out if s is not None]

    async def search_or_raise(self, query: str) -> list[SkillSummary]:
        return await asyncio.to_thread(self._search_sync, query)

    async def search(self, query: str) -> list[SkillSummary]:
        try:
            return await self.search_or_raise(query)
        except SkillRegistryError as e:
            logger.warning("skill search failed: %s", e)
            return []

    async def get_content(self, skill_id: str) -> str | None:
        """Fetch the skill's markdown; None when it cannot be fetched."""
        try:
            raw = await asyncio.to_thread(self._get, self.skill_url(skill_id))
        except SkillRegistryError as e:
            logger.warning("skill content fetch failed for %s: %s", skill_id, e)
            return None
        return raw.decode("utf-8", errors="replace")
