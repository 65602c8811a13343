from __future__ import annotations

import asyncio

from ..stores.observable import Observable
from ..util.debounce import Debouncer
from .client import SkillRegistryClient, SkillSummary

SEARCH_DELAY = 0.3


class SkillMarketplace(Observable):
    """Search-as-you-type state for the skills browser.

    Each ``set_query`` restarts a short debounce; only the last query in a
    burst reaches the registry. Registry failures show up as no results.
    """

    def __init__(self, client: SkillRegistryClient, delay: float = SEARCH_DELAY):
        super().__init__()
        self.client = client
        self.query = ""
        self.results: list[SkillSummary] = []
        self.loading = False
        self._debounce = Debouncer(delay, self._search)

    def set_query(self, query: str) -> asyncio.Task:
        self.query = query
        self.loading = True
        self._notify()
        return self._debounce.call(query)

    async def _search(self, query: str) -> list[SkillSummary]:
        results = await self.client.search(query)
        self.results = results
        self.loading = False
        self._notify()
        return results

    def cancel(self) -> None:
        if self._debounce.pending:
            self._debounce.cancel()
            self.loading = False
            self._notify()
