"""Process-wide dashboard session with an explicit load/refresh lifecycle.

States: idle -> loading -> success | error. A refresh re-enters loading and
repeats fetch -> process. Loads are not deduplicated; when two overlap, the
one that completes last is what the session shows.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from dispatch_core.data import DashboardData, Loader, load_dashboard_data, prepare_context, select_dispatch
from dispatch_core.filters import FILTER_ALL, DashboardFilters, normalize_filter_key
from dispatch_core.records import DispatchEntry, DispatchStats


logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Failed to load data from Firebase. Please check your connection and try again."

Status = Literal["idle", "loading", "success", "error"]


class DashboardSession:
    def __init__(self, loader: Optional[Loader] = None, *, active_filter: str = FILTER_ALL) -> None:
        self._loader = loader
        self.status: Status = "idle"
        self.error: Optional[str] = None
        self.data = DashboardData()
        self.active_filter = normalize_filter_key(active_filter)
        self.search_term = ""
        self.filtered_dispatch: List[DispatchEntry] = []

    @property
    def filters(self) -> DashboardFilters:
        return DashboardFilters(active_filter=self.active_filter, search_term=self.search_term)

    async def load(self) -> None:
        self.status = "loading"
        self.error = None
        try:
            data = await load_dashboard_data(self._loader)
        except Exception:
            logger.exception("Error loading data")
            self.error = LOAD_ERROR_MESSAGE
            self.status = "error"
            return
        self.data = data
        self.filtered_dispatch = select_dispatch(data, self.active_filter)
        self.status = "success"

    async def refresh(self) -> None:
        await self.load()

    def select_filter(self, filter_key: str) -> None:
        self.active_filter = normalize_filter_key(filter_key)
        self.filtered_dispatch = select_dispatch(self.data, self.active_filter)
        self.search_term = ""

    def set_search(self, term: Optional[str]) -> None:
        self.search_term = term or ""

    @property
    def display_stats(self) -> DispatchStats:
        return self.data.display_stats

    def context(self) -> Dict[str, object]:
        return prepare_context(self.filters, self.data, filtered_dispatch=self.filtered_dispatch)
