from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import pandas as pd

from dispatch_core.classify import partition_dispatch, reallocation_by_chassis
from dispatch_core.filters import (
    FILTER_CAN_BE_DISPATCHED,
    FILTER_SNOWY_STOCK,
    DashboardFilters,
    filter_dispatch_data,
    normalize_filters,
)
from dispatch_core.firebase import RawCollections, fetch_all
from dispatch_core.processing import get_dispatch_stats, process_dispatch_data, process_reallocation_data
from dispatch_core.records import DispatchEntry, DispatchStats, ReallocationEntry
from dispatch_core.search import filter_dispatch_rows, filter_reallocation_rows, search_result_counts


logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[RawCollections]]

DISPATCH_COLUMNS = {
    "chassis_number": "Chassis No",
    "customer": "Customer",
    "model": "Model",
    "matched_po_no": "Matched PO No",
    "sap_data": "SAP Data",
    "scheduled_dealer": "Scheduled Dealer",
    "status_check": "Statuscheck",
    "dealer_check": "DealerCheck",
    "reallocated_to": "Reallocated To",
}

REALLOCATION_COLUMNS = {
    "chassis_number": "Chassis No",
    "customer": "Customer",
    "model": "Model",
    "original_dealer": "Original Dealer",
    "reallocated_to": "Reallocated To",
    "regent_production": "Regent Production",
    "submit_time": "Submitted",
    "issue_type": "Issue",
    "issue_detail": "Issue Detail",
}


@dataclass(frozen=True)
class DashboardData:
    """One consistent snapshot of everything derived from a single load."""

    dispatch: List[DispatchEntry] = field(default_factory=list)
    reallocations: List[ReallocationEntry] = field(default_factory=list)
    raw_reallocation: Any = None
    stats: DispatchStats = field(default_factory=DispatchStats)
    snowy_stock: List[DispatchEntry] = field(default_factory=list)
    can_be_dispatched: List[DispatchEntry] = field(default_factory=list)

    @property
    def display_stats(self) -> DispatchStats:
        return replace(self.stats, snowy_stock=len(self.snowy_stock), can_be_dispatched=len(self.can_be_dispatched))


def build_dashboard_data(raw: RawCollections) -> DashboardData:
    reallocations = process_reallocation_data(raw.reallocation, raw.schedule)
    dispatch = process_dispatch_data(raw.dispatch, raw.reallocation)
    stats = get_dispatch_stats(raw.dispatch, raw.reallocation)
    snowy, dispatchable = partition_dispatch(dispatch, reallocation_by_chassis(reallocations))
    logger.info(
        "processed %d dispatch and %d reallocation entries (%d snowy, %d dispatchable)",
        len(dispatch),
        len(reallocations),
        len(snowy),
        len(dispatchable),
    )
    return DashboardData(
        dispatch=dispatch,
        reallocations=reallocations,
        raw_reallocation=raw.reallocation,
        stats=stats,
        snowy_stock=snowy,
        can_be_dispatched=dispatchable,
    )


async def load_dashboard_data(loader: Optional[Loader] = None) -> DashboardData:
    raw = await (loader or fetch_all)()
    return build_dashboard_data(raw)


def select_dispatch(data: DashboardData, filter_key: str) -> List[DispatchEntry]:
    if filter_key == FILTER_SNOWY_STOCK:
        return list(data.snowy_stock)
    if filter_key == FILTER_CAN_BE_DISPATCHED:
        return list(data.can_be_dispatched)
    return filter_dispatch_data(data.dispatch, filter_key, data.raw_reallocation)


def status_line(reallocation_count: int, dispatch_count: int, total: int, search_term: str = "") -> str:
    line = (
        f"Showing: Reallocation entries: {reallocation_count} | "
        f"Dispatch entries: {dispatch_count} | "
        f"Total dispatch entries: {total}"
    )
    if search_term:
        line += f' (Filtered by: "{search_term}")'
    return line


def prepare_context(
    filters: dict | DashboardFilters,
    data: DashboardData,
    *,
    filtered_dispatch: Optional[List[DispatchEntry]] = None,
) -> Dict[str, object]:
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    if filtered_dispatch is None:
        filtered_dispatch = select_dispatch(data, filt.active_filter)
    counts = search_result_counts(filt.search_term, filtered_dispatch, data.dispatch, data.reallocations)
    return {
        "filters": filt,
        "filtered_dispatch": filtered_dispatch,
        "dispatch_rows": filter_dispatch_rows(filtered_dispatch, data.reallocations, filt.search_term),
        "reallocation_rows": filter_reallocation_rows(data.reallocations, data.dispatch, filt.search_term),
        "stats": data.display_stats,
        "counts": counts,
        "status_line": status_line(
            counts.reallocation_count, counts.dispatch_count, data.stats.total, filt.search_term
        ),
    }


# ---------------- Table frames ----------------
def dispatch_frame(rows: Iterable[DispatchEntry]) -> pd.DataFrame:
    records = [{label: getattr(r, attr) for attr, label in DISPATCH_COLUMNS.items()} for r in rows]
    return pd.DataFrame(records, columns=list(DISPATCH_COLUMNS.values()))


def reallocation_frame(rows: Iterable[ReallocationEntry]) -> pd.DataFrame:
    records = []
    for r in rows:
        rec = {label: getattr(r, attr, "") for attr, label in REALLOCATION_COLUMNS.items() if not attr.startswith("issue_")}
        rec["Issue"] = r.issue.type if r.issue is not None else ""
        rec["Issue Detail"] = r.issue.detail if r.issue is not None else ""
        records.append(rec)
    return pd.DataFrame(records, columns=list(REALLOCATION_COLUMNS.values()))
