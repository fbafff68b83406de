from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from dispatch_core.classify import can_be_dispatched_list, is_status_ok, snowy_stock_list
from dispatch_core.processing import latest_reallocations
from dispatch_core.records import DispatchEntry


logger = logging.getLogger(__name__)

FILTER_ALL = "all"
FILTER_OK_STATUS = "okStatus"
FILTER_INVALID_STOCK = "invalidStock"
FILTER_SNOWY_STOCK = "snowyStock"
FILTER_CAN_BE_DISPATCHED = "canBeDispatched"

FILTER_KEYS = (FILTER_ALL, FILTER_OK_STATUS, FILTER_INVALID_STOCK, FILTER_SNOWY_STOCK, FILTER_CAN_BE_DISPATCHED)
FILTER_LABELS = {
    FILTER_ALL: "Total",
    FILTER_OK_STATUS: "Status OK",
    FILTER_INVALID_STOCK: "Invalid Stock",
    FILTER_SNOWY_STOCK: "Snowy Stock",
    FILTER_CAN_BE_DISPATCHED: "Can be Dispatched",
}


@dataclass(frozen=True)
class DashboardFilters:
    active_filter: str = FILTER_ALL
    search_term: str = ""


def normalize_filter_key(value: Optional[object]) -> str:
    key = str(value).strip() if value is not None else ""
    if not key:
        return FILTER_ALL
    for known in FILTER_KEYS:
        if key.lower() == known.lower():
            return known
    return key


def normalize_filters(raw: dict) -> DashboardFilters:
    search_term = raw.get("search_term")
    if search_term is None:
        search_term = raw.get("q") or ""
    return DashboardFilters(
        active_filter=normalize_filter_key(raw.get("active_filter", raw.get("filter"))),
        search_term=str(search_term),
    )


def filter_dispatch_data(data: Sequence[DispatchEntry], filter_key: str, raw_reallocation: Any) -> List[DispatchEntry]:
    """Select the dispatch entries shown for a stat-tile filter."""
    key = normalize_filter_key(filter_key)
    if key == FILTER_ALL:
        return list(data)
    if key == FILTER_OK_STATUS:
        return [d for d in data if is_status_ok(d.status_check)]
    if key == FILTER_INVALID_STOCK:
        return [d for d in data if d.status_check and not is_status_ok(d.status_check)]
    if key in (FILTER_SNOWY_STOCK, FILTER_CAN_BE_DISPATCHED):
        by_chassis = latest_reallocations(raw_reallocation)
        if key == FILTER_SNOWY_STOCK:
            return snowy_stock_list(data, by_chassis)
        return can_be_dispatched_list(data, by_chassis)
    logger.warning("unknown dispatch filter %r; showing all entries", filter_key)
    return list(data)
