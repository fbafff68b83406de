from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Mapping, Optional, Tuple

from dispatch_core.records import DispatchEntry, ReallocationEntry


SNOWY_STOCK = "snowy stock"

Category = Literal["snowy", "dispatchable", "neither"]


def is_snowy_stock(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == SNOWY_STOCK


def is_status_ok(value: Optional[str]) -> bool:
    return (value or "").strip().upper() == "OK"


def reallocation_by_chassis(entries: Iterable[ReallocationEntry]) -> Dict[str, ReallocationEntry]:
    """Index reallocation entries by chassis number; later entries win."""
    return {e.chassis_number: e for e in entries}


def latest_target(entry: DispatchEntry, by_chassis: Mapping[str, ReallocationEntry]) -> str:
    latest = by_chassis.get(entry.chassis_number)
    return (latest.reallocated_to if latest is not None else "").strip()


def is_snowy_entry(entry: DispatchEntry, by_chassis: Mapping[str, ReallocationEntry]) -> bool:
    target = latest_target(entry, by_chassis)
    return is_snowy_stock(target) or (is_snowy_stock(entry.scheduled_dealer) and target == "")


def classify_entry(entry: DispatchEntry, by_chassis: Mapping[str, ReallocationEntry]) -> Category:
    if is_snowy_entry(entry, by_chassis):
        return "snowy"
    if is_status_ok(entry.status_check):
        return "dispatchable"
    return "neither"


def snowy_stock_list(data: Iterable[DispatchEntry], by_chassis: Mapping[str, ReallocationEntry]) -> List[DispatchEntry]:
    return [d for d in data if classify_entry(d, by_chassis) == "snowy"]


def can_be_dispatched_list(data: Iterable[DispatchEntry], by_chassis: Mapping[str, ReallocationEntry]) -> List[DispatchEntry]:
    return [d for d in data if classify_entry(d, by_chassis) == "dispatchable"]


def partition_dispatch(
    data: Iterable[DispatchEntry], by_chassis: Mapping[str, ReallocationEntry]
) -> Tuple[List[DispatchEntry], List[DispatchEntry]]:
    """Return (snowy stock, can be dispatched) in a single pass, source order kept."""
    snowy: List[DispatchEntry] = []
    dispatchable: List[DispatchEntry] = []
    for d in data:
        category = classify_entry(d, by_chassis)
        if category == "snowy":
            snowy.append(d)
        elif category == "dispatchable":
            dispatchable.append(d)
    return snowy, dispatchable
