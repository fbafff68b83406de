from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

from dispatch_core.records import DispatchEntry, ReallocationEntry


@dataclass(frozen=True)
class SearchCounts:
    dispatch_count: int
    reallocation_count: int


def safe_includes(value: object, term_lower: str) -> bool:
    if value is None:
        return False
    return term_lower in str(value).lower()


def dispatch_fields(entry: DispatchEntry) -> tuple:
    return (
        entry.chassis_number,
        entry.customer,
        entry.model,
        entry.matched_po_no,
        entry.sap_data,
        entry.scheduled_dealer,
        entry.status_check,
        entry.dealer_check,
        entry.reallocated_to,
    )


def reallocation_fields(entry: ReallocationEntry) -> tuple:
    return (
        entry.chassis_number,
        entry.customer,
        entry.model,
        entry.original_dealer,
        entry.reallocated_to,
        entry.regent_production,
        entry.issue.type if entry.issue is not None else None,
    )


def dispatch_matches(entry: DispatchEntry, term_lower: str) -> bool:
    return any(safe_includes(v, term_lower) for v in dispatch_fields(entry))


def reallocation_matches(entry: ReallocationEntry, term_lower: str) -> bool:
    return any(safe_includes(v, term_lower) for v in reallocation_fields(entry))


def _group_by_chassis(entries: Iterable, attr: str = "chassis_number") -> Mapping[str, List]:
    grouped: dict = {}
    for e in entries:
        grouped.setdefault(getattr(e, attr), []).append(e)
    return grouped


def filter_dispatch_rows(
    rows: Sequence[DispatchEntry], reallocations: Sequence[ReallocationEntry], term: str
) -> List[DispatchEntry]:
    """Dispatch rows matching on their own fields or via their linked reallocation."""
    if not term:
        return list(rows)
    q = term.lower()
    linked = _group_by_chassis(reallocations)
    return [
        d
        for d in rows
        if dispatch_matches(d, q) or any(reallocation_matches(r, q) for r in linked.get(d.chassis_number, ()))
    ]


def filter_reallocation_rows(
    rows: Sequence[ReallocationEntry], dispatch: Sequence[DispatchEntry], term: str
) -> List[ReallocationEntry]:
    """Reallocation rows matching on their own fields or via their linked dispatch entry."""
    if not term:
        return list(rows)
    q = term.lower()
    linked = _group_by_chassis(dispatch)
    return [
        r
        for r in rows
        if reallocation_matches(r, q) or any(dispatch_matches(d, q) for d in linked.get(r.chassis_number, ()))
    ]


def search_result_counts(
    term: str,
    filtered_dispatch: Sequence[DispatchEntry],
    all_dispatch: Sequence[DispatchEntry],
    reallocations: Sequence[ReallocationEntry],
) -> SearchCounts:
    """Counts for the status line.

    Dispatch matches come from the currently filtered list; reallocation
    matches come from the full reallocation list, linked against the full
    dispatch list.
    """
    if not term:
        return SearchCounts(dispatch_count=len(filtered_dispatch), reallocation_count=len(reallocations))
    return SearchCounts(
        dispatch_count=len(filter_dispatch_rows(filtered_dispatch, reallocations, term)),
        reallocation_count=len(filter_reallocation_rows(reallocations, all_dispatch, term)),
    )
