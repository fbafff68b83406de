from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from dispatch_core.classify import is_status_ok, partition_dispatch
from dispatch_core.records import DispatchEntry, DispatchStats, ReallocationEntry, ReallocationIssue


logger = logging.getLogger(__name__)

REALLOCATION_FIELDS = {"chassisNumber", "customer", "model", "originalDealer", "reallocatedTo", "submitTime", "issue"}
NA_TOKENS = {"nan", "none", "null", "undefined"}


def text(value: object) -> str:
    """Coerce a raw field to a stripped string; missing values become ""."""
    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    s = str(value).strip()
    if s.lower() in NA_TOKENS:
        return ""
    return s


def first_text(record: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = text(record.get(key))
        if value:
            return value
    return ""


def iter_records(raw: Any) -> Iterator[Tuple[str, Any]]:
    """Yield (key, record) pairs from a Firebase collection body.

    Firebase returns an object for push-id keyed collections and an array
    (with null holes) for integer keyed ones.
    """
    if raw is None:
        return
    if isinstance(raw, dict):
        for key, record in raw.items():
            yield str(key), record
    elif isinstance(raw, list):
        for idx, record in enumerate(raw):
            if record is not None:
                yield str(idx), record
    else:
        logger.debug("ignoring collection body of type %s", type(raw).__name__)


def parse_submit_time(value: object) -> Optional[pd.Timestamp]:
    s = text(value)
    if not s:
        return None
    if s.isdigit() and len(s) >= 10:
        # epoch timestamps: 13 digits are milliseconds
        ts = pd.to_datetime(int(s), unit="ms" if len(s) >= 13 else "s", errors="coerce")
    else:
        ts = pd.to_datetime(s, errors="coerce", dayfirst=not s[:4].isdigit())
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts


def _parse_issue(value: object) -> Optional[ReallocationIssue]:
    if isinstance(value, dict):
        issue = ReallocationIssue(type=text(value.get("type")), detail=first_text(value, "detail", "details", "description"))
    else:
        issue = ReallocationIssue(type=text(value))
    if not issue.type and not issue.detail:
        return None
    return issue


def _looks_like_entry(record: Mapping[str, Any]) -> bool:
    return any(k in record for k in REALLOCATION_FIELDS)


def _iter_raw_reallocations(raw_reallocation: Any) -> Iterator[Tuple[str, str, Mapping[str, Any]]]:
    """Yield (chassis, entry id, record) in source order."""
    for key, node in iter_records(raw_reallocation):
        if not isinstance(node, dict):
            logger.debug("skipping reallocation node %s: not a mapping", key)
            continue
        if _looks_like_entry(node):
            yield first_text(node, "chassisNumber") or key, key, node
            continue
        for entry_id, record in iter_records(node):
            if not isinstance(record, dict):
                logger.debug("skipping reallocation entry %s/%s: not a mapping", key, entry_id)
                continue
            yield first_text(record, "chassisNumber") or key, entry_id, record


def _to_reallocation(chassis: str, entry_id: str, record: Mapping[str, Any]) -> ReallocationEntry:
    return ReallocationEntry(
        entry_id=entry_id,
        chassis_number=chassis,
        customer=text(record.get("customer")),
        model=text(record.get("model")),
        original_dealer=text(record.get("originalDealer")),
        reallocated_to=text(record.get("reallocatedTo")),
        regent_production=text(record.get("regentProduction")),
        submit_time=text(record.get("submitTime")),
        issue=_parse_issue(record.get("issue")),
    )


def latest_reallocations(raw_reallocation: Any) -> Dict[str, ReallocationEntry]:
    """Pick the latest reallocation entry per chassis.

    Latest = greatest parsed submitTime; undated entries rank below dated
    ones; source order breaks ties with the later entry winning.
    """
    best: Dict[str, Tuple[Tuple[int, pd.Timestamp, int], ReallocationEntry]] = {}
    for idx, (chassis, entry_id, record) in enumerate(_iter_raw_reallocations(raw_reallocation)):
        if not chassis:
            continue
        ts = parse_submit_time(record.get("submitTime"))
        rank = (1, ts, idx) if ts is not None else (0, pd.Timestamp.min, idx)
        current = best.get(chassis)
        if current is None or rank >= current[0]:
            best[chassis] = (rank, _to_reallocation(chassis, entry_id, record))
    # dict insertion order follows the first appearance of each chassis
    return {chassis: entry for chassis, (_, entry) in best.items()}


def schedule_by_chassis(raw_schedule: Any) -> Dict[str, Mapping[str, Any]]:
    out: Dict[str, Mapping[str, Any]] = {}
    for _, row in iter_records(raw_schedule):
        if not isinstance(row, dict):
            continue
        chassis = first_text(row, "Chassis", "Chassis No", "chassisNumber")
        if chassis and chassis not in out:
            out[chassis] = row
    return out


def process_reallocation_data(raw_reallocation: Any, raw_schedule: Any) -> List[ReallocationEntry]:
    schedule = schedule_by_chassis(raw_schedule)
    processed: List[ReallocationEntry] = []
    for chassis, entry in latest_reallocations(raw_reallocation).items():
        row = schedule.get(chassis, {})
        processed.append(
            ReallocationEntry(
                entry_id=entry.entry_id,
                chassis_number=chassis,
                customer=entry.customer or first_text(row, "Customer"),
                model=entry.model or first_text(row, "Model"),
                original_dealer=entry.original_dealer or first_text(row, "Dealer"),
                reallocated_to=entry.reallocated_to,
                regent_production=entry.regent_production or first_text(row, "Regent Production"),
                submit_time=entry.submit_time,
                issue=entry.issue,
            )
        )
    return processed


def _to_dispatch(key: str, record: Mapping[str, Any], latest: Mapping[str, ReallocationEntry]) -> DispatchEntry:
    chassis = first_text(record, "Chassis No") or key
    target = latest.get(chassis)
    return DispatchEntry(
        chassis_number=chassis,
        customer=text(record.get("Customer")),
        model=text(record.get("Model")),
        matched_po_no=text(record.get("Matched PO No")),
        sap_data=text(record.get("SAP Data")),
        scheduled_dealer=first_text(record, "Scheduled Dealer", "regentProduction"),
        status_check=first_text(record, "Statuscheck", "status"),
        dealer_check=text(record.get("DealerCheck")),
        reallocated_to=target.reallocated_to if target is not None else "",
    )


def process_dispatch_data(raw_dispatch: Any, raw_reallocation: Any) -> List[DispatchEntry]:
    latest = latest_reallocations(raw_reallocation)
    processed: List[DispatchEntry] = []
    for key, record in iter_records(raw_dispatch):
        if not isinstance(record, dict):
            logger.debug("skipping dispatch record %s: not a mapping", key)
            continue
        processed.append(_to_dispatch(key, record, latest))
    return processed


def compute_dispatch_stats(data: List[DispatchEntry], by_chassis: Mapping[str, ReallocationEntry]) -> DispatchStats:
    snowy, dispatchable = partition_dispatch(data, by_chassis)
    ok = sum(1 for d in data if is_status_ok(d.status_check))
    invalid = sum(1 for d in data if d.status_check and not is_status_ok(d.status_check))
    return DispatchStats(
        total=len(data),
        ok_status=ok,
        invalid_stock=invalid,
        snowy_stock=len(snowy),
        can_be_dispatched=len(dispatchable),
    )


def get_dispatch_stats(raw_dispatch: Any, raw_reallocation: Any) -> DispatchStats:
    data = process_dispatch_data(raw_dispatch, raw_reallocation)
    return compute_dispatch_stats(data, latest_reallocations(raw_reallocation))
