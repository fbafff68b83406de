from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DispatchEntry:
    chassis_number: str
    customer: str = ""
    model: str = ""
    matched_po_no: str = ""
    sap_data: str = ""
    scheduled_dealer: str = ""
    status_check: str = ""
    dealer_check: str = ""
    reallocated_to: str = ""


@dataclass(frozen=True)
class ReallocationIssue:
    type: str = ""
    detail: str = ""


@dataclass(frozen=True)
class ReallocationEntry:
    entry_id: str
    chassis_number: str
    customer: str = ""
    model: str = ""
    original_dealer: str = ""
    reallocated_to: str = ""
    regent_production: str = ""
    submit_time: str = ""
    issue: Optional[ReallocationIssue] = None


@dataclass(frozen=True)
class DispatchStats:
    total: int = 0
    ok_status: int = 0
    invalid_stock: int = 0
    snowy_stock: int = 0
    can_be_dispatched: int = 0
