"""
Shared raw Firebase payloads for the dispatch dashboard tests.
"""
import copy

import pytest

from dispatch_core.firebase import RawCollections


RAW_REALLOCATION = {
    "C1": {
        "-a1": {"customer": "Acme Corp", "reallocatedTo": "Dealer X", "submitTime": "2024-01-01T10:00:00Z"},
        "-b2": {"reallocatedTo": "Snowy Stock", "submitTime": "2024-02-01T10:00:00Z"},
    },
    "C3": {
        "-c3": {
            "originalDealer": "Acme Corp",
            "reallocatedTo": "Beta Motors",
            "issue": {"type": "Damage", "detail": "scratch on panel"},
        },
    },
}

RAW_DISPATCH = {
    "C1": {"Chassis No": "C1", "Statuscheck": "ok", "Scheduled Dealer": ""},
    "C2": {"Chassis No": "C2", "Customer": "Zed", "Statuscheck": "OK", "Scheduled Dealer": "Acme"},
    "C3": {"Chassis No": "C3", "Customer": "Acme Corp", "Statuscheck": "OK", "Scheduled Dealer": "Gamma"},
    "C4": {"Chassis No": "C4", "Statuscheck": "Wrong Dealer", "Scheduled Dealer": "Snowy Stock"},
    "C5": {"status": "OK", "regentProduction": "Snowy Stock"},
    "C6": {"Chassis No": "C6", "Statuscheck": "Mismatch", "Scheduled Dealer": "Delta", "SAP Data": "Z-SAP"},
}

RAW_SCHEDULE = [
    {"Chassis": "C3", "Customer": "Acme Corp", "Model": "RV-20", "Dealer": "Gamma", "Regent Production": "Done"},
]


@pytest.fixture
def raw_reallocation():
    return copy.deepcopy(RAW_REALLOCATION)


@pytest.fixture
def raw_dispatch():
    return copy.deepcopy(RAW_DISPATCH)


@pytest.fixture
def raw_schedule():
    return copy.deepcopy(RAW_SCHEDULE)


@pytest.fixture
def raw_collections(raw_reallocation, raw_dispatch, raw_schedule):
    return RawCollections(reallocation=raw_reallocation, dispatch=raw_dispatch, schedule=raw_schedule)


@pytest.fixture
def loader(raw_collections):
    async def _loader():
        return raw_collections

    return _loader


@pytest.fixture
def failing_loader():
    async def _loader():
        raise RuntimeError("permission denied")

    return _loader
