"""Tests for snowy stock / can-be-dispatched classification."""

import pytest

from dispatch_core.classify import (
    can_be_dispatched_list,
    classify_entry,
    is_snowy_stock,
    is_status_ok,
    partition_dispatch,
    reallocation_by_chassis,
    snowy_stock_list,
)
from dispatch_core.processing import process_dispatch_data, process_reallocation_data
from dispatch_core.records import DispatchEntry, ReallocationEntry


@pytest.fixture
def processed(raw_dispatch, raw_reallocation, raw_schedule):
    dispatch = process_dispatch_data(raw_dispatch, raw_reallocation)
    by_chassis = reallocation_by_chassis(process_reallocation_data(raw_reallocation, raw_schedule))
    return dispatch, by_chassis


def _chassis(entries):
    return [e.chassis_number for e in entries]


class TestPredicates:
    @pytest.mark.parametrize("value", ["Snowy Stock", "  snowy stock ", "SNOWY STOCK"])
    def test_snowy_stock_is_trimmed_and_case_insensitive(self, value):
        assert is_snowy_stock(value)

    @pytest.mark.parametrize("value", [None, "", "Snowy", "snowy stocks"])
    def test_not_snowy_stock(self, value):
        assert not is_snowy_stock(value)

    def test_status_ok(self):
        assert is_status_ok("ok")
        assert is_status_ok(" OK ")
        assert not is_status_ok("okay")
        assert not is_status_ok(None)


class TestClassification:
    def test_latest_target_snowy_overrides_ok_status(self):
        entry = DispatchEntry(chassis_number="C1", status_check="ok", scheduled_dealer="")
        by_chassis = {"C1": ReallocationEntry(entry_id="-a", chassis_number="C1", reallocated_to="Snowy Stock")}
        assert classify_entry(entry, by_chassis) == "snowy"
        assert can_be_dispatched_list([entry], by_chassis) == []

    def test_ok_without_reallocation_is_dispatchable(self):
        entry = DispatchEntry(chassis_number="C2", status_check="OK", scheduled_dealer="Acme")
        assert classify_entry(entry, {}) == "dispatchable"
        assert can_be_dispatched_list([entry], {}) == [entry]

    def test_scheduled_snowy_only_counts_without_reallocation_target(self):
        entry = DispatchEntry(chassis_number="C8", status_check="OK", scheduled_dealer="Snowy Stock")
        moved = {"C8": ReallocationEntry(entry_id="-z", chassis_number="C8", reallocated_to="Dealer Y")}
        assert classify_entry(entry, {}) == "snowy"
        assert classify_entry(entry, moved) == "dispatchable"

    def test_blank_reallocation_target_keeps_scheduled_snowy(self):
        entry = DispatchEntry(chassis_number="C8", scheduled_dealer="snowy stock")
        blank = {"C8": ReallocationEntry(entry_id="-z", chassis_number="C8", reallocated_to="   ")}
        assert classify_entry(entry, blank) == "snowy"

    def test_lists_on_fixture_data(self, processed):
        dispatch, by_chassis = processed
        assert _chassis(snowy_stock_list(dispatch, by_chassis)) == ["C1", "C4", "C5"]
        assert _chassis(can_be_dispatched_list(dispatch, by_chassis)) == ["C2", "C3"]

    def test_every_entry_in_exactly_one_category(self, processed):
        dispatch, by_chassis = processed
        snowy, dispatchable = partition_dispatch(dispatch, by_chassis)
        assert not set(_chassis(snowy)) & set(_chassis(dispatchable))
        neither = [d for d in dispatch if classify_entry(d, by_chassis) == "neither"]
        assert len(snowy) + len(dispatchable) + len(neither) == len(dispatch)
        assert _chassis(neither) == ["C6"]

    def test_classification_is_deterministic(self, processed):
        dispatch, by_chassis = processed
        first = partition_dispatch(dispatch, by_chassis)
        second = partition_dispatch(dispatch, by_chassis)
        assert first == second
        assert first[0] == snowy_stock_list(dispatch, by_chassis)
        assert first[1] == can_be_dispatched_list(dispatch, by_chassis)

    def test_join_matches_dispatch_annotation(self, processed):
        dispatch, by_chassis = processed
        for d in dispatch:
            latest = by_chassis.get(d.chassis_number)
            assert d.reallocated_to == (latest.reallocated_to if latest else "")
