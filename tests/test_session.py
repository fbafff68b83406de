"""Tests for the load/refresh session and dashboard context."""

import asyncio

from dispatch_core.data import build_dashboard_data, dispatch_frame, prepare_context, reallocation_frame, status_line
from dispatch_core.filters import FILTER_ALL, FILTER_CAN_BE_DISPATCHED, FILTER_INVALID_STOCK, FILTER_SNOWY_STOCK
from dispatch_core.firebase import RawCollections
from dispatch_core.session import LOAD_ERROR_MESSAGE, DashboardSession


def _chassis(entries):
    return [e.chassis_number for e in entries]


def _loaded(loader, **kwargs):
    session = DashboardSession(loader, **kwargs)
    asyncio.run(session.load())
    return session


class TestLoad:
    def test_starts_idle(self, loader):
        session = DashboardSession(loader)
        assert session.status == "idle"
        assert session.data.dispatch == []

    def test_status_is_loading_while_fetching(self, raw_collections):
        seen = []

        async def watching():
            seen.append(session.status)
            return raw_collections

        session = DashboardSession(watching)
        asyncio.run(session.load())
        assert seen == ["loading"]
        assert session.status == "success"

    def test_successful_load(self, loader):
        session = _loaded(loader)
        assert session.status == "success"
        assert session.error is None
        assert len(session.data.dispatch) == 6
        assert _chassis(session.filtered_dispatch) == _chassis(session.data.dispatch)

    def test_failed_load_sets_single_message(self, failing_loader, caplog):
        session = _loaded(failing_loader)
        assert session.status == "error"
        assert session.error == LOAD_ERROR_MESSAGE
        assert session.data.dispatch == []
        assert "Error loading data" in caplog.text

    def test_failed_refresh_applies_nothing(self, raw_collections):
        calls = {"n": 0}

        async def flaky():
            calls["n"] += 1
            if calls["n"] > 1:
                raise ConnectionError("offline")
            return raw_collections

        session = _loaded(flaky)
        before = session.data
        asyncio.run(session.refresh())
        assert session.status == "error"
        assert session.data is before

    def test_refresh_reapplies_active_filter(self, raw_collections):
        snapshots = [
            raw_collections,
            RawCollections(
                reallocation=raw_collections.reallocation,
                dispatch={"C9": {"Chassis No": "C9", "Statuscheck": "OK", "Scheduled Dealer": "Omega"}},
                schedule=None,
            ),
        ]

        async def changing():
            return snapshots.pop(0)

        session = _loaded(changing, active_filter=FILTER_CAN_BE_DISPATCHED)
        assert _chassis(session.filtered_dispatch) == ["C2", "C3"]
        asyncio.run(session.refresh())
        assert session.status == "success"
        assert _chassis(session.filtered_dispatch) == ["C9"]


class TestFilterAndSearch:
    def test_select_filter_resets_search(self, loader):
        session = _loaded(loader)
        session.set_search("acme")
        session.select_filter(FILTER_SNOWY_STOCK)
        assert session.search_term == ""
        assert _chassis(session.filtered_dispatch) == ["C1", "C4", "C5"]

    def test_every_filter_change_resets_search(self, loader):
        session = _loaded(loader)
        for key in (FILTER_ALL, FILTER_INVALID_STOCK, FILTER_CAN_BE_DISPATCHED, "mystery"):
            session.set_search("something")
            session.select_filter(key)
            assert session.search_term == ""

    def test_context_uses_session_filtered_list(self, loader):
        session = _loaded(loader)
        session.select_filter(FILTER_CAN_BE_DISPATCHED)
        ctx = session.context()
        assert ctx["filtered_dispatch"] is session.filtered_dispatch
        assert _chassis(ctx["dispatch_rows"]) == ["C2", "C3"]
        assert ctx["counts"].dispatch_count == 2

    def test_display_stats_use_classification_lists(self, loader):
        stats = _loaded(loader).display_stats
        assert (stats.total, stats.snowy_stock, stats.can_be_dispatched) == (6, 3, 2)

    def test_context_status_line(self, loader):
        session = _loaded(loader)
        session.set_search("acme")
        ctx = session.context()
        assert ctx["status_line"] == (
            'Showing: Reallocation entries: 1 | Dispatch entries: 2 | Total dispatch entries: 6 (Filtered by: "acme")'
        )
        assert _chassis(ctx["dispatch_rows"]) == ["C2", "C3"]


class TestDashboardData:
    def test_status_line_without_term(self):
        assert status_line(2, 5, 9) == "Showing: Reallocation entries: 2 | Dispatch entries: 5 | Total dispatch entries: 9"

    def test_prepare_context_accepts_raw_filters(self, raw_collections):
        data = build_dashboard_data(raw_collections)
        ctx = prepare_context({"active_filter": "snowyStock"}, data)
        assert _chassis(ctx["filtered_dispatch"]) == ["C1", "C4", "C5"]
        assert ctx["counts"].dispatch_count == 3

    def test_frames(self, raw_collections):
        data = build_dashboard_data(raw_collections)
        dispatch_df = dispatch_frame(data.dispatch)
        realloc_df = reallocation_frame(data.reallocations)
        assert list(dispatch_df["Chassis No"]) == ["C1", "C2", "C3", "C4", "C5", "C6"]
        assert realloc_df.loc[realloc_df["Chassis No"] == "C3", "Issue"].item() == "Damage"
        assert dispatch_frame([]).empty
