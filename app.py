import asyncio
from contextlib import contextmanager
from typing import Optional

import pandas as pd
import streamlit as st

from dispatch_core.charts import stats_chart
from dispatch_core.config import configure_logging
from dispatch_core.data import dispatch_frame, reallocation_frame
from dispatch_core.filters import (
    FILTER_ALL,
    FILTER_CAN_BE_DISPATCHED,
    FILTER_INVALID_STOCK,
    FILTER_LABELS,
    FILTER_SNOWY_STOCK,
)
from dispatch_core.session import DashboardSession

configure_logging()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #2563eb;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_session() -> DashboardSession:
    if "dashboard_session" not in st.session_state:
        st.session_state["dashboard_session"] = DashboardSession()
    return st.session_state["dashboard_session"]


def run_load(session: DashboardSession):
    with st.spinner("Loading data from Firebase..."):
        asyncio.run(session.load())


# ---------- callbacks ----------
def on_filter_change(filter_key: str):
    session = get_session()
    session.select_filter(filter_key)
    st.session_state["search_term"] = ""


def on_search_change():
    get_session().set_search(st.session_state.get("search_term", ""))


def on_refresh():
    st.session_state["_needs_refresh"] = True


# ---------- renderers ----------
def render_stat_tiles(session: DashboardSession):
    stats = session.display_stats
    tiles = [
        (FILTER_ALL, stats.total),
        (FILTER_INVALID_STOCK, stats.invalid_stock),
        (FILTER_SNOWY_STOCK, stats.snowy_stock),
        (FILTER_CAN_BE_DISPATCHED, stats.can_be_dispatched),
    ]
    cols = st.columns(len(tiles) + 1)
    for col, (key, value) in zip(cols, tiles):
        col.metric(FILTER_LABELS[key], f"{value:,}")
        col.button(
            "Active" if session.active_filter == key else "Show",
            key=f"filter_{key}",
            on_click=on_filter_change,
            args=(key,),
            type="primary" if session.active_filter == key else "secondary",
            use_container_width=True,
        )
    cols[-1].button("Refresh", on_click=on_refresh, use_container_width=True)


def render_table(df: pd.DataFrame, empty_message: str, export_name: str):
    if df.empty:
        st.info(empty_message)
        return
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.download_button(
        "Export CSV",
        data=df.to_csv(index=False).encode("utf-8"),
        file_name=export_name,
        mime="text/csv",
        key=f"export_{export_name}",
    )


def render_status_line(ctx: dict):
    # search term is user input; keep it out of raw HTML
    st.caption(ctx["status_line"])


# ---------- UI setup ----------
st.set_page_config(page_title="Dispatch Dashboard", layout="wide")
inject_base_styles()

session = get_session()
if session.status == "idle" or st.session_state.pop("_needs_refresh", False):
    run_load(session)

if session.status == "error":
    st.error(session.error)
    st.button("Retry", on_click=on_refresh)
    st.stop()

st.markdown("<h1 style='text-align:center;'>Dispatch Dashboard</h1>", unsafe_allow_html=True)
_, search_col, _ = st.columns([1, 2, 1])
with search_col:
    st.text_input(
        "Search",
        key="search_term",
        placeholder="Search across all data...",
        on_change=on_search_change,
        label_visibility="collapsed",
    )

ctx = session.context()

with card("Reallocation Data"):
    render_table(reallocation_frame(ctx["reallocation_rows"]), "No reallocation entries match.", "reallocations.csv")

st.subheader("Dispatch Data")
with card("Dispatch Stats"):
    render_stat_tiles(session)
    st.altair_chart(stats_chart(ctx["stats"], session.active_filter).properties(height=200), use_container_width=True)

with card("Dispatch Table", actions=FILTER_LABELS.get(session.active_filter, session.active_filter)):
    render_table(dispatch_frame(ctx["dispatch_rows"]), "No dispatch entries match.", "dispatch.csv")

render_status_line(ctx)
