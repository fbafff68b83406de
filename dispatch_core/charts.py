from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from dispatch_core.filters import FILTER_LABELS
from dispatch_core.records import DispatchStats

alt.data_transformers.disable_max_rows()

STATS_FIELDS = {
    "all": "total",
    "okStatus": "ok_status",
    "invalidStock": "invalid_stock",
    "snowyStock": "snowy_stock",
    "canBeDispatched": "can_be_dispatched",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def stats_frame(stats: DispatchStats) -> pd.DataFrame:
    return pd.DataFrame(
        [{"filter": key, "label": FILTER_LABELS[key], "count": int(getattr(stats, attr))} for key, attr in STATS_FIELDS.items()]
    )


def stats_chart(stats: DispatchStats, active_filter: str = "all") -> alt.Chart:
    df = stats_frame(stats)
    df["active"] = df["filter"] == active_filter
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("label:N", title=None, sort=list(df["label"])),
            y=alt.Y("count:Q", title="Entries", axis=alt.Axis(format="d")),
            color=alt.condition(alt.datum.active, alt.value("#2563eb"), alt.value("#9ca3af")),
            tooltip=["label", alt.Tooltip("count:Q", format=",")],
        )
    )
