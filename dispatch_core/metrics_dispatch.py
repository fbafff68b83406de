from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from dispatch_core.charts import stats_chart, to_vega_spec
from dispatch_core.filters import DashboardFilters
from dispatch_core.records import DispatchStats
from dispatch_core.search import SearchCounts


def compute_dispatch_page(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    stats: DispatchStats = ctx.get("stats", DispatchStats())
    counts: SearchCounts = ctx.get("counts", SearchCounts(0, 0))
    dispatch_rows: List = ctx.get("dispatch_rows", [])
    return {
        "filters": asdict(filters),
        "stats": asdict(stats),
        "counts": asdict(counts),
        "status_line": ctx.get("status_line", ""),
        "dispatch": [asdict(d) for d in dispatch_rows],
        "charts": {"stats": to_vega_spec(stats_chart(stats, filters.active_filter))},
    }


def compute_reallocation_page(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    rows: List = ctx.get("reallocation_rows", [])
    return {
        "filters": asdict(filters),
        "count": len(rows),
        "reallocations": [asdict(r) for r in rows],
    }
