from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from dispatch_api.schemas import FilterChangeModel, SearchChangeModel, SessionStatusResponse
from dispatch_core.config import configure_logging
from dispatch_core.data import dispatch_frame, prepare_context, reallocation_frame
from dispatch_core.filters import DashboardFilters, normalize_filter_key
from dispatch_core.metrics_dispatch import compute_dispatch_page, compute_reallocation_page
from dispatch_core.session import LOAD_ERROR_MESSAGE, DashboardSession


configure_logging()
app = FastAPI(title="Dispatch Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_session = DashboardSession()


def get_session() -> DashboardSession:
    return _session


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _load_failed() -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": LOAD_ERROR_MESSAGE})


def _status(session: DashboardSession) -> JSONResponse:
    body = SessionStatusResponse(
        status=session.status,
        error=session.error,
        active_filter=session.active_filter,
        search_term=session.search_term,
    )
    return _json(body.model_dump())


async def _ensure_loaded(session: DashboardSession) -> bool:
    if session.status == "idle":
        await session.load()
    return session.status == "success"


@app.get("/health")
def health(session: DashboardSession = Depends(get_session)):
    return _status(session)


@app.post("/refresh")
async def refresh(session: DashboardSession = Depends(get_session)):
    await session.refresh()
    if session.status != "success":
        return _load_failed()
    return _status(session)


@app.get("/dashboard")
async def dashboard(
    filter: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
    session: DashboardSession = Depends(get_session),
):
    try:
        if not await _ensure_loaded(session):
            return _load_failed()
        f = DashboardFilters(
            active_filter=normalize_filter_key(filter) if filter is not None else session.active_filter,
            search_term=q if q is not None else session.search_term,
        )
        return _json(compute_dispatch_page(f, prepare_context(f, session.data)))
    except Exception as exc:
        logger.exception("dashboard failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/filter")
async def change_filter(body: FilterChangeModel, session: DashboardSession = Depends(get_session)):
    try:
        if not await _ensure_loaded(session):
            return _load_failed()
        session.select_filter(body.active_filter)
        return _json(compute_dispatch_page(session.filters, session.context()))
    except Exception as exc:
        logger.exception("change_filter failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/search")
async def change_search(body: SearchChangeModel, session: DashboardSession = Depends(get_session)):
    try:
        if not await _ensure_loaded(session):
            return _load_failed()
        session.set_search(body.search_term)
        return _json(compute_dispatch_page(session.filters, session.context()))
    except Exception as exc:
        logger.exception("change_search failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/reallocations")
async def reallocations(q: Optional[str] = Query(default=None), session: DashboardSession = Depends(get_session)):
    try:
        if not await _ensure_loaded(session):
            return _load_failed()
        f = DashboardFilters(active_filter=session.active_filter, search_term=q if q is not None else session.search_term)
        return _json(compute_reallocation_page(f, prepare_context(f, session.data)))
    except Exception as exc:
        logger.exception("reallocations failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/export/{table}")
async def export_table(table: str, session: DashboardSession = Depends(get_session)):
    if not await _ensure_loaded(session):
        return _load_failed()
    ctx = session.context()

    filename = f"{table}.csv"
    if table == "dispatch":
        export_df = dispatch_frame(ctx["dispatch_rows"])
    elif table in {"reallocation", "reallocations"}:
        export_df = reallocation_frame(ctx["reallocation_rows"])
        filename = "reallocations.csv"
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
