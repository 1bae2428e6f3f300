from __future__ import annotations

from dataclasses import asdict
import logging
import math
import os
from typing import Optional, get_args

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import DateRangeModel, ErrorResponse, KpiDomain, MetaDateRangeResponse
from core.data import load_calls, load_dashboard_data, load_emails
from core.errors import DataLoadError
from core.filters import DateRange, available_date_bounds, resolve_date_range
from core.kpi import load_uk_kpi
from core.marketing import load_marketing
from core.metrics_emails import compute_emails_metrics
from core.metrics_kpi import compute_kpi_scorecard
from core.metrics_overview import compute_overview_metrics
from core.metrics_sales import compute_sales_metrics
from core.metrics_support import compute_support_metrics
from core.summary import build_executive_summary


logging.basicConfig(
    level=os.environ.get("DASHBOARD_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

app = FastAPI(title="Executive Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


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
            by_alias=True,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    if isinstance(exc, DataLoadError):
        body = ErrorResponse(error="Failed to load data", detail=str(exc), type=type(exc).__name__)
    else:
        body = ErrorResponse(error=str(exc), type=type(exc).__name__)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _date_range(raw_from: Optional[str], raw_to: Optional[str], *record_sets) -> DateRange:
    return resolve_date_range(raw_from, raw_to, bounds=available_date_bounds(*record_sets))


def _with_range(date_range: DateRange, payload: object) -> dict:
    body = asdict(payload) if not isinstance(payload, dict) else dict(payload)
    body["range"] = DateRangeModel(from_=date_range.start, to=date_range.end)
    return body


@app.get("/meta/date-range")
def meta_date_range():
    try:
        data_ctx = load_dashboard_data()
        min_date, max_date = available_date_bounds(data_ctx["calls"], data_ctx["emails"])
        return _json(MetaDateRangeResponse(min_date=min_date, max_date=max_date, domains=list(get_args(KpiDomain))))
    except Exception as exc:
        logger.exception("meta_date_range failed")
        return _error(exc)


@app.get("/overview")
def overview(from_: Optional[str] = Query(default=None, alias="from"), to: Optional[str] = Query(default=None)):
    try:
        calls, emails = load_calls(), load_emails()
        r = _date_range(from_, to, calls, emails)
        return _json(_with_range(r, compute_overview_metrics(calls, emails, r.start, r.end)))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.get("/sales")
def sales(from_: Optional[str] = Query(default=None, alias="from"), to: Optional[str] = Query(default=None)):
    try:
        calls = load_calls()
        r = _date_range(from_, to, calls)
        return _json(_with_range(r, compute_sales_metrics(calls, r.start, r.end)))
    except Exception as exc:
        logger.exception("sales failed")
        return _error(exc)


@app.get("/emails")
def emails(from_: Optional[str] = Query(default=None, alias="from"), to: Optional[str] = Query(default=None)):
    try:
        email_records = load_emails()
        r = _date_range(from_, to, email_records)
        return _json(_with_range(r, compute_emails_metrics(email_records, r.start, r.end)))
    except Exception as exc:
        logger.exception("emails failed")
        return _error(exc)


@app.get("/support")
def support(from_: Optional[str] = Query(default=None, alias="from"), to: Optional[str] = Query(default=None)):
    try:
        calls, email_records = load_calls(), load_emails()
        r = _date_range(from_, to, calls, email_records)
        return _json(_with_range(r, compute_support_metrics(calls, email_records, r.start, r.end)))
    except Exception as exc:
        logger.exception("support failed")
        return _error(exc)


@app.get("/summary")
def summary(from_: Optional[str] = Query(default=None, alias="from"), to: Optional[str] = Query(default=None)):
    if not from_ or not to:
        return JSONResponse(status_code=400, content={"error": "Missing from or to parameters"})
    try:
        calls, email_records = load_calls(), load_emails()
        r = _date_range(from_, to, calls, email_records)
        return _json(build_executive_summary(calls, email_records, r.start, r.end))
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.get("/kpi")
def kpi():
    try:
        return _json(load_uk_kpi())
    except Exception as exc:
        logger.exception("kpi failed")
        return _error(exc)


@app.get("/kpi/scorecard")
def kpi_scorecard():
    try:
        return _json(compute_kpi_scorecard(load_uk_kpi()))
    except Exception as exc:
        logger.exception("kpi_scorecard failed")
        return _error(exc)


@app.get("/kpi/{domain}")
def kpi_domain(domain: KpiDomain):
    try:
        return _json(getattr(load_uk_kpi(), domain))
    except Exception as exc:
        logger.exception("kpi_domain failed")
        return _error(exc)


@app.get("/marketing")
def marketing():
    try:
        return _json(load_marketing())
    except Exception as exc:
        logger.exception("marketing failed")
        return _error(exc)
