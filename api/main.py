from __future__ import annotations

import logging
import math
from dataclasses import asdict
from functools import lru_cache

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, RowsRequest
from core.aggregation import compute_chart_items, filter_table_items
from core.charts import build_count_chart, chart_to_png
from core.config import configure_logging, load_settings
from core.data import IngestError, load_workbook_rows, rows_from_records, rows_to_records
from core.export import ExportError, chart_export_filename, data_export_filename, export_chart_pdf, export_table_xlsx
from core.filters import CHART_TYPES, DISPLAY_LIMITS, DashboardFilters, auto_select_filters, label_column_options, normalize_filters
from core.insights import InsightClient, InsightError, InsightsDisabledError, InsightServiceError
from core.labels import label_header, table_title, value_header
from core.metrics_overview import compute_overview


settings = load_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Customer Cooperation Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@lru_cache(maxsize=1)
def get_insight_client() -> InsightClient:
    return InsightClient(settings.gemini_api_key, model_name=settings.gemini_model)


def _filters_from_request(req: RowsRequest) -> DashboardFilters:
    return normalize_filters(req.filters.model_dump(), headers=req.headers or None)


def _rows_from_request(req: RowsRequest) -> pd.DataFrame:
    return rows_from_records(req.rows, req.headers or None)


def _headers_from_request(req: RowsRequest, rows: pd.DataFrame) -> list[str]:
    return list(req.headers) if req.headers else [str(c) for c in rows.columns]


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


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
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


@app.get("/meta/options")
def meta_options(client: InsightClient = Depends(get_insight_client)):
    return _json({"display_limits": DISPLAY_LIMITS, "chart_types": CHART_TYPES, "ai_enabled": client.enabled})


@app.post("/upload")
async def upload(file: UploadFile = File(...)):
    try:
        content = await file.read()
        result = load_workbook_rows(content, file_name=file.filename)
    except IngestError as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("upload failed")
        return _error(500, exc)

    filters = auto_select_filters(result.headers, result.rows)
    return _json(
        {
            "file_name": result.file_name,
            "headers": result.headers,
            "rows": rows_to_records(result.rows),
            "filters": DashboardFiltersModel(**asdict(filters)).model_dump(),
            "label_options": label_column_options(result.headers),
        }
    )


@app.post("/overview")
def overview(req: RowsRequest):
    try:
        rows = _rows_from_request(req)
        f = _filters_from_request(req)
        return _json(compute_overview(f, rows, _headers_from_request(req, rows)))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(500, exc)


@app.post("/export/data")
def export_data(req: RowsRequest):
    try:
        rows = _rows_from_request(req)
        f = _filters_from_request(req)
        items = compute_chart_items(rows, _headers_from_request(req, rows), f)
        table_items = filter_table_items(items, f.search_term, f.grading_active)
        content = export_table_xlsx(
            table_items, label_header(f), value_header(f.label_column, f.paid_filter_active), f.grading_active
        )
    except ExportError as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("export_data failed")
        return _error(500, exc)
    filename = data_export_filename()
    return Response(content=content, media_type=XLSX_MEDIA_TYPE, headers={"Content-Disposition": f"attachment; filename={filename}"})


@app.post("/export/chart")
def export_chart(req: RowsRequest):
    try:
        rows = _rows_from_request(req)
        f = _filters_from_request(req)
        items = compute_chart_items(rows, _headers_from_request(req, rows), f)
        if not items:
            raise ExportError("No chart to export or chart data is empty.")
        chart = build_count_chart(items, f.chart_type, label_header(f), value_header(f.label_column, f.paid_filter_active))
        content = export_chart_pdf(chart_to_png(chart))
    except ExportError as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("export_chart failed")
        return _error(500, exc)
    filename = chart_export_filename()
    return Response(content=content, media_type="application/pdf", headers={"Content-Disposition": f"attachment; filename={filename}"})


@app.post("/insights")
def insights(req: RowsRequest, client: InsightClient = Depends(get_insight_client)):
    try:
        rows = _rows_from_request(req)
        f = _filters_from_request(req)
        items = compute_chart_items(rows, _headers_from_request(req, rows), f)
        text = client.ask(
            items,
            table_title(f),
            label_header(f),
            value_header(f.label_column, f.paid_filter_active),
            f.grading_active,
            question=f.question,
        )
    except InsightsDisabledError as exc:
        return _error(503, exc)
    except InsightServiceError as exc:
        return _error(502, exc)
    except InsightError as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("insights failed")
        return _error(500, exc)
    return _json({"text": text})
