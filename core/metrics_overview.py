from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List

import pandas as pd

from core.aggregation import ChartDataItem, compute_chart_items, filter_table_items
from core.charts import build_count_chart, to_vega_spec
from core.filters import DashboardFilters
from core.labels import (
    empty_chart_message,
    label_header,
    missing_selection_message,
    search_placeholder,
    table_title,
    value_header,
)
from core.metrics_summary import compute_summary_metrics


def compute_overview(filters: DashboardFilters, rows: pd.DataFrame, headers: Iterable[str]) -> Dict[str, Any]:
    headers = list(headers)
    items: List[ChartDataItem] = compute_chart_items(rows, headers, filters)
    table_items = filter_table_items(items, filters.search_term, filters.grading_active)
    summary = compute_summary_metrics(rows, headers, filters)

    labels = {
        "label_header": label_header(filters),
        "value_header": value_header(filters.label_column, filters.paid_filter_active),
        "table_title": table_title(filters),
        "search_placeholder": search_placeholder(filters),
    }

    chart = None
    message = None
    if not rows.empty and filters.label_column and items:
        chart = to_vega_spec(build_count_chart(items, filters.chart_type, labels["label_header"], labels["value_header"]))
    elif rows.empty or not filters.label_column:
        message = missing_selection_message(not rows.empty, filters.label_column)
    else:
        message = empty_chart_message(filters.paid_filter_active)

    return {
        "filters": asdict(filters),
        "summary": asdict(summary),
        "items": [asdict(i) for i in items],
        "table_items": [asdict(i) for i in table_items],
        "labels": labels,
        "grading_active": filters.grading_active,
        "chart": chart,
        "message": message,
    }
