from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import pandas as pd

from core.data import column_as_series, find_header, parse_amount


TOP_10 = "Top 10"
TOP_20 = "Top 20"
TOP_30 = "Top 30"
ALL = "All"

DISPLAY_LIMITS: List[str] = [TOP_10, TOP_20, TOP_30, ALL]
DISPLAY_LIMIT_SIZES: Dict[str, Optional[int]] = {TOP_10: 10, TOP_20: 20, TOP_30: 30, ALL: None}

BAR = "Bar"
DOUGHNUT = "Doughnut"
CHART_TYPES: List[str] = [BAR, DOUGHNUT]

LABEL_COLUMN_ORDER = ["Sale", "Customer"]
AMOUNT_COLUMN_ORDER = ["Total Payment", "Total Amount"]
AMOUNT_HINTS = ["amount", "value", "total", "qty", "quantity", "paid", "price"]
STATUS_HINTS = ["status", "payment status", "condition"]


@dataclass(frozen=True)
class DashboardFilters:
    label_column: str = ""
    amount_column: str = ""
    status_column: str = ""
    display_limit: str = TOP_10
    chart_type: str = BAR
    search_term: str = ""
    question: str = ""

    @property
    def paid_filter_active(self) -> bool:
        return bool(self.status_column)

    @property
    def grading_active(self) -> bool:
        return self.label_column.lower() == "customer" and self.paid_filter_active


def _column_or_blank(value: object, headers: Optional[List[str]]) -> str:
    name = str(value) if value else ""
    if name and headers is not None and name not in headers:
        return ""
    return name


def normalize_filters(raw: dict, *, headers: Optional[List[str]] = None) -> DashboardFilters:
    display_limit = raw.get("display_limit") or TOP_10
    if display_limit not in DISPLAY_LIMIT_SIZES:
        display_limit = TOP_10

    chart_type = raw.get("chart_type") or BAR
    if chart_type not in CHART_TYPES:
        chart_type = BAR

    return DashboardFilters(
        label_column=_column_or_blank(raw.get("label_column"), headers),
        amount_column=_column_or_blank(raw.get("amount_column"), headers),
        status_column=_column_or_blank(raw.get("status_column"), headers),
        display_limit=display_limit,
        chart_type=chart_type,
        search_term=str(raw.get("search_term") or ""),
        question=str(raw.get("question") or ""),
    )


def label_column_options(headers: Iterable[str]) -> List[str]:
    headers = list(headers)
    out: List[str] = []
    for name in LABEL_COLUMN_ORDER:
        found = find_header(headers, name)
        if found:
            out.append(found)
    return out


def _has_parseable_value(rows: pd.DataFrame, col: str) -> bool:
    return any(parse_amount(v) is not None for v in column_as_series(rows, col))


def _auto_amount_column(headers: List[str], rows: pd.DataFrame, label_column: str) -> str:
    for name in AMOUNT_COLUMN_ORDER:
        found = find_header(headers, name)
        if found:
            return found
    for h in headers:
        if any(hint in h.lower() for hint in AMOUNT_HINTS) and _has_parseable_value(rows, h):
            return h
    for h in headers:
        if h.lower() != label_column.lower() and _has_parseable_value(rows, h):
            return h
    return ""


def _auto_status_column(headers: List[str]) -> str:
    payment = find_header(headers, "payment")
    if payment:
        return payment
    for h in headers:
        if any(hint in h.lower() for hint in STATUS_HINTS):
            return h
    return ""


def auto_select_filters(headers: Iterable[str], rows: pd.DataFrame) -> DashboardFilters:
    """Pick default label, amount and status columns for a freshly uploaded sheet."""
    headers = [str(h) for h in headers]
    options = label_column_options(headers)
    label_column = options[0] if options else ""
    return DashboardFilters(
        label_column=label_column,
        amount_column=_auto_amount_column(headers, rows, label_column),
        status_column=_auto_status_column(headers),
    )
