from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from core.data import cell_text, column_as_series, find_header, is_missing, is_paid, normalize_key, parse_amount
from core.filters import DashboardFilters


@dataclass(frozen=True)
class SummaryMetrics:
    total_payment_voucher: int = 0
    total_customers: int = 0
    grand_total_amount: float = 0.0
    total_amount_paid: float = 0.0
    total_amount_unpaid: float = 0.0


def count_paid_rows(rows: pd.DataFrame, status_column: str) -> int:
    if rows.empty or not status_column:
        return 0
    return int(column_as_series(rows, status_column).map(is_paid).sum())


def count_unique_customers(rows: pd.DataFrame, headers: Iterable[str]) -> int:
    customer = find_header(headers, "customer")
    if rows.empty or not customer:
        return 0
    values = column_as_series(rows, customer)
    keys = {normalize_key(cell_text(v)) for v in values if not is_missing(v)}
    return len(keys)


def compute_summary_metrics(rows: pd.DataFrame, headers: Iterable[str], filters: DashboardFilters) -> SummaryMetrics:
    """Card totals, always over the full (unfiltered) sheet."""
    if rows.empty:
        return SummaryMetrics()
    headers = list(headers)

    grand_total = 0.0
    total_paid = 0.0
    if filters.amount_column:
        amounts = column_as_series(rows, filters.amount_column).map(parse_amount)
        parsed = amounts.notna()
        grand_total = float(amounts[parsed].astype(float).sum())
        if filters.status_column:
            paid = column_as_series(rows, filters.status_column).map(is_paid).astype(bool)
            total_paid = float(amounts[parsed & paid].astype(float).sum())

    return SummaryMetrics(
        total_payment_voucher=count_paid_rows(rows, filters.status_column),
        total_customers=count_unique_customers(rows, headers),
        grand_total_amount=grand_total,
        total_amount_paid=total_paid if filters.status_column else 0.0,
        total_amount_unpaid=(grand_total - total_paid) if filters.status_column else grand_total,
    )
