"""Grouped label counts: paid filter, grouping, ranking, grading and slicing.

Every function here is a pure function of its inputs; the dashboard recomputes
the whole chain whenever the rows or any selection changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

import pandas as pd

from core.data import cell_text, column_as_series, find_header, is_paid, normalize_key, parse_amount
from core.filters import DISPLAY_LIMIT_SIZES, TOP_10, DashboardFilters


NO_GRADE = "-"
GRADE_BANDS = [(10, "Grad A"), (20, "Grad B"), (30, "Grad C")]
LOWEST_GRADE = "Grad D"

GROUPED_COLUMNS = ["name", "value", "first_seen"]


@dataclass(frozen=True)
class ChartDataItem:
    name: str
    value: int
    grade: Optional[str] = None


def _empty_grouped() -> pd.DataFrame:
    return pd.DataFrame({"name": pd.Series(dtype=object), "value": pd.Series(dtype="int64"), "first_seen": pd.Series(dtype="int64")})


def filter_paid_rows(rows: pd.DataFrame, status_column: str) -> pd.DataFrame:
    if rows.empty or not status_column:
        return rows
    mask = column_as_series(rows, status_column).map(is_paid).astype(bool)
    return rows[mask]


def eligible_mask(rows: pd.DataFrame, headers: Iterable[str], label_column: str, paid_filter_active: bool) -> pd.Series:
    """Rows allowed to count toward their bucket.

    Only the paid customer view is restricted: rows need a numeric Total Payment
    and, when the sheet has a Sale column, a non-blank sale.
    """
    mask = pd.Series(True, index=rows.index, dtype=bool)
    if label_column.lower() != "customer" or not paid_filter_active:
        return mask
    headers = list(headers)
    total_payment = find_header(headers, "total payment")
    if not total_payment:
        return mask
    mask = column_as_series(rows, total_payment).map(lambda v: parse_amount(v) is not None).astype(bool)
    sale = find_header(headers, "sale")
    if sale:
        mask &= column_as_series(rows, sale).map(lambda v: cell_text(v).strip() != "").astype(bool)
    return mask


def group_labels(rows: pd.DataFrame, headers: Iterable[str], filters: DashboardFilters) -> pd.DataFrame:
    """Count retained rows per normalized label.

    Returns one row per bucket (``name``, ``value``, ``first_seen``) in order of
    first appearance. ``name`` is the most frequent original spelling; on a tie
    the spelling seen first wins.
    """
    if rows.empty or not filters.label_column:
        return _empty_grouped()

    retained = filter_paid_rows(rows, filters.status_column)
    labels = column_as_series(retained, filters.label_column).map(cell_text)
    keep = (labels != "") & eligible_mask(retained, headers, filters.label_column, filters.paid_filter_active)
    labels = labels[keep]
    if labels.empty:
        return _empty_grouped()

    occurrences = pd.DataFrame({"name": labels.tolist()})
    occurrences["key"] = occurrences["name"].map(normalize_key)
    occurrences["position"] = range(len(occurrences))

    names = (
        occurrences.groupby(["key", "name"], sort=False)["position"]
        .agg(count="size", first_seen="min")
        .reset_index()
    )
    buckets = (
        names.groupby("key", sort=False)
        .agg(value=("count", "sum"), first_seen=("first_seen", "min"))
        .reset_index()
    )
    representative = (
        names.sort_values(["count", "first_seen"], ascending=[False, True], kind="stable")
        .drop_duplicates(subset=["key"], keep="first")[["key", "name"]]
    )
    grouped = buckets.merge(representative, on="key", how="left")
    grouped = grouped[grouped["name"] != ""]
    return grouped.sort_values("first_seen", kind="stable")[GROUPED_COLUMNS].reset_index(drop=True)


def rank_items(grouped: pd.DataFrame) -> pd.DataFrame:
    if grouped.empty:
        return grouped
    return grouped.sort_values(["value", "first_seen"], ascending=[False, True], kind="stable").reset_index(drop=True)


def grade_for_rank(rank: int) -> str:
    for upper, grade in GRADE_BANDS:
        if rank <= upper:
            return grade
    return LOWEST_GRADE


def assign_grades(ranked: pd.DataFrame, grading_active: bool) -> pd.DataFrame:
    graded = ranked.copy()
    if grading_active:
        graded["grade"] = [grade_for_rank(rank) for rank in range(1, len(graded) + 1)]
    else:
        graded["grade"] = NO_GRADE
    return graded


def slice_items(graded: pd.DataFrame, display_limit: str) -> pd.DataFrame:
    size = DISPLAY_LIMIT_SIZES.get(display_limit, DISPLAY_LIMIT_SIZES[TOP_10])
    if size is None:
        return graded
    return graded.head(size)


def to_chart_items(df: pd.DataFrame) -> List[ChartDataItem]:
    return [
        ChartDataItem(name=str(r["name"]), value=int(r["value"]), grade=r.get("grade"))
        for r in df.to_dict(orient="records")
    ]


def compute_chart_items(rows: pd.DataFrame, headers: Iterable[str], filters: DashboardFilters) -> List[ChartDataItem]:
    if rows.empty or not filters.label_column:
        return []
    ranked = rank_items(group_labels(rows, headers, filters))
    graded = assign_grades(ranked, filters.grading_active)
    return to_chart_items(slice_items(graded, filters.display_limit))


def filter_table_items(items: List[ChartDataItem], search_term: str, grading_active: bool) -> List[ChartDataItem]:
    if not search_term:
        return list(items)
    needle = search_term.lower()
    out: List[ChartDataItem] = []
    for item in items:
        if needle in item.name.lower():
            out.append(item)
        elif grading_active and item.grade and needle in item.grade.lower():
            out.append(item)
    return out
