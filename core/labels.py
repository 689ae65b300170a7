from __future__ import annotations

from core.filters import ALL, DashboardFilters


def value_header(label_column: str, paid_filter_active: bool) -> str:
    label = label_column or "Items"
    lowered = label.lower()
    if lowered == "customer":
        return "Total Customer Cooperated"
    if paid_filter_active:
        if lowered == "sale":
            return "Customer Cooperated"
        return f"Count of Paid {label}"
    return f"Count of {label}"


def table_title(filters: DashboardFilters) -> str:
    prefix = "All " if filters.display_limit == ALL else f"{filters.display_limit} "
    suffix = " with Grading" if filters.grading_active else ""
    return f"{prefix}{value_header(filters.label_column, filters.paid_filter_active)}{suffix}"


def label_header(filters: DashboardFilters) -> str:
    return filters.label_column or "Label"


def search_placeholder(filters: DashboardFilters) -> str:
    label = label_header(filters)
    if filters.grading_active:
        return f"Search {label} or Grade..."
    return f"Search {label}..."


def missing_selection_message(has_rows: bool, label_column: str) -> str:
    if not has_rows:
        return "Please upload an Excel file to get started."
    if not label_column:
        return "Please select a Label Column for Total Count analysis."
    return "Ensure appropriate selections are made to visualize data."


def empty_chart_message(paid_filter_active: bool) -> str:
    if paid_filter_active:
        return "No 'Paid' items found for the current selections."
    return "No data to display based on current selections or filters."
