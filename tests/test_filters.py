import pandas as pd

from core.filters import ALL, BAR, DOUGHNUT, TOP_10, DashboardFilters, auto_select_filters, label_column_options, normalize_filters


def test_grading_needs_customer_label_and_status():
    assert DashboardFilters(label_column="CUSTOMER", status_column="Payment").grading_active
    assert not DashboardFilters(label_column="Customer").grading_active
    assert not DashboardFilters(label_column="Sale", status_column="Payment").grading_active


def test_normalize_filters_falls_back_on_unknown_values():
    f = normalize_filters(
        {"label_column": "Customer", "status_column": "Gone", "display_limit": "Top 99", "chart_type": "Pie"},
        headers=["Customer", "Payment"],
    )
    assert f.label_column == "Customer"
    assert f.status_column == ""
    assert f.display_limit == TOP_10
    assert f.chart_type == BAR


def test_normalize_filters_keeps_valid_values():
    f = normalize_filters({"display_limit": ALL, "chart_type": DOUGHNUT, "search_term": "jane", "amount_column": "Total"})
    assert (f.display_limit, f.chart_type, f.search_term, f.amount_column) == (ALL, DOUGHNUT, "jane", "Total")


def test_label_column_options_orders_sale_first():
    assert label_column_options(["customer", "Amount", "SALE"]) == ["SALE", "customer"]
    assert label_column_options(["Amount"]) == []


def test_auto_select_prefers_named_columns():
    headers = ["No", "Customer", "Sale", "Total Payment", "Payment", "Status"]
    rows = pd.DataFrame([{"No": 1, "Customer": "Jane", "Sale": "Alice", "Total Payment": 10, "Payment": "Paid", "Status": "x"}])
    f = auto_select_filters(headers, rows)
    assert (f.label_column, f.amount_column, f.status_column) == ("Sale", "Total Payment", "Payment")


def test_auto_select_uses_hints_and_numeric_content():
    headers = ["Customer", "Note", "Unit Price", "Payment Status"]
    rows = pd.DataFrame([{"Customer": "Jane", "Note": "n/a", "Unit Price": "12.5", "Payment Status": "Paid"}])
    f = auto_select_filters(headers, rows)
    assert (f.label_column, f.amount_column, f.status_column) == ("Customer", "Unit Price", "Payment Status")


def test_auto_select_falls_back_to_first_numeric_column():
    headers = ["Customer", "Count"]
    rows = pd.DataFrame([{"Customer": "Jane", "Count": 3}])
    f = auto_select_filters(headers, rows)
    assert f.amount_column == "Count"
    assert f.status_column == ""


def test_auto_select_with_nothing_recognisable():
    f = auto_select_filters(["A", "B"], pd.DataFrame([{"A": "x", "B": "y"}]))
    assert f == DashboardFilters()
