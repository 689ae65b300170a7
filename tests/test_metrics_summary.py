import pandas as pd
import pytest

from conftest import CUSTOMER_HEADERS
from core.filters import DashboardFilters
from core.metrics_summary import SummaryMetrics, compute_summary_metrics, count_unique_customers


def test_amount_totals_skip_unparseable_values():
    rows = pd.DataFrame(
        [{"amount": 100, "status": "Paid"}, {"amount": 50, "status": "Unpaid"}, {"amount": "abc", "status": "Paid"}]
    )
    metrics = compute_summary_metrics(rows, ["amount", "status"], DashboardFilters(amount_column="amount", status_column="status"))

    assert metrics.grand_total_amount == 150
    assert metrics.total_amount_paid == 100
    assert metrics.total_amount_unpaid == 50
    assert metrics.total_payment_voucher == 2


def test_unique_customers_use_normalized_keys():
    rows = pd.DataFrame({"Customer": ["Jane Doe", "jane doe", "JOHN", None]})
    assert count_unique_customers(rows, ["Customer"]) == 2


def test_unique_customers_without_customer_column():
    rows = pd.DataFrame({"Sale": ["Alice"]})
    assert count_unique_customers(rows, ["Sale"]) == 0


def test_summary_over_full_sheet(customer_rows, customer_filters):
    metrics = compute_summary_metrics(customer_rows, CUSTOMER_HEADERS, customer_filters)
    assert metrics == SummaryMetrics(
        total_payment_voucher=6,
        total_customers=3,
        grand_total_amount=315.0,
        total_amount_paid=285.0,
        total_amount_unpaid=30.0,
    )


def test_without_status_column_unpaid_equals_grand_total(customer_rows):
    metrics = compute_summary_metrics(customer_rows, CUSTOMER_HEADERS, DashboardFilters(amount_column="Total Payment"))
    assert metrics.total_payment_voucher == 0
    assert metrics.total_amount_paid == 0
    assert metrics.total_amount_unpaid == metrics.grand_total_amount == 315.0


def test_without_amount_column_sums_are_zero(customer_rows):
    metrics = compute_summary_metrics(customer_rows, CUSTOMER_HEADERS, DashboardFilters(status_column="Payment"))
    assert metrics.grand_total_amount == 0
    assert metrics.total_amount_paid == 0
    assert metrics.total_amount_unpaid == 0
    assert metrics.total_payment_voucher == 6


@pytest.mark.parametrize("filters", [DashboardFilters(), DashboardFilters(label_column="Customer", amount_column="x", status_column="y")])
def test_empty_dataset_is_all_zero(filters):
    assert compute_summary_metrics(pd.DataFrame(), [], filters) == SummaryMetrics()


def test_missing_selected_column_degrades_to_zero(customer_rows):
    metrics = compute_summary_metrics(customer_rows, CUSTOMER_HEADERS, DashboardFilters(amount_column="Nope", status_column="Also Nope"))
    assert metrics.grand_total_amount == 0
    assert metrics.total_payment_voucher == 0
