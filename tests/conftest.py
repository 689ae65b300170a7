import io

import pandas as pd
import pytest

from core.filters import DashboardFilters


CUSTOMER_HEADERS = ["Customer", "Sale", "Total Payment", "Payment"]


@pytest.fixture
def customer_rows():
    return pd.DataFrame(
        [
            {"Customer": "Dr. Jane Doe", "Sale": "Alice", "Total Payment": 100, "Payment": "Paid"},
            {"Customer": "jane doe", "Sale": "Bob", "Total Payment": 50, "Payment": "paid"},
            {"Customer": "Jane Doe", "Sale": "Alice", "Total Payment": 75, "Payment": "PAID"},
            {"Customer": "JOHN", "Sale": "Bob", "Total Payment": "abc", "Payment": "Paid"},
            {"Customer": "John", "Sale": "", "Total Payment": 20, "Payment": "Paid"},
            {"Customer": "Mary", "Sale": "Carol", "Total Payment": 30, "Payment": "Unpaid"},
            {"Customer": "Mary", "Sale": "Carol", "Total Payment": 40, "Payment": "Paid"},
        ],
        columns=CUSTOMER_HEADERS,
    )


@pytest.fixture
def customer_filters():
    return DashboardFilters(label_column="Customer", amount_column="Total Payment", status_column="Payment")


def ranked_customer_rows(n: int) -> pd.DataFrame:
    """n distinct paid customers; customer i appears (n - i) + 1 times so rank == i."""
    records = []
    for i in range(1, n + 1):
        for _ in range(n - i + 1):
            records.append({"Customer": f"Customer {i:02d}", "Payment": "Paid"})
    return pd.DataFrame(records, columns=["Customer", "Payment"])


def workbook_bytes(df: pd.DataFrame, sheet_name: str = "Sheet1") -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return buf.getvalue()
