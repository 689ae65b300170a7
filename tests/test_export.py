import io
from datetime import date

import pandas as pd
import pytest
from PIL import Image

from core.aggregation import ChartDataItem
from core.export import (
    EXPORT_SHEET_NAME,
    ExportError,
    chart_export_filename,
    data_export_filename,
    export_chart_pdf,
    export_table_xlsx,
    landscape_page_size,
)


ITEMS = [ChartDataItem("Jane Doe", 3, "Grad A"), ChartDataItem("Mary", 1, "Grad A")]


def _png(width: int, height: int) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buf, format="PNG")
    return buf.getvalue()


def test_filenames_use_iso_date():
    assert chart_export_filename(date(2024, 3, 9)) == "chart-export-2024-03-09.pdf"
    assert data_export_filename(date(2024, 3, 9)) == "data-export-2024-03-09.xlsx"


def test_export_table_xlsx_with_grading():
    content = export_table_xlsx(ITEMS, "Customer", "Total Customer Cooperated", True)
    df = pd.read_excel(io.BytesIO(content), sheet_name=EXPORT_SHEET_NAME)
    assert list(df.columns) == ["Customer", "Total Customer Cooperated", "Grading"]
    assert df["Customer"].tolist() == ["Jane Doe", "Mary"]
    assert df["Grading"].tolist() == ["Grad A", "Grad A"]


def test_export_table_xlsx_without_grading_drops_column():
    content = export_table_xlsx(ITEMS, "Sale", "Count of Sale", False)
    df = pd.read_excel(io.BytesIO(content), sheet_name=EXPORT_SHEET_NAME)
    assert list(df.columns) == ["Sale", "Count of Sale"]
    assert df["Count of Sale"].tolist() == [3, 1]


def test_export_table_xlsx_requires_items():
    with pytest.raises(ExportError, match="No data to export"):
        export_table_xlsx([], "Sale", "Count of Sale", False)


def test_landscape_page_size():
    assert landscape_page_size(300, 120) == (300, 120)
    assert landscape_page_size(100, 200) == (200, 100)


def test_export_chart_pdf_builds_a_pdf():
    content = export_chart_pdf(_png(300, 120))
    assert content.startswith(b"%PDF")


def test_export_chart_pdf_rejects_bad_input():
    with pytest.raises(ExportError):
        export_chart_pdf(b"")
    with pytest.raises(ExportError):
        export_chart_pdf(b"not an image")
