from __future__ import annotations

import io
import logging
from datetime import date
from typing import List, Optional, Tuple

import pandas as pd
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from core.aggregation import ChartDataItem


logger = logging.getLogger(__name__)

EXPORT_SHEET_NAME = "ExportedData"
GRADING_HEADER = "Grading"


class ExportError(ValueError):
    """Raised when there is nothing to export or the export cannot be built."""


def chart_export_filename(today: Optional[date] = None) -> str:
    return f"chart-export-{(today or date.today()).isoformat()}.pdf"


def data_export_filename(today: Optional[date] = None) -> str:
    return f"data-export-{(today or date.today()).isoformat()}.xlsx"


def landscape_page_size(width: float, height: float) -> Tuple[float, float]:
    """Page size for an image of the given pixels; the long side is the page width."""
    return max(width, height), min(width, height)


def export_chart_pdf(png_bytes: bytes) -> bytes:
    """Embed a rasterized chart in a single landscape page of the same pixel size."""
    if not png_bytes:
        raise ExportError("No chart to export or chart data is empty.")
    try:
        image = ImageReader(io.BytesIO(png_bytes))
        width, height = image.getSize()
    except Exception as exc:
        logger.exception("chart image could not be read")
        raise ExportError("Failed to export chart.") from exc

    page_w, page_h = landscape_page_size(width, height)
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(page_w, page_h))
    pdf.drawImage(image, 0, 0, width=page_w, height=page_h)
    pdf.showPage()
    pdf.save()
    return buf.getvalue()


def table_export_frame(items: List[ChartDataItem], label_header: str, value_header: str, grading_active: bool) -> pd.DataFrame:
    columns = [label_header, value_header] + ([GRADING_HEADER] if grading_active else [])
    records = []
    for item in items:
        row = {label_header: item.name, value_header: item.value}
        if grading_active:
            row[GRADING_HEADER] = item.grade
        records.append(row)
    return pd.DataFrame.from_records(records, columns=columns)


def export_table_xlsx(items: List[ChartDataItem], label_header: str, value_header: str, grading_active: bool) -> bytes:
    if not items:
        raise ExportError("No data to export.")
    df = table_export_frame(items, label_header, value_header, grading_active)
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=EXPORT_SHEET_NAME)
    return buf.getvalue()
