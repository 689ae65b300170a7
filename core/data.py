from __future__ import annotations

import io
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional, Union

import pandas as pd


logger = logging.getLogger(__name__)

EMPTY_SHEET_MESSAGE = "The Excel file is empty or has no data in the first sheet."

_HONORIFIC_RE = re.compile(r"^(mrs|mr|ms|dr)\.?\s*")
_TRAILING_PUNCT_RE = re.compile(r"[.,]+$")
_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")

WorkbookSource = Union[bytes, str, Path, BinaryIO]


class IngestError(ValueError):
    """Raised when an uploaded workbook cannot be turned into rows."""


@dataclass(frozen=True)
class IngestResult:
    rows: pd.DataFrame
    headers: List[str] = field(default_factory=list)
    file_name: Optional[str] = None


def is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: object) -> str:
    """Render a cell the way it is displayed and grouped (5.0 -> "5", missing -> "")."""
    if is_missing(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_amount(value: object) -> Optional[float]:
    """Leading-number parse of a cell; None when no number can be read.

    Trailing text is ignored ("12abc" -> 12.0), so only cells that do not start
    with a number are excluded from sums.
    """
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER_RE.match(cell_text(value))
    if not match:
        return None
    return float(match.group(1).replace("Infinity", "inf"))


def normalize_key(label: object) -> str:
    if not isinstance(label, str) or not label:
        return ""
    key = label.lower()
    key = _HONORIFIC_RE.sub("", key)
    key = _TRAILING_PUNCT_RE.sub("", key)
    return _WHITESPACE_RE.sub(" ", key).strip()


def is_paid(value: object) -> bool:
    if is_missing(value):
        return False
    return cell_text(value).lower() == "paid"


def find_header(headers: Iterable[str], name: str) -> Optional[str]:
    target = name.lower()
    for header in headers:
        if str(header).lower() == target:
            return str(header)
    return None


def column_as_series(df: pd.DataFrame, col: str) -> pd.Series:
    if not col or col not in df.columns:
        return pd.Series([None] * len(df), index=df.index, dtype=object)
    val = df[col]
    if isinstance(val, pd.DataFrame):
        return val.iloc[:, 0]
    return val


def _as_buffer(source: WorkbookSource) -> Union[io.BytesIO, str, Path, BinaryIO]:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(bytes(source))
    return source


def load_workbook_rows(source: WorkbookSource, *, file_name: Optional[str] = None) -> IngestResult:
    """Read the first worksheet of an .xlsx/.xls workbook into rows.

    Headers come from the first sheet row; cell values pass through as text or
    numbers, with empty cells kept as missing values.
    """
    try:
        df = pd.read_excel(_as_buffer(source), sheet_name=0)
    except Exception as exc:
        logger.warning("failed to read workbook %s: %s", file_name or "<upload>", exc)
        raise IngestError(f"Error processing Excel file: {exc}") from exc

    df = df.dropna(how="all")
    if df.empty:
        logger.warning("workbook %s has no data rows", file_name or "<upload>")
        raise IngestError(EMPTY_SHEET_MESSAGE)

    df.columns = [str(c) for c in df.columns]
    df = df.astype(object).where(df.notna(), None).reset_index(drop=True)
    headers = list(df.columns)
    logger.info("loaded %d rows x %d columns from %s", len(df), len(headers), file_name or "<upload>")
    return IngestResult(rows=df, headers=headers, file_name=file_name)


def rows_from_records(records: Iterable[dict], headers: Optional[List[str]] = None) -> pd.DataFrame:
    """Build a rows frame from JSON-style records (the API request shape)."""
    records = list(records or [])
    if headers:
        df = pd.DataFrame.from_records(records, columns=headers)
    else:
        df = pd.DataFrame.from_records(records)
    if df.empty:
        return df
    return df.astype(object).where(df.notna(), None)


def rows_to_records(rows: pd.DataFrame) -> List[dict]:
    if rows.empty:
        return []
    clean = rows.astype(object).where(rows.notna(), None)
    return clean.to_dict(orient="records")
