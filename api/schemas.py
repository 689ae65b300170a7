from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    label_column: str = ""
    amount_column: str = ""
    status_column: str = ""
    display_limit: str = "Top 10"
    chart_type: str = "Bar"
    search_term: str = ""
    question: str = ""


class RowsRequest(BaseModel):
    headers: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    filters: DashboardFiltersModel = Field(default_factory=DashboardFiltersModel)
