from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import altair as alt
import pandas as pd
import vl_convert as vlc

from core.aggregation import ChartDataItem
from core.filters import DOUGHNUT

alt.data_transformers.disable_max_rows()

BAR_COLOR = "#3B82F6"
PALETTE = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8", "#82CA9D", "#A4DE6C", "#D0ED57", "#FFC658"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def build_count_chart(items: List[ChartDataItem], chart_type: str, label_title: str, value_title: str) -> alt.Chart:
    """Bar or doughnut chart of ranked counts; bar order follows rank."""
    df = pd.DataFrame([asdict(i) for i in items], columns=["name", "value", "grade"])
    order = df["name"].tolist()
    tooltip = [alt.Tooltip("name:N", title=label_title), alt.Tooltip("value:Q", title=value_title, format=",")]

    if chart_type == DOUGHNUT:
        return (
            alt.Chart(df)
            .mark_arc(innerRadius=70, outerRadius=140)
            .encode(
                theta=alt.Theta("value:Q", stack=True),
                color=alt.Color("name:N", title=label_title, sort=order, scale=alt.Scale(range=PALETTE)),
                order=alt.Order("value:Q", sort="descending"),
                tooltip=tooltip,
            )
            .properties(title=value_title, width=420, height=320)
        )

    return (
        alt.Chart(df)
        .mark_bar(color=BAR_COLOR)
        .encode(
            x=alt.X("name:N", title=label_title, sort=order, axis=alt.Axis(labelAngle=-40)),
            y=alt.Y("value:Q", title=value_title, axis=alt.Axis(format=",")),
            tooltip=tooltip,
        )
        .properties(title=value_title, width=720, height=360)
    )


def chart_to_png(chart: alt.Chart, scale: float = 2) -> bytes:
    return vlc.vegalite_to_png(to_vega_spec(chart), scale=scale)
