import logging
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from core.aggregation import ChartDataItem
from core.charts import build_count_chart, chart_to_png
from core.config import configure_logging, load_settings
from core.data import IngestError, load_workbook_rows
from core.export import ExportError, chart_export_filename, data_export_filename, export_chart_pdf, export_table_xlsx
from core.filters import CHART_TYPES, DISPLAY_LIMITS, TOP_10, DashboardFilters, auto_select_filters, label_column_options
from core.insights import InsightClient, InsightError
from core.metrics_overview import compute_overview

alt.data_transformers.disable_max_rows()
logger = logging.getLogger(__name__)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #1e3a8a;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .summary-card {border-left: 4px solid #3b82f6;border-radius: 8px;padding: 12px 16px;background: #ffffff;
                       box-shadow: 0 1px 2px rgba(0,0,0,0.06);}
        .summary-card .title {font-size: 0.75rem;font-weight: 600;color: #6b7280;text-transform: uppercase;}
        .summary-card .value {font-size: 1.4rem;font-weight: 700;color: #111827;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def summary_card(column, title: str, value: str, color: str):
    column.markdown(
        f"<div class='summary-card' style='border-left-color:{color}'>"
        f"<div class='title'>{title}</div><div class='value'>{value}</div></div>",
        unsafe_allow_html=True,
    )


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def reset_upload_state(file_name: Optional[str] = None):
    st.session_state["rows"] = pd.DataFrame()
    st.session_state["headers"] = []
    st.session_state["file_name"] = file_name
    st.session_state["ai_response"] = ""
    st.session_state["ai_error"] = None
    for key in ("label_column", "amount_column", "status_column", "search_term", "question"):
        st.session_state[key] = ""
    st.session_state["display_limit"] = TOP_10


@st.cache_resource
def get_insight_client(api_key: Optional[str], model_name: str) -> InsightClient:
    return InsightClient(api_key, model_name=model_name)


# ---------- UI setup ----------
settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="E-CRM K.S.P.M Analysis", layout="wide")
inject_base_styles()
st.markdown("<div class='app-top-bar'><div class='page-title'>E-CRM K.S.P.M Analysis</div></div>", unsafe_allow_html=True)

if "rows" not in st.session_state:
    reset_upload_state()

insight_client = get_insight_client(settings.gemini_api_key, settings.gemini_model)

# ----- Sidebar: upload + data configuration -----
with st.sidebar:
    st.markdown("### Upload Excel File")
    uploaded = st.file_uploader("Choose Excel file", type=["xlsx", "xls"])
    if uploaded is not None and uploaded.file_id != st.session_state.get("upload_id"):
        st.session_state["upload_id"] = uploaded.file_id
        reset_upload_state(uploaded.name)
        st.session_state.pop("upload_error", None)
        try:
            with st.spinner("Loading data..."):
                result = load_workbook_rows(uploaded.getvalue(), file_name=uploaded.name)
        except IngestError as exc:
            st.session_state["upload_error"] = str(exc)
        else:
            st.session_state["rows"] = result.rows
            st.session_state["headers"] = result.headers
            defaults = auto_select_filters(result.headers, result.rows)
            st.session_state["label_column"] = defaults.label_column
            st.session_state["amount_column"] = defaults.amount_column
            st.session_state["status_column"] = defaults.status_column
    if st.session_state.get("file_name"):
        st.caption(f"Selected: {st.session_state['file_name']}")

    rows: pd.DataFrame = st.session_state["rows"]
    headers = st.session_state["headers"]

    st.markdown("---")
    st.markdown("### Data Configuration")
    label_options = label_column_options(headers)
    if headers and not label_options:
        st.warning("None of the allowed label columns (Sale, Customer) were found in the uploaded file.")
    label_column = st.selectbox("Label Column", options=label_options or [""], key="label_column", disabled=not label_options)
    column_options = [""] + headers
    amount_column = st.selectbox("Amount Column", options=column_options, key="amount_column", disabled=not headers)
    status_column = st.selectbox("Payment Status Column", options=column_options, key="status_column", disabled=not headers)
    display_limit = st.selectbox("Show Items", options=DISPLAY_LIMITS, key="display_limit", disabled=rows.empty)
    chart_type = st.radio("Chart Type", CHART_TYPES, horizontal=True)

filters = DashboardFilters(
    label_column=label_column or "",
    amount_column=amount_column or "",
    status_column=status_column or "",
    display_limit=display_limit or TOP_10,
    chart_type=chart_type,
    search_term=st.session_state.get("search_term", ""),
    question=st.session_state.get("question", ""),
)

if st.session_state.get("upload_error"):
    st.error(f"Error: {st.session_state['upload_error']}")

payload = compute_overview(filters, rows, headers)
summary = payload["summary"]
labels = payload["labels"]
items = [ChartDataItem(**i) for i in payload["items"]]
table_items = [ChartDataItem(**i) for i in payload["table_items"]]

cols = st.columns(5)
summary_card(cols[0], "Total Payment Voucher", f"{summary['total_payment_voucher']:,}", "#3b82f6")
summary_card(cols[1], "Total Customer", f"{summary['total_customers']:,}", "#f97316")
summary_card(cols[2], "Grand Total Amount", format_currency(summary["grand_total_amount"]), "#ef4444")
summary_card(cols[3], "Total Paid", format_currency(summary["total_amount_paid"]), "#22c55e")
summary_card(cols[4], "Total Unpaid", format_currency(summary["total_amount_unpaid"]), "#eab308")

chart = None
with card(labels["value_header"]):
    if payload["message"]:
        st.info(payload["message"])
    else:
        chart = build_count_chart(items, filters.chart_type, labels["label_header"], labels["value_header"])
        st.altair_chart(chart, use_container_width=True)

if chart is not None:
    with st.sidebar:
        st.markdown("---")
        st.markdown("### Export")
        chart_key = (st.session_state.get("upload_id"), filters.label_column, filters.status_column, filters.display_limit, filters.chart_type)
        if st.session_state.get("chart_pdf_key") != chart_key:
            st.session_state.pop("chart_pdf", None)
        if st.button("Export Chart"):
            try:
                with st.spinner("Rendering chart..."):
                    st.session_state["chart_pdf"] = export_chart_pdf(chart_to_png(chart))
                st.session_state["chart_pdf_key"] = chart_key
            except Exception:
                logger.exception("chart export failed")
                st.error("Failed to export chart.")
        if st.session_state.get("chart_pdf"):
            st.download_button(
                "Download Chart (PDF)",
                data=st.session_state["chart_pdf"],
                file_name=chart_export_filename(),
                mime="application/pdf",
            )

if not payload["message"]:
    with card(labels["table_title"]):
        st.text_input("Search", key="search_term", placeholder=labels["search_placeholder"], label_visibility="collapsed")
        table = pd.DataFrame(payload["table_items"], columns=["name", "value", "grade"]).rename(
            columns={"name": labels["label_header"], "value": labels["value_header"], "grade": "Grading"}
        )
        if not payload["grading_active"]:
            table = table.drop(columns=["Grading"])
        if table.empty:
            st.info("No items match your search.")
        else:
            st.dataframe(table, hide_index=True, use_container_width=True)
        try:
            st.download_button(
                "Export Data (XLSX)",
                data=export_table_xlsx(table_items, labels["label_header"], labels["value_header"], payload["grading_active"]),
                file_name=data_export_filename(),
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
        except ExportError as exc:
            st.caption(str(exc))

    with card("Ask AI About This Data"):
        if not insight_client.enabled:
            st.info("AI insights are disabled. Set GEMINI_API_KEY to enable them.")
        question = st.text_area(
            "Your question",
            key="question",
            placeholder="e.g. Which customers stand out? Leave blank for a general summary.",
            disabled=not insight_client.enabled,
        )
        if st.button("Get AI Insights", disabled=not insight_client.enabled or not items):
            st.session_state["ai_response"] = ""
            st.session_state["ai_error"] = None
            try:
                with st.spinner("Analyzing..."):
                    st.session_state["ai_response"] = insight_client.ask(
                        items,
                        labels["table_title"],
                        labels["label_header"],
                        labels["value_header"],
                        payload["grading_active"],
                        question=question,
                    )
            except InsightError as exc:
                st.session_state["ai_error"] = str(exc)
        if st.session_state.get("ai_error"):
            st.error(st.session_state["ai_error"])
        if st.session_state.get("ai_response"):
            st.markdown(st.session_state["ai_response"])
