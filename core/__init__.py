"""Core (UI-agnostic) dashboard logic.

This package contains:
- spreadsheet ingestion (XLSX -> pandas) and cell parsing
- column selections and their defaults
- the label-count pipeline and summary metrics (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict / PNG)
- chart PDF and table XLSX exporters
- the optional Gemini insight client
"""
