"""Natural-language questions about the ranked table, answered by Gemini.

The feature is optional: an ``InsightClient`` built without an API key is in a
disabled state and every other part of the dashboard works without it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from google import genai

from core.aggregation import NO_GRADE, ChartDataItem
from core.config import DEFAULT_GEMINI_MODEL
from core.export import GRADING_HEADER


logger = logging.getLogger(__name__)

PROMPT_SAMPLE_SIZE = 50
DEFAULT_QUESTION = (
    "Provide a concise summary of key insights, trends, or anomalies in this data. "
    "Focus on the most significant findings."
)


class InsightError(RuntimeError):
    """The insight request could not be answered."""


class InsightsDisabledError(InsightError):
    """No API credential was configured."""


class InsightServiceError(InsightError):
    """The Gemini call itself failed (network, credential, quota)."""


def prompt_records(
    items: List[ChartDataItem], label_header: str, value_header: str, grading_active: bool
) -> List[Dict[str, Any]]:
    records = []
    for item in items[:PROMPT_SAMPLE_SIZE]:
        entry: Dict[str, Any] = {label_header: item.name, value_header: item.value}
        if grading_active and item.grade and item.grade != NO_GRADE:
            entry[GRADING_HEADER] = item.grade
        records.append(entry)
    return records


def build_insight_prompt(
    items: List[ChartDataItem],
    title: str,
    label_header: str,
    value_header: str,
    grading_active: bool,
    question: str = "",
) -> str:
    sample = json.dumps(prompt_records(items, label_header, value_header, grading_active), indent=2, ensure_ascii=False)
    request = question.strip() or DEFAULT_QUESTION
    return (
        f'You are an expert data analyst. Your task is to analyze the provided dataset and offer insights. '
        f'The data is about: "{title}".\n\n'
        f"Context:\n"
        f'Data Title: "{title}"\n'
        f"Data Sample (up to {PROMPT_SAMPLE_SIZE} items):\n{sample}\n\n"
        f"User's Request: {request}\n\n"
        "Please provide the response in clear, easy-to-understand language. If you identify specific data points, "
        "refer to them by their label and value. Keep your analysis concise and focused on actionable insights or "
        "significant observations based *only* on the provided data sample and context. "
        "Do not make up external information."
    )


class InsightClient:
    def __init__(self, api_key: Optional[str], *, model_name: str = DEFAULT_GEMINI_MODEL):
        self.model_name = model_name
        self._client: Optional[genai.Client] = genai.Client(api_key=api_key) if api_key else None
        if self._client is None:
            logger.warning("Gemini API key not set; AI insights are disabled")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def ask(
        self,
        items: List[ChartDataItem],
        title: str,
        label_header: str,
        value_header: str,
        grading_active: bool,
        question: str = "",
    ) -> str:
        if not self.enabled:
            raise InsightsDisabledError("AI service is not initialized. Check API_KEY.")
        if not items:
            raise InsightError("No data available for AI analysis.")

        prompt = build_insight_prompt(items, title, label_header, value_header, grading_active, question)
        try:
            response = self._client.models.generate_content(model=self.model_name, contents=prompt)
            text = response.text
        except Exception as exc:
            logger.exception("Gemini request failed")
            raise InsightServiceError(f"Failed to get AI insights: {exc}") from exc
        return text or ""
