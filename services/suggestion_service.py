import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import groq
from groq import AsyncGroq
from pydantic import ValidationError

from config import GROQ_API_KEY, GROQ_MODEL, SUGGESTION_SAMPLE_ROWS
from models.chart_models import ChartType, Suggestion
from models.common_models import Row
from services.errors import (
    MalformedResponseError,
    QuotaExhaustedError,
    RateLimitedError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

# Rows quoted verbatim in the prompt
PROMPT_ROWS = 5

SYSTEM_PROMPT = """You are a data visualization expert. Analyze the provided spreadsheet data and suggest the best charts to visualize it.

Rules:
- Suggest 2-4 charts that would be most insightful for this data
- Consider the data types: use categorical data for x-axis in bar/pie charts, numeric for y-axis
- Use line/area charts for time series or sequential data
- Use pie charts only when showing parts of a whole (limited categories)
- Each suggestion must use actual column names from the data

Respond by calling the suggest_charts function."""

SUGGEST_CHARTS_TOOL = {
    "type": "function",
    "function": {
        "name": "suggest_charts",
        "description": "Return chart suggestions for the data",
        "parameters": {
            "type": "object",
            "properties": {
                "suggestions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "type": {"type": "string", "enum": [t.value for t in ChartType]},
                            "title": {"type": "string"},
                            "xAxis": {"type": "string"},
                            "yAxis": {"type": "string"},
                            "reason": {"type": "string"},
                        },
                        "required": ["type", "title", "xAxis", "yAxis", "reason"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["suggestions"],
            "additionalProperties": False,
        },
    },
}


def build_user_prompt(headers: Sequence[str], sample_rows: Sequence[Row], column_kinds: Optional[Dict[str, str]] = None) -> str:
    kinds = ""
    if column_kinds:
        kinds = "\nColumn types: " + ", ".join(f"{c} ({k})" for c, k in column_kinds.items()) + "\n"

    return f"""Analyze this spreadsheet data and suggest the best charts:

Columns: {", ".join(headers)}
{kinds}
Sample data (first {PROMPT_ROWS} rows):
{json.dumps(list(sample_rows)[:PROMPT_ROWS], indent=2, default=str)}

Suggest 2-4 optimal charts. For each chart, specify the type (bar/line/pie/area), a descriptive title, which column to use for x-axis, which for y-axis, and a brief reason why this visualization is useful."""


def parse_suggestions(arguments: str) -> List[Suggestion]:
    """Decode the tool-call arguments into Suggestion objects."""
    try:
        payload = json.loads(arguments)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError("No suggestions returned from AI") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("suggestions"), list):
        raise MalformedResponseError("No suggestions returned from AI")

    suggestions: List[Suggestion] = []
    for item in payload["suggestions"]:
        try:
            suggestions.append(Suggestion.model_validate(item))
        except ValidationError:
            logger.warning("Dropping unparsable suggestion: %r", item)
    return suggestions


def filter_suggestions(suggestions: Sequence[Suggestion], headers: Sequence[str]) -> List[Suggestion]:
    """Keep only suggestions whose axes are both real columns."""
    known = set(headers)
    valid = []
    for s in suggestions:
        if s.x_axis in known and s.y_axis in known:
            valid.append(s)
        else:
            logger.warning("Discarding suggestion '%s': axes %r/%r not in headers", s.title, s.x_axis, s.y_axis)
    return valid


def _tool_arguments(response: Any) -> str:
    try:
        arguments = response.choices[0].message.tool_calls[0].function.arguments
    except (AttributeError, IndexError, TypeError) as exc:
        raise MalformedResponseError("No suggestions returned from AI") from exc
    if not arguments:
        raise MalformedResponseError("No suggestions returned from AI")
    return arguments


class SuggestionAdapter:
    """
    Boundary to the LLM that proposes charts.

    Only the header list and a small sample of rows leave the process.
    One attempt per request; failures are raised as SuggestionServiceError
    subclasses and never touch the caller's charts.
    """

    def __init__(self, client: Optional[AsyncGroq] = None, model: str = GROQ_MODEL, sample_size: int = SUGGESTION_SAMPLE_ROWS):
        if client is None and GROQ_API_KEY:
            client = AsyncGroq(api_key=GROQ_API_KEY, max_retries=0)
        self.client = client
        self.model = model
        self.sample_size = sample_size

    def build_request(self, headers: Sequence[str], sample_rows: Sequence[Row]) -> Dict[str, Any]:
        return {
            "headers": list(headers),
            "sampleRows": list(sample_rows)[: self.sample_size],
        }

    async def request_suggestions(
        self,
        headers: Sequence[str],
        sample_rows: Sequence[Row],
        column_kinds: Optional[Dict[str, str]] = None,
    ) -> List[Suggestion]:
        if self.client is None:
            raise ServiceUnavailableError("GROQ_API_KEY is not configured.")

        request = self.build_request(headers, sample_rows)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(request["headers"], request["sampleRows"], column_kinds)},
        ]

        # ---------- GROQ CALL ----------
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                tools=[SUGGEST_CHARTS_TOOL],
                tool_choice={"type": "function", "function": {"name": "suggest_charts"}},
                temperature=0.2,
            )
        except groq.RateLimitError as exc:
            logger.warning("Suggestion service rate limited: %s", exc)
            raise RateLimitedError("Rate limit exceeded. Please try again in a moment.") from exc
        except groq.APIStatusError as exc:
            logger.warning("Suggestion service error %s: %s", exc.status_code, exc)
            if exc.status_code == 402:
                raise QuotaExhaustedError("AI credits exhausted. Please add credits to continue.") from exc
            raise ServiceUnavailableError(f"AI gateway error: {exc.status_code}") from exc
        except groq.APIError as exc:
            logger.warning("Suggestion service unreachable: %s", exc)
            raise ServiceUnavailableError("Could not reach the suggestion service.") from exc

        suggestions = parse_suggestions(_tool_arguments(response))
        valid = filter_suggestions(suggestions, request["headers"])
        logger.info("Received %d chart suggestions (%d valid)", len(suggestions), len(valid))
        return valid
