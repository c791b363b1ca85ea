"""
AI response parsing

Turns the analyst text returned by /api/analyze into a summary plus an ordered
list of insights, and builds the AnalysisRecord shown and stored by the dashboard.
"""
import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dashboard.models import AnalysisRecord

NO_CONTENT_SUMMARY = "No content returned from AI."
SUMMARY_HEADER = "Summary:"
INSIGHTS_HEADER = "Key Insights:"
TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M:%S %p"

# "1. ", "10.", "2.\t" ... repeated markers such as "1. 2. " are all removed
_ENUMERATION_MARKER = re.compile(r"^(?:\d+\.\s*)+")


class ParsedAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    insights: List[str] = Field(default_factory=list)


def _clean_insight(line: str) -> str:
    return _ENUMERATION_MARKER.sub("", line.strip()).strip()


def parse_ai_response(text: Any) -> ParsedAnalysis:
    """
    Split analyst text into summary and insights.

    Never raises: missing or non-string input yields a placeholder summary,
    and text without the "Key Insights:" header becomes the whole summary.
    """
    if not text or not isinstance(text, str):
        return ParsedAnalysis(summary=NO_CONTENT_SUMMARY, insights=[])

    text = text.strip()
    insights: List[str] = []

    index = text.find(INSIGHTS_HEADER)
    if index != -1:
        summary = text[:index].strip()
        remainder = text[index + len(INSIGHTS_HEADER):]
        for line in remainder.splitlines():
            insight = _clean_insight(line)
            if insight:
                insights.append(insight)
    else:
        summary = text

    if summary.startswith(SUMMARY_HEADER):
        summary = summary[len(SUMMARY_HEADER):].strip()

    if not summary and not insights:
        return ParsedAnalysis(summary=text, insights=[])

    return ParsedAnalysis(summary=summary, insights=insights)


def format_analysis_text(summary: str, insights: List[str]) -> str:
    """Render the canonical analyst text; parse_ai_response reads it back unchanged"""
    if not insights and (not summary or INSIGHTS_HEADER in summary):
        # Fallback results already hold the raw text; an empty one must stay
        # non-empty or it would read back as missing content
        return summary or " "
    lines =[f"{SUMMARY_HEADER} {summary}", INSIGHTS_HEADER]
    lines.extend(f"{position}. {insight}" for position, insight in enumerate(insights, start=1))
    return "\n".join(lines)


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def build_analysis_record(text: Any, query: str, now: Optional[datetime] = None) -> AnalysisRecord:
    parsed = parse_ai_response(text)
    return AnalysisRecord(
        query=query,
        timestamp=format_timestamp(now or datetime.now()),
        summary=parsed.summary,
        insights=list(parsed.insights),
    )
