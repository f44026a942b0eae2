"""Pydantic models describing incident, candidate and enrichment payloads.

The same camelCase document shape is used by the live stream, the remote
document store and the enrichment endpoint.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from salus.domain.model import IncidentType, ParliamentaryCategory, SourceReliability

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
IsoDateStr = Annotated[str, StringConstraints(pattern=r"^\d{4}-\d{2}-\d{2}$")]
Percentage = Annotated[float, Field(ge=0, le=100)]
Count = Annotated[int, Field(ge=0)]


class SalusBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class TimelineEntryPayload(SalusBaseModel):
    time: str
    event: str


class OsintReportPayload(SalusBaseModel):
    source_reliability: SourceReliability = Field(alias="sourceReliability")
    credibility_score: Percentage = Field(alias="credibilityScore")
    verified_sources: list[str] = Field(default_factory=list, alias="verifiedSources")
    ai_analysis: str = Field(default="", alias="aiAnalysis")
    timeline: list[TimelineEntryPayload] = Field(default_factory=list)


class IncidentPayload(SalusBaseModel):
    id: NonEmptyStr
    type: IncidentType
    location: NonEmptyStr
    date: IsoDateStr | None = None
    latitude: float | None = None
    longitude: float | None = None
    fatalities: Count = 0
    injuries: Count = 0
    description: str = ""
    verified: bool = False
    osint_report: OsintReportPayload | None = Field(default=None, alias="osintReport")

    @field_validator("date")
    @classmethod
    def _calendar_date(cls, value: str | None) -> str | None:
        if value is not None:
            date.fromisoformat(value)
        return value


class CandidatePayload(SalusBaseModel):
    id: NonEmptyStr
    name: NonEmptyStr
    party: str
    district: str
    sentiment_score: Percentage = Field(alias="sentimentScore")
    mentions: Count
    projected_vote_share: Percentage = Field(alias="projectedVoteShare")
    image_url: str | None = Field(default=None, alias="imageUrl")
    notes: str | None = None


class ParliamentaryCandidatePayload(SalusBaseModel):
    id: NonEmptyStr
    name: NonEmptyStr
    constituency: NonEmptyStr
    party: str
    category: ParliamentaryCategory
    sentiment_score: Percentage = Field(alias="sentimentScore")
    projected_vote_share: Percentage = Field(alias="projectedVoteShare")
    mentions: Count
    coordinates: tuple[float, float] | None = None


class CandidateUpdatePayload(SalusBaseModel):
    name: NonEmptyStr
    sentiment_score: Percentage | None = Field(default=None, alias="sentimentScore")
    mentions: Count | None = None


class EnrichmentResponse(SalusBaseModel):
    """Envelope only; items are validated one by one so a bad item drops alone."""

    incidents: list[dict[str, Any]] = Field(default_factory=list)
    candidate_updates: list[dict[str, Any]] = Field(
        default_factory=list, alias="candidateUpdates"
    )


def load_json(text: str | bytes) -> Any:
    """``json.loads`` that reports runaway nesting as ``ValueError`` like any other bad input."""

    try:
        return json.loads(text)
    except RecursionError as exc:
        raise ValueError("JSON nesting is too deep") from exc


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object out of model-style output.

    Markdown code fences are removed and anything before the first ``{`` or after
    the last ``}`` is discarded. Raises ``ValueError`` when no object can be parsed.
    """

    clean = text.replace("```json", "").replace("```JSON", "").replace("```", "").strip()
    first, last = clean.find("{"), clean.rfind("}")
    if first != -1 and last > first:
        clean = clean[first : last + 1]
    payload = load_json(clean)
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")
    return payload


__all__ = [
    "CandidatePayload",
    "CandidateUpdatePayload",
    "EnrichmentResponse",
    "IncidentPayload",
    "OsintReportPayload",
    "ParliamentaryCandidatePayload",
    "TimelineEntryPayload",
    "extract_json_object",
    "load_json",
]
