"""Incident entities observed in the field."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from .enums import IncidentType, SourceReliability


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    time: str
    event: str


@dataclass(frozen=True, slots=True)
class OsintReport:
    """Forensic annotation attached to an incident."""

    source_reliability: SourceReliability
    credibility_score: float
    verified_sources: tuple[str, ...] = ()
    analysis: str = ""
    timeline: tuple[TimelineEntry, ...] = ()

    def __post_init__(self) -> None:
        if not 0 <= self.credibility_score <= 100:
            raise ValueError("credibility_score must be within 0..100")


@dataclass(frozen=True, slots=True)
class Incident:
    """An observed event. Never mutated; a fresher snapshot replaces it wholesale."""

    id: str
    date: date
    location: str
    type: IncidentType
    latitude: float | None = None
    longitude: float | None = None
    fatalities: int = 0
    injuries: int = 0
    description: str = ""
    verified: bool = False
    osint_report: OsintReport | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Incident id must not be empty")
        if not self.location:
            raise ValueError("Incident location must not be empty")
        if self.fatalities < 0 or self.injuries < 0:
            raise ValueError("Casualty counts must be non-negative")
