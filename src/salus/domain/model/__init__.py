"""Public domain model surface."""

from __future__ import annotations

from salus.domain.model.candidate import Candidate, ParliamentaryCandidate
from salus.domain.model.enums import (
    CollectionKind,
    EmptySnapshotPolicy,
    IncidentType,
    ParliamentaryCategory,
    SentimentLabel,
    SnapshotState,
    SourceReliability,
)
from salus.domain.model.incident import Incident, OsintReport, TimelineEntry

Entity = Incident | Candidate | ParliamentaryCandidate

__all__ = [
    "Candidate",
    "CollectionKind",
    "EmptySnapshotPolicy",
    "Entity",
    "Incident",
    "IncidentType",
    "OsintReport",
    "ParliamentaryCandidate",
    "ParliamentaryCategory",
    "SentimentLabel",
    "SnapshotState",
    "SourceReliability",
    "TimelineEntry",
]
