"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class IncidentType(StrEnum):
    VIOLENCE = "Violence"
    PROTEST = "Protest"
    ARREST = "Arrest"
    INTIMIDATION = "Intimidation"
    RALLY = "Rally"


class SourceReliability(StrEnum):
    """Admiralty-style grading of the source behind a forensic annotation."""

    A = "A - Completely Reliable"
    B = "B - Usually Reliable"
    C = "C - Fairly Reliable"
    D = "D - Not Usually Reliable"
    E = "E - Unreliable"
    F = "F - Cannot Be Judged"


class ParliamentaryCategory(StrEnum):
    WOMAN_MP = "Woman MP"
    CONSTITUENCY = "Constituency"
    SPECIAL_INTEREST = "Special Interest"


class CollectionKind(StrEnum):
    """Canonical collections owned by the reconciler."""

    INCIDENTS = "incidents"
    PRESIDENTIAL = "presidential_candidates"
    PARLIAMENTARY = "parliamentary_candidates"


class SentimentLabel(StrEnum):
    OPTIMISTIC = "Optimistic"
    TENSE = "Tense"
    VOLATILE = "Volatile"


class SnapshotState(StrEnum):
    """What the remote source has told us about a collection so far."""

    UNKNOWN = "unknown"
    EMPTY = "empty"
    POPULATED = "populated"


class EmptySnapshotPolicy(StrEnum):
    """How an empty remote snapshot is interpreted.

    ``IGNORE`` treats it as "not yet populated" and keeps the current collection;
    ``REPLACE`` treats it as authoritative and clears the collection.
    """

    IGNORE = "ignore"
    REPLACE = "replace"
