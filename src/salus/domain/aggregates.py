"""Derived dashboard statistics, computed as pure functions of the collections."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from salus.domain.model import IncidentType, SentimentLabel
from salus.domain.time_windows import within_days

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from salus.domain.model import Candidate, Incident

VIOLENCE_INDEX_CAP = 10.0
VIOLENCE_INDEX_SCALE = 1.5
FATALITY_WEIGHT = 5.0
INJURY_WEIGHT = 0.5
HIGH_ALERT_THRESHOLD = 5.0
SURGE_THRESHOLD = 3

_BASE_SEVERITY: dict[IncidentType, float] = {
    IncidentType.VIOLENCE: 8.0,
    IncidentType.PROTEST: 5.0,
}
_DEFAULT_SEVERITY = 1.0


@dataclass(frozen=True, slots=True)
class DashboardStats:
    violence_index: float
    active_incidents: int
    weighted_sentiment: float
    sentiment: SentimentLabel
    days_to_election: int

    @property
    def is_high_alert(self) -> bool:
        return self.violence_index > HIGH_ALERT_THRESHOLD

    @property
    def is_surge(self) -> bool:
        return self.active_incidents > SURGE_THRESHOLD


def incident_severity(incident: Incident) -> float:
    base = _BASE_SEVERITY.get(incident.type, _DEFAULT_SEVERITY)
    return base + FATALITY_WEIGHT * incident.fatalities + INJURY_WEIGHT * incident.injuries


def violence_index(incidents: Sequence[Incident]) -> float:
    """Mean severity scaled by 1.5, clamped to ``[0, 10]`` and rounded half-up to 0.1."""

    total = sum(incident_severity(incident) for incident in incidents)
    raw = (total / max(1, len(incidents))) * VIOLENCE_INDEX_SCALE
    clamped = min(VIOLENCE_INDEX_CAP, max(0.0, raw))
    return float(Decimal(repr(clamped)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def count_recent(incidents: Sequence[Incident], *, days: int, reference: date) -> int:
    return sum(1 for incident in incidents if within_days(incident.date, days, reference=reference))


def weighted_sentiment(candidates: Sequence[Candidate]) -> float:
    """Vote-share-weighted mean sentiment; a zero vote share weighs 1."""

    weights = [c.projected_vote_share or 1.0 for c in candidates]
    total = sum(weights) or 1.0
    return sum(c.sentiment_score * w for c, w in zip(candidates, weights, strict=True)) / total


def sentiment_label(score: float) -> SentimentLabel:
    if score > 60:
        return SentimentLabel.OPTIMISTIC
    if score > 45:
        return SentimentLabel.TENSE
    return SentimentLabel.VOLATILE


def days_until(target: date, *, reference: date) -> int:
    """Whole days left until ``target``; zero once it has passed."""

    return max(0, (target - reference).days)


def compute_aggregates(
    incidents: Sequence[Incident],
    candidates: Sequence[Candidate],
    *,
    reference: date,
    election_date: date,
    recent_window_days: int = 30,
) -> DashboardStats:
    sentiment = weighted_sentiment(candidates)
    return DashboardStats(
        violence_index=violence_index(incidents),
        active_incidents=count_recent(incidents, days=recent_window_days, reference=reference),
        weighted_sentiment=round(sentiment, 2),
        sentiment=sentiment_label(sentiment),
        days_to_election=days_until(election_date, reference=reference),
    )


__all__ = [
    "DashboardStats",
    "compute_aggregates",
    "count_recent",
    "days_until",
    "incident_severity",
    "sentiment_label",
    "violence_index",
    "weighted_sentiment",
]
