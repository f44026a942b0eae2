"""Presidential and parliamentary candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import ParliamentaryCategory


def _check_percentage(name: str, value: float) -> None:
    if not 0 <= value <= 100:
        raise ValueError(f"{name} must be within 0..100, got {value}")


@dataclass(frozen=True, slots=True)
class Candidate:
    """Presidential candidate. Vote shares are not required to sum to 100."""

    id: str
    name: str
    party: str
    district: str
    sentiment_score: float
    mentions: int
    projected_vote_share: float
    image_url: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        _check_percentage("sentiment_score", self.sentiment_score)
        _check_percentage("projected_vote_share", self.projected_vote_share)
        if self.mentions < 0:
            raise ValueError("mentions must be non-negative")


@dataclass(frozen=True, slots=True)
class ParliamentaryCandidate:
    id: str
    name: str
    constituency: str
    party: str
    category: ParliamentaryCategory
    sentiment_score: float
    projected_vote_share: float
    mentions: int
    coordinates: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        _check_percentage("sentiment_score", self.sentiment_score)
        _check_percentage("projected_vote_share", self.projected_vote_share)
        if self.mentions < 0:
            raise ValueError("mentions must be non-negative")
