"""Port definitions for the enrichment service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from salus.domain.model import Incident


@dataclass(frozen=True, slots=True)
class CandidateUpdate:
    """Partial presidential-candidate update; ``None`` fields are left untouched."""

    name: str
    sentiment_score: float | None = None
    mentions: int | None = None


@dataclass(frozen=True, slots=True)
class EnrichmentBatch:
    incidents: tuple[Incident, ...] = field(default_factory=tuple)
    candidate_updates: tuple[CandidateUpdate, ...] = field(default_factory=tuple)


class EnrichmentError(RuntimeError):
    """Raised when the enrichment call fails or returns an unusable payload."""


@runtime_checkable
class EnrichmentFetcher(Protocol):
    """Single request/response call; failures raise ``EnrichmentError``."""

    async def __call__(self) -> EnrichmentBatch: ...


__all__ = ["CandidateUpdate", "EnrichmentBatch", "EnrichmentError", "EnrichmentFetcher"]
