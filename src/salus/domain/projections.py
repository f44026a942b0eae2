"""Per-constituency leader / runner-up projections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from salus.domain.model import ParliamentaryCandidate

UNCONTESTED_MARGIN = 100.0


@dataclass(frozen=True, slots=True)
class ConstituencyProjection:
    constituency: str
    leader: ParliamentaryCandidate
    runner_up: ParliamentaryCandidate | None
    margin: float
    candidates: tuple[ParliamentaryCandidate, ...]

    @property
    def candidate_count(self) -> int:
        return len(self.candidates)


def project_constituencies(
    candidates: Iterable[ParliamentaryCandidate],
) -> list[ConstituencyProjection]:
    """Group candidates by constituency and rank them by projected vote share.

    Constituencies keep first-seen order; ties on vote share keep collection order.
    """

    groups: dict[str, list[ParliamentaryCandidate]] = {}
    for candidate in candidates:
        groups.setdefault(candidate.constituency, []).append(candidate)

    projections: list[ConstituencyProjection] = []
    for constituency, members in groups.items():
        ranked = sorted(members, key=lambda c: c.projected_vote_share, reverse=True)
        leader = ranked[0]
        runner_up = ranked[1] if len(ranked) > 1 else None
        margin = (
            round(leader.projected_vote_share - runner_up.projected_vote_share, 1)
            if runner_up is not None
            else UNCONTESTED_MARGIN
        )
        projections.append(
            ConstituencyProjection(
                constituency=constituency,
                leader=leader,
                runner_up=runner_up,
                margin=margin,
                candidates=tuple(members),
            )
        )
    return projections


def search_projections(
    projections: Sequence[ConstituencyProjection], term: str
) -> list[ConstituencyProjection]:
    """Case-insensitive match on constituency or leader name."""

    needle = term.strip().lower()
    if not needle:
        return list(projections)
    return [
        p
        for p in projections
        if needle in p.constituency.lower() or needle in p.leader.name.lower()
    ]


__all__ = ["ConstituencyProjection", "project_constituencies", "search_projections"]
