"""Fuzzy name matching for partial presidential-candidate updates.

Names match when either is a case-sensitive substring of the other, so a short
alias such as ``"Bobi"`` lands on ``"Robert Kyagulanyi Ssentamu (Bobi Wine)"``.
Overlapping names are inherently ambiguous; the first update in the given order
wins and later matches for the same candidate are ignored.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from salus.domain.model import Candidate
    from salus.domain.ports.enrichment import CandidateUpdate


def names_match(left: str, right: str) -> bool:
    if not left or not right:
        return False
    return left in right or right in left


def find_update(candidate: Candidate, updates: Iterable[CandidateUpdate]) -> CandidateUpdate | None:
    for update in updates:
        if names_match(update.name.strip(), candidate.name):
            return update
    return None


def apply_update(candidate: Candidate, update: CandidateUpdate) -> Candidate:
    """Overwrite only sentiment and mentions, and only where the update carries them."""

    changes: dict[str, float | int] = {}
    if update.sentiment_score is not None:
        changes["sentiment_score"] = update.sentiment_score
    if update.mentions is not None:
        changes["mentions"] = update.mentions
    if not changes:
        return candidate
    return replace(candidate, **changes)


def patch_candidates(
    candidates: Sequence[Candidate],
    updates: Sequence[CandidateUpdate],
) -> tuple[list[Candidate], int]:
    """Return the patched collection and how many candidates changed."""

    patched: list[Candidate] = []
    changed = 0
    for candidate in candidates:
        update = find_update(candidate, updates)
        updated = apply_update(candidate, update) if update is not None else candidate
        if updated != candidate:
            changed += 1
        patched.append(updated)
    return patched, changed


__all__ = ["apply_update", "find_update", "names_match", "patch_candidates"]
