"""Canonical in-memory collections merged from seed, remote and live sources.

Every source writes through one of the ``apply_*`` operations; each write replaces
the affected collection, re-derives the dashboard statistics and then notifies
change observers. Collections are reconciled independently, so statistics may
briefly reflect a new incident list next to an older candidate list.
"""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, TypeVar

from salus.config.reconciler import ReconcilerConfig
from salus.domain.aggregates import DashboardStats, compute_aggregates
from salus.domain.model import (
    Candidate,
    CollectionKind,
    EmptySnapshotPolicy,
    Incident,
    ParliamentaryCandidate,
    SnapshotState,
)
from salus.domain.time_windows import Clock, apply_temporal_filter, today

from .matching import patch_candidates

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from salus.domain.model import Entity
    from salus.domain.ports.enrichment import CandidateUpdate

ChangeObserver = Callable[[CollectionKind, DashboardStats], None]

log = getLogger(__name__)

T = TypeVar("T", bound=Incident | Candidate | ParliamentaryCandidate)

_ENTITY_TYPES: dict[CollectionKind, type[Incident | Candidate | ParliamentaryCandidate]] = {
    CollectionKind.INCIDENTS: Incident,
    CollectionKind.PRESIDENTIAL: Candidate,
    CollectionKind.PARLIAMENTARY: ParliamentaryCandidate,
}


class UnknownCollectionError(ValueError):
    """Raised when an update names a collection the reconciler does not own."""


def _coerce_kind(kind: CollectionKind | str) -> CollectionKind:
    try:
        return CollectionKind(kind)
    except ValueError:
        raise UnknownCollectionError(f"Unknown collection kind: {kind!r}") from None


def _unique_by_id(items: Iterable[T]) -> list[T]:
    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


class DataReconciler:
    """Own the canonical incident and candidate collections."""

    def __init__(self, config: ReconcilerConfig | None = None, *, clock: Clock = today) -> None:
        self.config = config or ReconcilerConfig()
        self._clock = clock
        self._collections: dict[CollectionKind, list[Entity]] = {
            kind: [] for kind in CollectionKind
        }
        self._snapshot_states: dict[CollectionKind, SnapshotState] = {
            kind: SnapshotState.UNKNOWN for kind in CollectionKind
        }
        self._observers: list[ChangeObserver] = []
        self._stats = self.compute_aggregates()

    # -- read side -----------------------------------------------------------------

    @property
    def incidents(self) -> tuple[Incident, ...]:
        return tuple(self._collections[CollectionKind.INCIDENTS])  # type: ignore[arg-type]

    @property
    def presidential_candidates(self) -> tuple[Candidate, ...]:
        return tuple(self._collections[CollectionKind.PRESIDENTIAL])  # type: ignore[arg-type]

    @property
    def parliamentary_candidates(self) -> tuple[ParliamentaryCandidate, ...]:
        return tuple(self._collections[CollectionKind.PARLIAMENTARY])  # type: ignore[arg-type]

    @property
    def stats(self) -> DashboardStats:
        return self._stats

    def collection(self, kind: CollectionKind | str) -> tuple[Entity, ...]:
        return tuple(self._collections[_coerce_kind(kind)])

    def snapshot_state(self, kind: CollectionKind | str) -> SnapshotState:
        return self._snapshot_states[_coerce_kind(kind)]

    def on_change(self, observer: ChangeObserver) -> Callable[[], None]:
        """Register ``observer``; the returned callable removes it again."""

        self._observers.append(observer)

        def remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return remove

    # -- write side ----------------------------------------------------------------

    def apply_seed(self, kind: CollectionKind | str, items: Iterable[Entity]) -> None:
        """Install the initial collection; used as-is when no remote source is configured."""

        resolved = _coerce_kind(kind)
        self._install(resolved, self._validated(resolved, items))

    def apply_remote_snapshot(self, kind: CollectionKind | str, items: Sequence[Entity]) -> bool:
        """Replace the collection wholesale with a remote snapshot.

        Returns whether the collection was replaced. An empty snapshot (or one in
        which every item was malformed) is handled by ``empty_snapshot_policy``.
        """

        resolved = _coerce_kind(kind)
        valid = self._validated(resolved, items)
        if not valid:
            self._snapshot_states[resolved] = SnapshotState.EMPTY
            if self.config.empty_snapshot_policy is EmptySnapshotPolicy.REPLACE:
                self._install(resolved, [])
                return True
            log.debug(
                "Ignoring empty %s snapshot; keeping %d items", resolved, self._size(resolved)
            )
            return False

        self._snapshot_states[resolved] = SnapshotState.POPULATED
        self._install(resolved, valid)
        return True

    def apply_temporal_filter(
        self,
        incidents: Iterable[Incident],
        window_days: int | None = None,
        reference_date: date | None = None,
    ) -> list[Incident]:
        """Filter ``incidents`` by the configured reporting window."""

        return apply_temporal_filter(
            incidents,
            self.config.window_days if window_days is None else window_days,
            reference_date or self._clock(),
            acceptance_year=self.config.acceptance_year,
        )

    def apply_push_event(self, kind: CollectionKind | str, items: Sequence[Entity]) -> None:
        """Merge freshly pushed items in front of the collection, bounded by the cap.

        Pushed items replace existing items with the same id; entries beyond
        ``max_live_items`` are dropped from the local view only.
        """

        resolved = _coerce_kind(kind)
        fresh = _unique_by_id(self._validated(resolved, items))
        if not fresh:
            return
        fresh_ids = {item.id for item in fresh}
        existing = [item for item in self._collections[resolved] if item.id not in fresh_ids]
        self._install(resolved, [*fresh, *existing], cap=self.config.max_live_items)

    def patch_presidential_sentiment(self, updates: Sequence[CandidateUpdate]) -> int:
        """Patch sentiment and mentions by fuzzy name match; returns the number changed."""

        current = self.presidential_candidates
        patched, changed = patch_candidates(current, updates)
        if changed:
            self._install(CollectionKind.PRESIDENTIAL, patched)
        return changed

    def refresh(self) -> None:
        """Re-apply the reporting window, e.g. after the date rolled over."""

        self._install(CollectionKind.INCIDENTS, list(self.incidents))

    def compute_aggregates(self) -> DashboardStats:
        return compute_aggregates(
            self.incidents,
            self.presidential_candidates,
            reference=self._clock(),
            election_date=self.config.election_date,
            recent_window_days=self.config.recent_window_days,
        )

    # -- internals -----------------------------------------------------------------

    def _size(self, kind: CollectionKind) -> int:
        return len(self._collections[kind])

    def _validated(self, kind: CollectionKind, items: Iterable[object]) -> list[Entity]:
        expected = _ENTITY_TYPES[kind]
        valid: list[Entity] = []
        for item in items:
            if not isinstance(item, expected):
                log.warning("Excluding malformed %s item: %r", kind, item)
                continue
            valid.append(item)
        return valid

    def _install(
        self, kind: CollectionKind, items: list[Entity], *, cap: int | None = None
    ) -> None:
        if kind is CollectionKind.INCIDENTS:
            items = list(self.apply_temporal_filter(items))  # type: ignore[arg-type]
        items = _unique_by_id(items)
        if cap is not None:
            items = items[:cap]
        self._collections[kind] = items
        self._stats = self.compute_aggregates()
        log.debug("Installed %d %s", len(items), kind)
        for observer in tuple(self._observers):
            try:
                observer(kind, self._stats)
            except Exception:
                log.exception("Change observer failed for %s", kind)


__all__ = ["ChangeObserver", "DataReconciler", "UnknownCollectionError"]
