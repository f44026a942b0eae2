"""Fakes for the remote document store and the enrichment endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from salus.domain.ports.enrichment import EnrichmentBatch
from salus.domain.ports.subscription import RemoteWriteError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from salus.domain.model import CollectionKind, Entity, Incident
    from salus.domain.ports.subscription import (
        EmptyCallback,
        ErrorCallback,
        SnapshotCallback,
        Unsubscribe,
    )


@dataclass
class _Subscription:
    on_data: SnapshotCallback
    on_error: ErrorCallback | None
    on_empty: EmptyCallback | None
    active: bool = True


class FakeRemoteSource:
    """Synchronous subscription source driven from tests via ``push`` and ``error``."""

    def __init__(self) -> None:
        self.subscriptions: dict[CollectionKind, _Subscription] = {}

    def subscribe(
        self,
        kind: CollectionKind,
        on_data: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        on_empty: EmptyCallback | None = None,
    ) -> Unsubscribe:
        subscription = _Subscription(on_data, on_error, on_empty)
        self.subscriptions[kind] = subscription

        def unsubscribe() -> None:
            subscription.active = False

        return unsubscribe

    def push(self, kind: CollectionKind, items: Sequence[Entity]) -> None:
        subscription = self.subscriptions[kind]
        if subscription.active:
            subscription.on_data(items)

    def error(self, kind: CollectionKind, exc: Exception) -> None:
        subscription = self.subscriptions[kind]
        if subscription.active and subscription.on_error is not None:
            subscription.on_error(exc)


@dataclass
class FakeSink:
    fail: bool = False
    error: Exception | None = None
    written: list[Incident] = field(default_factory=list)

    def add_incident(self, incident: Incident) -> None:
        if self.error is not None:
            raise self.error
        if self.fail:
            raise RemoteWriteError("write rejected")
        self.written.append(incident)


@dataclass
class FakeEnrichmentFetcher:
    batch: EnrichmentBatch = field(default_factory=EnrichmentBatch)
    error: Exception | None = None
    calls: int = 0

    async def __call__(self) -> EnrichmentBatch:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.batch
