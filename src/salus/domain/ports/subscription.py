"""Ports for the remote document store feeding canonical collections."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from salus.domain.model import CollectionKind, Entity, Incident

SnapshotCallback = Callable[[Sequence["Entity"]], None]
ErrorCallback = Callable[[Exception], None]
EmptyCallback = Callable[[], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class RemoteSubscriptionSource(Protocol):
    """Push-style source delivering a full snapshot of a collection on every change."""

    def subscribe(
        self,
        kind: CollectionKind,
        on_data: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        on_empty: EmptyCallback | None = None,
    ) -> Unsubscribe: ...


@runtime_checkable
class RemoteIncidentSink(Protocol):
    """Write path for incidents that should round-trip through the remote store."""

    def add_incident(self, incident: Incident) -> None: ...


class RemoteWriteError(RuntimeError):
    """Raised when the remote store rejects a write."""


__all__ = [
    "EmptyCallback",
    "ErrorCallback",
    "RemoteIncidentSink",
    "RemoteSubscriptionSource",
    "RemoteWriteError",
    "SnapshotCallback",
    "Unsubscribe",
]
