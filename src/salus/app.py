"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from google.api_core.exceptions import PermissionDenied

from salus.adapters.enrichment import HttpEnrichmentFetcher
from salus.adapters.firestore import SEED_PARLIAMENTARY_LIMIT, FirestoreSubscriptionSource
from salus.adapters.translator import make_frame_decoder
from salus.adapters.websocket import connect_websocket
from salus.config import (
    firestore_enabled,
    get_enrichment_config,
    get_firestore_config,
    get_reconciler_config,
    get_stream_config,
)
from salus.domain.model import CollectionKind
from salus.domain.reconciliation import DataReconciler
from salus.domain.seed import load_seed
from salus.domain.stream import StreamSubscriptionManager
from salus.domain.time_windows import today

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from salus.config import ReconcilerConfig, StreamConfig
    from salus.domain.model import Entity, Incident
    from salus.domain.ports.enrichment import EnrichmentFetcher
    from salus.domain.ports.stream import StreamConnector
    from salus.domain.ports.subscription import (
        RemoteIncidentSink,
        RemoteSubscriptionSource,
        SnapshotCallback,
        Unsubscribe,
    )
    from salus.domain.reconciliation import ChangeObserver
    from salus.domain.seed import SeedData
    from salus.domain.time_windows import Clock


log = getLogger(__name__)


def build_reconciler(
    *,
    config: ReconcilerConfig | None = None,
    clock: Clock = today,
    seed: SeedData | None = None,
) -> DataReconciler:
    """Create a reconciler pre-populated with the bundled seed collections."""

    reconciler = DataReconciler(config or get_reconciler_config(), clock=clock)
    data = seed or load_seed(clock())
    reconciler.apply_seed(CollectionKind.INCIDENTS, data.incidents)
    reconciler.apply_seed(CollectionKind.PRESIDENTIAL, data.presidential)
    reconciler.apply_seed(CollectionKind.PARLIAMENTARY, data.parliamentary)
    return reconciler


def build_stream_manager(
    config: StreamConfig | None = None,
    *,
    connector: StreamConnector = connect_websocket,
    clock: Clock = today,
) -> StreamSubscriptionManager:
    effective = config or get_stream_config()
    return StreamSubscriptionManager(
        url=effective.url,
        connector=connector,
        decoder=make_frame_decoder(clock),
        reconnect=effective.reconnect,
    )


@dataclass(slots=True)
class RemoteConnectivity:
    """Whether the remote store currently feeds the canonical collections."""

    connected: bool = False
    permission_denied: bool = False
    last_error: Exception | None = None


class LiveIncidentRouter:
    """Stream listener deciding where a live incident goes.

    With a connected remote store the incident is written there and comes back
    through the incident snapshot; otherwise, or when the write fails, it is
    pushed straight into the local collection.
    """

    def __init__(
        self,
        reconciler: DataReconciler,
        *,
        sink: RemoteIncidentSink | None = None,
        connectivity: RemoteConnectivity | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.sink = sink
        self.connectivity = connectivity or RemoteConnectivity()
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, incident: Incident) -> None:
        if self.sink is None or not self.connectivity.connected:
            self._push_locally(incident)
            return
        task = asyncio.get_running_loop().create_task(self._write_remote(incident))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for in-flight remote writes."""

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _write_remote(self, incident: Incident) -> None:
        assert self.sink is not None
        try:
            # the Firestore client blocks; keep it off the loop thread
            await asyncio.to_thread(self.sink.add_incident, incident)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Remote write failed for %s, keeping it locally: %s: %s",
                incident.id,
                type(exc).__name__,
                exc,
            )
            self._push_locally(incident)

    def _push_locally(self, incident: Incident) -> None:
        self.reconciler.apply_push_event(CollectionKind.INCIDENTS, [incident])


def connect_remote(
    reconciler: DataReconciler,
    source: RemoteSubscriptionSource,
    connectivity: RemoteConnectivity,
) -> list[Unsubscribe]:
    """Subscribe every canonical collection to ``source``."""

    def on_data_for(kind: CollectionKind) -> SnapshotCallback:
        def on_data(items: Sequence[Entity]) -> None:
            if kind is CollectionKind.INCIDENTS and items and not connectivity.connected:
                connectivity.connected = True
                connectivity.last_error = None
                log.info("Remote store connected")
            reconciler.apply_remote_snapshot(kind, items)

        return on_data

    def on_error(exc: Exception) -> None:
        connectivity.connected = False
        if isinstance(exc, PermissionDenied):
            connectivity.permission_denied = True
            log.info("Remote store denied access; staying in local mode")
            return
        connectivity.last_error = exc
        log.warning("Remote store error: %s", exc)

    return [source.subscribe(kind, on_data_for(kind), on_error) for kind in CollectionKind]


@dataclass(frozen=True, slots=True)
class WatchResult:
    incidents: int
    connected: bool
    last_error: Exception | None


async def watch_dashboard(
    *,
    duration: float | None = None,
    offline: bool = False,
    reconciler: DataReconciler | None = None,
    manager: StreamSubscriptionManager | None = None,
    remote_source: RemoteSubscriptionSource | None = None,
    sink: RemoteIncidentSink | None = None,
    on_change: ChangeObserver | None = None,
) -> WatchResult:
    """Run the live dashboard until ``duration`` elapses (forever when ``None``).

    ``offline`` keeps the dashboard in local mode even when a remote store is
    configured; the live stream is consumed either way. The stream manager is
    closed on exit.
    """

    effective_reconciler = reconciler or build_reconciler()
    effective_manager = manager or build_stream_manager()
    if not offline and remote_source is None and firestore_enabled():
        firestore = FirestoreSubscriptionSource(get_firestore_config())
        remote_source = firestore
        sink = sink or firestore

    remove_observer = effective_reconciler.on_change(on_change) if on_change else None
    connectivity = RemoteConnectivity()
    unsubscribers: list[Unsubscribe] = []
    if not offline and remote_source is not None:
        unsubscribers = connect_remote(effective_reconciler, remote_source, connectivity)

    router = LiveIncidentRouter(
        effective_reconciler,
        sink=None if offline else sink,
        connectivity=connectivity,
    )
    log.info("Starting live dashboard: duration=%s, offline=%s", duration, offline)
    effective_manager.subscribe(router)
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        effective_manager.unsubscribe(router)
        await effective_manager.aclose()
        for unsubscribe in unsubscribers:
            unsubscribe()
        await router.drain()
        if remove_observer is not None:
            remove_observer()

    log.info(
        "Stopped live dashboard: incidents=%s, remote_connected=%s",
        len(effective_reconciler.incidents),
        connectivity.connected,
    )
    return WatchResult(
        incidents=len(effective_reconciler.incidents),
        connected=connectivity.connected,
        last_error=connectivity.last_error,
    )


@dataclass(frozen=True, slots=True)
class EnrichmentResult:
    incidents: int
    candidates_patched: int


async def run_enrichment(
    reconciler: DataReconciler,
    fetcher: EnrichmentFetcher | None = None,
) -> EnrichmentResult:
    """Fetch one enrichment batch and merge it; ``EnrichmentError`` propagates."""

    effective_fetcher = fetcher or HttpEnrichmentFetcher(get_enrichment_config())
    batch = await effective_fetcher()
    reconciler.apply_push_event(CollectionKind.INCIDENTS, batch.incidents)
    patched = reconciler.patch_presidential_sentiment(batch.candidate_updates)
    log.info(
        "Merged enrichment batch: incidents=%s, candidates_patched=%s",
        len(batch.incidents),
        patched,
    )
    return EnrichmentResult(incidents=len(batch.incidents), candidates_patched=patched)


def seed_remote_database(
    *,
    source: FirestoreSubscriptionSource | None = None,
    reference: date | None = None,
    parliamentary_limit: int = SEED_PARLIAMENTARY_LIMIT,
) -> int:
    """Upload the bundled seed collections to the remote store."""

    effective_source = source or FirestoreSubscriptionSource(get_firestore_config())
    written = effective_source.seed(
        load_seed(reference or today()), parliamentary_limit=parliamentary_limit
    )
    log.info("Seeded remote store with %s documents", written)
    return written


__all__ = [
    "EnrichmentResult",
    "LiveIncidentRouter",
    "RemoteConnectivity",
    "WatchResult",
    "build_reconciler",
    "build_stream_manager",
    "connect_remote",
    "run_enrichment",
    "seed_remote_database",
    "watch_dashboard",
]
