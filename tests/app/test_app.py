from __future__ import annotations

import asyncio

import pytest
from google.api_core.exceptions import PermissionDenied, RetryError, ServiceUnavailable

from salus.app import (
    LiveIncidentRouter,
    RemoteConnectivity,
    build_reconciler,
    connect_remote,
    run_enrichment,
    seed_remote_database,
    watch_dashboard,
)
from salus.config.reconciler import ReconcilerConfig
from salus.domain.model import CollectionKind, IncidentType, SnapshotState
from salus.domain.ports.enrichment import CandidateUpdate, EnrichmentBatch, EnrichmentError
from salus.domain.reconciliation import DataReconciler
from salus.domain.seed import load_seed

from tests.helpers.factories import (
    REFERENCE_DATE,
    fixed_clock,
    incident_frame,
    make_candidate,
    make_incident,
)
from tests.helpers.remote import FakeEnrichmentFetcher, FakeRemoteSource, FakeSink
from tests.helpers.stream import FakeConnector, make_manager, settle


def _seeded() -> DataReconciler:
    return build_reconciler(config=ReconcilerConfig(), clock=fixed_clock())


def test_build_reconciler_installs_seed_collections() -> None:
    reconciler = _seeded()

    assert len(reconciler.incidents) == 6
    assert len(reconciler.presidential_candidates) == 4
    assert len(reconciler.parliamentary_candidates) == len(load_seed(REFERENCE_DATE).parliamentary)
    assert reconciler.snapshot_state(CollectionKind.INCIDENTS) is SnapshotState.UNKNOWN


def test_router_pushes_locally_without_remote() -> None:
    reconciler = _seeded()
    router = LiveIncidentRouter(reconciler, sink=FakeSink())

    router(make_incident("live-1"))

    assert reconciler.incidents[0].id == "live-1"


def test_router_writes_remotely_when_connected() -> None:
    async def scenario() -> tuple[DataReconciler, FakeSink]:
        reconciler = _seeded()
        sink = FakeSink()
        router = LiveIncidentRouter(
            reconciler, sink=sink, connectivity=RemoteConnectivity(connected=True)
        )
        router(make_incident("live-1"))
        await router.drain()
        return reconciler, sink

    reconciler, sink = asyncio.run(scenario())

    assert [i.id for i in sink.written] == ["live-1"]
    assert "live-1" not in {i.id for i in reconciler.incidents}


def test_router_falls_back_to_local_when_write_fails() -> None:
    async def scenario() -> DataReconciler:
        reconciler = _seeded()
        router = LiveIncidentRouter(
            reconciler, sink=FakeSink(fail=True), connectivity=RemoteConnectivity(connected=True)
        )
        router(make_incident("live-1"))
        await router.drain()
        return reconciler

    reconciler = asyncio.run(scenario())

    assert reconciler.incidents[0].id == "live-1"


def test_router_keeps_incident_locally_when_write_times_out() -> None:
    async def scenario() -> DataReconciler:
        reconciler = _seeded()
        router = LiveIncidentRouter(
            reconciler,
            sink=FakeSink(error=RetryError("deadline exceeded", None)),
            connectivity=RemoteConnectivity(connected=True),
        )
        router(make_incident("live-1"))
        await router.drain()
        return reconciler

    reconciler = asyncio.run(scenario())

    assert reconciler.incidents[0].id == "live-1"


def test_remote_snapshots_feed_reconciler_and_mark_connected() -> None:
    reconciler = _seeded()
    source = FakeRemoteSource()
    connectivity = RemoteConnectivity()
    unsubscribers = connect_remote(reconciler, source, connectivity)

    source.push(CollectionKind.PRESIDENTIAL, [make_candidate("r1", sentiment=30, share=50)])
    assert not connectivity.connected
    source.push(CollectionKind.INCIDENTS, [])
    assert not connectivity.connected
    assert len(reconciler.incidents) == 6

    source.push(CollectionKind.INCIDENTS, [make_incident("remote-1")])

    assert connectivity.connected
    assert [i.id for i in reconciler.incidents] == ["remote-1"]
    assert [c.id for c in reconciler.presidential_candidates] == ["r1"]
    assert len(unsubscribers) == 3


def test_permission_denied_degrades_silently() -> None:
    reconciler = _seeded()
    source = FakeRemoteSource()
    connectivity = RemoteConnectivity(connected=True)
    connect_remote(reconciler, source, connectivity)

    source.error(CollectionKind.INCIDENTS, PermissionDenied("Missing or insufficient permissions."))

    assert not connectivity.connected
    assert connectivity.permission_denied
    assert connectivity.last_error is None
    assert len(reconciler.incidents) == 6


def test_other_remote_errors_are_recorded() -> None:
    reconciler = _seeded()
    source = FakeRemoteSource()
    connectivity = RemoteConnectivity()
    connect_remote(reconciler, source, connectivity)
    error = ServiceUnavailable("backend unavailable")

    source.error(CollectionKind.PARLIAMENTARY, error)

    assert connectivity.last_error is error
    assert not connectivity.permission_denied


def test_run_enrichment_merges_incidents_and_patches_candidates() -> None:
    reconciler = _seeded()
    fetcher = FakeEnrichmentFetcher(
        batch=EnrichmentBatch(
            incidents=(make_incident("intel-1", type=IncidentType.VIOLENCE, fatalities=2),),
            candidate_updates=(CandidateUpdate(name="Bobi", sentiment_score=82),),
        )
    )

    result = asyncio.run(run_enrichment(reconciler, fetcher))

    assert result.incidents == 1
    assert result.candidates_patched == 1
    assert reconciler.incidents[0].id == "intel-1"
    bobi = next(c for c in reconciler.presidential_candidates if c.id == "c2")
    assert bobi.sentiment_score == 82


def test_run_enrichment_propagates_errors() -> None:
    reconciler = _seeded()
    fetcher = FakeEnrichmentFetcher(error=EnrichmentError("endpoint down"))

    with pytest.raises(EnrichmentError, match="endpoint down"):
        asyncio.run(run_enrichment(reconciler, fetcher))

    assert len(reconciler.incidents) == 6


def test_watch_dashboard_merges_live_frames_offline() -> None:
    changes: list[CollectionKind] = []

    async def scenario() -> tuple[DataReconciler, FakeConnector, int]:
        reconciler = _seeded()
        connector = FakeConnector(frames=[incident_frame("live-1"), "garbage"])
        result = await watch_dashboard(
            duration=0.05,
            offline=True,
            reconciler=reconciler,
            manager=make_manager(connector),
            on_change=lambda kind, _stats: changes.append(kind),
        )
        return reconciler, connector, result.incidents

    reconciler, connector, incidents = asyncio.run(scenario())

    assert reconciler.incidents[0].id == "live-1"
    assert incidents == 7
    assert connector.connections[0].closed
    assert changes == [CollectionKind.INCIDENTS]


def test_watch_dashboard_routes_through_connected_remote() -> None:
    async def scenario() -> tuple[DataReconciler, FakeSink, bool]:
        reconciler = _seeded()
        source = FakeRemoteSource()
        sink = FakeSink()
        connector = FakeConnector()
        manager = make_manager(connector)

        async def drive() -> None:
            await settle()
            source.push(CollectionKind.INCIDENTS, [make_incident("remote-1")])
            await settle()
            connector.latest.send(incident_frame("live-1"))
            await settle()

        driver = asyncio.get_running_loop().create_task(drive())
        result = await watch_dashboard(
            duration=0.1,
            reconciler=reconciler,
            manager=manager,
            remote_source=source,
            sink=sink,
        )
        await driver
        return reconciler, sink, result.connected

    reconciler, sink, connected = asyncio.run(scenario())

    assert connected
    assert [i.id for i in sink.written] == ["live-1"]
    assert [i.id for i in reconciler.incidents] == ["remote-1"]


def test_seed_remote_database_uses_limit() -> None:
    class RecordingSource:
        def __init__(self) -> None:
            self.calls: list[int] = []

        def seed(self, data: object, *, parliamentary_limit: int) -> int:
            self.calls.append(parliamentary_limit)
            return 42

    source = RecordingSource()

    written = seed_remote_database(
        source=source,  # type: ignore[arg-type]
        reference=REFERENCE_DATE,
        parliamentary_limit=10,
    )

    assert written == 42
    assert source.calls == [10]
