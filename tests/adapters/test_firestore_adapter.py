from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest
from google.api_core.exceptions import PermissionDenied, RetryError, ServiceUnavailable
from google.cloud import firestore

from salus.adapters.firestore import FirestoreSubscriptionSource
from salus.config import FirestoreConfig
from salus.domain.model import CollectionKind, Incident
from salus.domain.ports.subscription import RemoteWriteError
from salus.domain.seed import load_seed

from tests.helpers.factories import REFERENCE_DATE, make_incident
from tests.helpers.stream import settle

SnapshotListener = Callable[[list[Any], list[Any], object], None]


class FakeDocument:
    def __init__(self, doc_id: str, data: dict[str, Any]) -> None:
        self.id = doc_id
        self._data = data

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class FakeWatch:
    def __init__(self) -> None:
        self.unsubscribed = False

    def unsubscribe(self) -> None:
        self.unsubscribed = True


class FakeCollection:
    def __init__(
        self,
        name: str,
        *,
        write_error: Exception | None = None,
        read_error: Exception | None = None,
    ) -> None:
        self.name = name
        self.order: list[tuple[str, str]] = []
        self.limits: list[int] = []
        self.listener: SnapshotListener | None = None
        self.watch = FakeWatch()
        self.added: list[dict[str, Any]] = []
        self.write_error = write_error
        self.read_error = read_error

    def order_by(self, field_path: str, direction: str) -> FakeCollection:
        self.order.append((field_path, direction))
        return self

    def limit(self, count: int) -> FakeCollection:
        self.limits.append(count)
        return self

    def get(self) -> list[FakeDocument]:
        if self.read_error is not None:
            raise self.read_error
        return []

    def on_snapshot(self, callback: SnapshotListener) -> FakeWatch:
        self.listener = callback
        return self.watch

    def add(self, document: dict[str, Any]) -> tuple[None, None]:
        if self.write_error is not None:
            raise self.write_error
        self.added.append(document)
        return None, None


class FakeClient:
    def __init__(
        self,
        *,
        write_error: Exception | None = None,
        read_error: Exception | None = None,
    ) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.write_error = write_error
        self.read_error = read_error

    def collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(
                name, write_error=self.write_error, read_error=self.read_error
            )
        return self.collections[name]


CONFIG = FirestoreConfig(project_id="salus-test")


def _source(client: FakeClient) -> FirestoreSubscriptionSource:
    return FirestoreSubscriptionSource(CONFIG, client=client)  # type: ignore[arg-type]


def _incident_doc(doc_id: str, **extra: Any) -> FakeDocument:
    return FakeDocument(
        doc_id, {"date": REFERENCE_DATE.isoformat(), "location": "Gulu", "type": "Rally", **extra}
    )


def test_subscriptions_use_collection_specific_ordering() -> None:
    async def scenario() -> FakeClient:
        client = FakeClient()
        source = _source(client)
        for kind in CollectionKind:
            source.subscribe(kind, lambda _items: None)
        return client

    client = asyncio.run(scenario())

    assert client.collections["incidents"].order == [("date", firestore.Query.DESCENDING)]
    assert client.collections["presidential_candidates"].order == [
        ("projectedVoteShare", firestore.Query.DESCENDING)
    ]
    assert client.collections["parliamentary_candidates"].order == []


def test_snapshot_from_background_thread_is_delivered_on_loop() -> None:
    async def scenario() -> tuple[list[list[Incident]], int, bool]:
        client = FakeClient()
        loop_thread: list[int] = []
        received: list[list[Incident]] = []
        empties: list[bool] = []

        def on_data(items: Any) -> None:
            loop_thread.append(threading.get_ident())
            received.append(list(items))

        _source(client).subscribe(
            CollectionKind.INCIDENTS, on_data, on_empty=lambda: empties.append(True)
        )
        listener = client.collections["incidents"].listener
        assert listener is not None
        docs = [
            _incident_doc("a"),
            _incident_doc("b", date=datetime(2025, 11, 19, 14, 30, tzinfo=UTC)),
            FakeDocument("broken", {"type": "Rally"}),
        ]
        await asyncio.to_thread(listener, docs, [], None)
        await settle()
        return received, len(empties), loop_thread[0] == threading.get_ident()

    received, empties, on_loop_thread = asyncio.run(scenario())

    assert [[i.id for i in batch] for batch in received] == [["a", "b"]]
    assert received[0][1].date.isoformat() == "2025-11-19"
    assert empties == 0
    assert on_loop_thread


def test_empty_snapshot_triggers_empty_callback_and_data() -> None:
    async def scenario() -> tuple[list[int], int]:
        client = FakeClient()
        sizes: list[int] = []
        empties: list[bool] = []
        _source(client).subscribe(
            CollectionKind.PRESIDENTIAL,
            lambda items: sizes.append(len(items)),
            on_empty=lambda: empties.append(True),
        )
        listener = client.collections["presidential_candidates"].listener
        assert listener is not None
        await asyncio.to_thread(listener, [], [], None)
        await settle()
        return sizes, len(empties)

    sizes, empties = asyncio.run(scenario())

    assert sizes == [0]
    assert empties == 1


def test_unsubscribe_stops_the_watch() -> None:
    async def scenario() -> FakeClient:
        client = FakeClient()
        unsubscribe = _source(client).subscribe(CollectionKind.INCIDENTS, lambda _items: None)
        unsubscribe()
        return client

    client = asyncio.run(scenario())

    assert client.collections["incidents"].watch.unsubscribed


def test_listen_failure_is_reported_through_error_callback() -> None:
    class RefusingCollection(FakeCollection):
        def on_snapshot(self, callback: SnapshotListener) -> FakeWatch:
            raise ServiceUnavailable("backend unavailable")

    async def scenario() -> list[Exception]:
        client = FakeClient()
        client.collections["parliamentary_candidates"] = RefusingCollection(
            "parliamentary_candidates"
        )
        errors: list[Exception] = []
        unsubscribe = _source(client).subscribe(
            CollectionKind.PARLIAMENTARY, lambda _items: None, on_error=errors.append
        )
        unsubscribe()
        return errors

    errors = asyncio.run(scenario())

    assert len(errors) == 1
    assert isinstance(errors[0], ServiceUnavailable)


def test_denied_access_check_reports_error_and_stops_watch() -> None:
    async def scenario() -> tuple[FakeClient, list[Exception]]:
        client = FakeClient(read_error=PermissionDenied("Missing or insufficient permissions."))
        errors: list[Exception] = []
        reported = asyncio.Event()

        def on_error(exc: Exception) -> None:
            errors.append(exc)
            reported.set()

        _source(client).subscribe(CollectionKind.INCIDENTS, lambda _items: None, on_error=on_error)
        await asyncio.wait_for(reported.wait(), timeout=5)
        return client, errors

    client, errors = asyncio.run(scenario())

    assert len(errors) == 1
    assert isinstance(errors[0], PermissionDenied)
    assert client.collections["incidents"].limits == [1]
    assert client.collections["incidents"].watch.unsubscribed


def test_successful_access_check_keeps_watch_running() -> None:
    async def scenario() -> tuple[FakeClient, list[Exception]]:
        client = FakeClient()
        errors: list[Exception] = []
        _source(client).subscribe(
            CollectionKind.PRESIDENTIAL, lambda _items: None, on_error=errors.append
        )
        await asyncio.sleep(0.05)
        await settle()
        return client, errors

    client, errors = asyncio.run(scenario())

    assert errors == []
    assert client.collections["presidential_candidates"].limits == [1]
    assert not client.collections["presidential_candidates"].watch.unsubscribed


def test_add_incident_writes_document() -> None:
    client = FakeClient()

    _source(client).add_incident(make_incident("live-9"))

    (document,) = client.collections["incidents"].added
    assert "id" not in document
    assert document["location"] == "Kampala Central"


@pytest.mark.parametrize(
    "error",
    [
        PermissionDenied("Missing or insufficient permissions."),
        RetryError("deadline exceeded", None),
    ],
)
def test_add_incident_failure_raises_remote_write_error(error: Exception) -> None:
    client = FakeClient(write_error=error)

    with pytest.raises(RemoteWriteError, match="live-9") as excinfo:
        _source(client).add_incident(make_incident("live-9"))

    assert excinfo.value.__cause__ is error


def test_seed_uploads_collections_with_parliamentary_limit() -> None:
    client = FakeClient()
    data = load_seed(REFERENCE_DATE)

    written = _source(client).seed(data, parliamentary_limit=5)

    assert len(client.collections["incidents"].added) == 6
    assert len(client.collections["presidential_candidates"].added) == 4
    assert len(client.collections["parliamentary_candidates"].added) == 5
    assert written == 15
