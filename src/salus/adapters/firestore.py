"""Firestore-backed remote subscription source and incident sink."""

from __future__ import annotations

import asyncio
from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore

from salus.domain.model import CollectionKind
from salus.domain.ports.subscription import RemoteWriteError

from .translator import (
    candidate_to_document,
    incident_to_document,
    parliamentary_candidate_to_document,
    parse_collection,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from google.cloud.firestore_v1.base_document import DocumentSnapshot
    from google.cloud.firestore_v1.collection import CollectionReference
    from google.cloud.firestore_v1.query import Query

    from salus.config.firestore import FirestoreConfig
    from salus.domain.model import Incident
    from salus.domain.ports.subscription import (
        EmptyCallback,
        ErrorCallback,
        RemoteIncidentSink,
        RemoteSubscriptionSource,
        SnapshotCallback,
        Unsubscribe,
    )
    from salus.domain.seed import SeedData

log = getLogger(__name__)

SEED_PARLIAMENTARY_LIMIT = 50


def _document_data(snapshot: DocumentSnapshot) -> dict[str, Any]:
    data: dict[str, Any] = {"id": snapshot.id, **(snapshot.to_dict() or {})}
    # incidents written from other clients may carry a timestamp instead of a day
    if isinstance(data.get("date"), datetime):
        data["date"] = data["date"].date().isoformat()
    return data


def _noop() -> None:
    return None


class FirestoreSubscriptionSource:
    """Snapshot listeners on the three canonical collections.

    Firestore invokes listeners on its own background thread; snapshots are
    translated there and handed to the event loop with ``call_soon_threadsafe`` so
    callers only ever see callbacks on the loop thread.

    A watch that fails after it started (denied access, unreachable backend) only
    stops its own background thread. Each subscription therefore also reads one
    document in a worker thread; if that read fails the watch is stopped and the
    error goes to ``on_error``.
    """

    def __init__(
        self,
        config: FirestoreConfig,
        *,
        client: firestore.Client | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config = config
        self._client = client or firestore.Client(
            project=config.project_id, database=config.database
        )
        self._loop = loop

    def _collection_name(self, kind: CollectionKind) -> str:
        match kind:
            case CollectionKind.INCIDENTS:
                return self.config.incidents_collection
            case CollectionKind.PRESIDENTIAL:
                return self.config.presidential_collection
            case CollectionKind.PARLIAMENTARY:
                return self.config.parliamentary_collection

    def _query(self, kind: CollectionKind) -> Query | CollectionReference:
        collection = self._client.collection(self._collection_name(kind))
        match kind:
            case CollectionKind.INCIDENTS:
                return collection.order_by("date", direction=firestore.Query.DESCENDING)
            case CollectionKind.PRESIDENTIAL:
                return collection.order_by(
                    "projectedVoteShare", direction=firestore.Query.DESCENDING
                )
            case _:
                return collection

    def subscribe(
        self,
        kind: CollectionKind,
        on_data: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        on_empty: EmptyCallback | None = None,
    ) -> Unsubscribe:
        """Listen to ``kind``; ``on_data`` receives every snapshot, empty ones included."""

        loop = self._loop or asyncio.get_running_loop()

        def deliver(entities: Sequence[Any]) -> None:
            if not entities and on_empty is not None:
                on_empty()
            on_data(entities)

        def report(exc: Exception) -> None:
            log.error("Error listening to %s: %s", kind, exc)
            if on_error is not None:
                on_error(exc)

        def on_snapshot(
            docs: Sequence[DocumentSnapshot], _changes: object, _read_time: object
        ) -> None:
            try:
                entities = parse_collection(kind, [_document_data(doc) for doc in docs])
            except Exception as exc:  # noqa: BLE001
                loop.call_soon_threadsafe(report, exc)
                return
            loop.call_soon_threadsafe(deliver, entities)

        query = self._query(kind)
        try:
            watch = query.on_snapshot(on_snapshot)
        except GoogleAPIError as exc:
            report(exc)
            return _noop

        def check_access() -> None:
            try:
                query.limit(1).get()
            except Exception as exc:  # noqa: BLE001
                watch.unsubscribe()
                loop.call_soon_threadsafe(report, exc)

        loop.run_in_executor(None, check_access)
        log.info("Subscribed to Firestore collection %s", self._collection_name(kind))
        return watch.unsubscribe

    # -- writes --------------------------------------------------------------------

    def add_incident(self, incident: Incident) -> None:
        """Add ``incident`` as a new document; Firestore assigns the document id."""

        try:
            self._client.collection(self.config.incidents_collection).add(
                incident_to_document(incident)
            )
        except GoogleAPIError as exc:
            raise RemoteWriteError(f"Could not store incident {incident.id}: {exc}") from exc

    def seed(self, data: SeedData, *, parliamentary_limit: int = SEED_PARLIAMENTARY_LIMIT) -> int:
        """Upload seed collections once; returns the number of documents written."""

        plan: list[tuple[str, list[dict[str, Any]]]] = [
            (
                self.config.incidents_collection,
                [incident_to_document(i) for i in data.incidents],
            ),
            (
                self.config.presidential_collection,
                [candidate_to_document(c) for c in data.presidential],
            ),
            (
                self.config.parliamentary_collection,
                [
                    parliamentary_candidate_to_document(c)
                    for c in data.parliamentary[:parliamentary_limit]
                ],
            ),
        ]
        written = 0
        try:
            for collection_name, documents in plan:
                log.info("Seeding %d documents into %s", len(documents), collection_name)
                collection = self._client.collection(collection_name)
                for document in documents:
                    collection.add(document)
                    written += 1
        except GoogleAPIError as exc:
            raise RemoteWriteError(f"Seeding stopped after {written} documents: {exc}") from exc
        return written


if TYPE_CHECKING:
    _source_check: RemoteSubscriptionSource = FirestoreSubscriptionSource(
        ...  # type: ignore[arg-type]
    )
    _sink_check: RemoteIncidentSink = FirestoreSubscriptionSource(...)  # type: ignore[arg-type]
