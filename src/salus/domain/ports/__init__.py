"""Domain port definitions for adapters."""

from __future__ import annotations

from .enrichment import CandidateUpdate, EnrichmentBatch, EnrichmentError, EnrichmentFetcher
from .stream import Frame, FrameDecoder, Listener, StreamConnection, StreamConnector
from .subscription import (
    RemoteIncidentSink,
    RemoteSubscriptionSource,
    RemoteWriteError,
    SnapshotCallback,
    Unsubscribe,
)

__all__ = [
    "CandidateUpdate",
    "EnrichmentBatch",
    "EnrichmentError",
    "EnrichmentFetcher",
    "Frame",
    "FrameDecoder",
    "Listener",
    "RemoteIncidentSink",
    "RemoteSubscriptionSource",
    "RemoteWriteError",
    "SnapshotCallback",
    "StreamConnection",
    "StreamConnector",
    "Unsubscribe",
]
