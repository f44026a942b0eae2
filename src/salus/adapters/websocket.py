"""WebSocket transport for the live incident stream."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from websockets.asyncio.client import connect

if TYPE_CHECKING:
    from salus.domain.ports.stream import StreamConnection, StreamConnector

log = getLogger(__name__)

# Incident frames are small; anything larger is not a frame we understand.
MAX_FRAME_BYTES = 1 << 20


async def connect_websocket(url: str) -> StreamConnection:
    """Open a receive-only WebSocket; iteration ends when the server closes."""

    connection = await connect(url, max_size=MAX_FRAME_BYTES, open_timeout=None)
    log.debug("WebSocket handshake with %s complete", url)
    return connection


if TYPE_CHECKING:
    _connector_check: StreamConnector = connect_websocket
