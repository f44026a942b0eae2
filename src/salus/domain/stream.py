"""Reference-counted live incident stream over a single connection.

The manager owns zero or one connection to the configured endpoint and fans each
decoded incident out to every registered listener. The connection exists only
while at least one listener is registered: the first ``subscribe`` opens it, the
last ``unsubscribe`` closes it and cancels any pending reconnect. Drops and
refused handshakes are never surfaced to listeners; they arm a single reconnect
timer instead.

All methods must be called from the event loop thread.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from salus.config.stream import ReconnectPolicy

if TYPE_CHECKING:
    from salus.domain.ports.stream import (
        Frame,
        FrameDecoder,
        Listener,
        StreamConnection,
        StreamConnector,
    )

log = getLogger(__name__)


class ConnectionState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECT_PENDING = "reconnect_pending"


class StreamSubscriptionManager:
    """Multiplex one receive-only stream connection to many listeners."""

    def __init__(
        self,
        *,
        url: str,
        connector: StreamConnector,
        decoder: FrameDecoder,
        reconnect: ReconnectPolicy | None = None,
    ) -> None:
        self.url = url
        self._connector = connector
        self._decoder = decoder
        self._reconnect = reconnect or ReconnectPolicy()
        # dict keys give an insertion-ordered set keyed by listener identity
        self._listeners: dict[Listener, None] = {}
        self._state = ConnectionState.IDLE
        self._task: asyncio.Task[None] | None = None
        # cancelled connection tasks that have not finished unwinding yet
        self._retired: set[asyncio.Task[None]] = set()
        self._connection: StreamConnection | None = None
        self._reconnect_timer: asyncio.TimerHandle | None = None
        self._failed_attempts = 0
        # bumped on every connect and teardown so stale tasks can tell they lost
        self._generation = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_timer is not None

    def subscribe(self, listener: Listener) -> None:
        """Register ``listener`` and make sure a connection is (being) established."""

        self._listeners[listener] = None
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            return
        self._cancel_reconnect()
        self._connect()

    def unsubscribe(self, listener: Listener) -> None:
        """Remove ``listener``; tears the connection down once nobody is listening."""

        self._listeners.pop(listener, None)
        if self._listeners:
            return
        if self._state is not ConnectionState.IDLE:
            log.info("Stream: no listeners remaining, closing connection")
        self._teardown()

    async def aclose(self) -> None:
        """Drop every listener and wait for the connection task to finish."""

        self._listeners.clear()
        self._teardown()
        if self._retired:
            await asyncio.gather(*self._retired, return_exceptions=True)

    # -- connection lifecycle ------------------------------------------------------

    def _connect(self) -> None:
        self._generation += 1
        self._state = ConnectionState.CONNECTING
        log.info("Stream: connecting to %s", self.url)
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(self._generation), name="salus-stream")

    def _teardown(self) -> None:
        self._cancel_reconnect()
        self._generation += 1
        task, self._task = self._task, None
        self._connection = None
        self._state = ConnectionState.IDLE
        self._failed_attempts = 0
        if task is not None and not task.done():
            task.cancel()
            self._retired.add(task)
            task.add_done_callback(self._retired.discard)

    async def _run(self, generation: int) -> None:
        connection: StreamConnection | None = None
        try:
            connection = await self._connector(self.url)
            if generation != self._generation:
                return
            self._connection = connection
            self._state = ConnectionState.OPEN
            self._failed_attempts = 0
            log.info("Stream: connected to %s", self.url)
            async for frame in connection:
                self._dispatch(frame)
            log.info("Stream: disconnected by peer")
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            log.warning("Stream: connection error (%s: %s)", type(exc).__name__, exc)
        finally:
            if connection is not None:
                await self._close_quietly(connection)
        self._on_closed(generation)

    async def _close_quietly(self, connection: StreamConnection) -> None:
        try:
            await connection.close()
        except Exception as exc:  # noqa: BLE001
            log.debug("Stream: error while closing connection: %s", exc)

    def _on_closed(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._task = None
        self._connection = None
        if not self._listeners:
            self._state = ConnectionState.IDLE
            return
        self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        self._state = ConnectionState.RECONNECT_PENDING
        if self._reconnect_timer is not None:
            return
        delay = self._reconnect.delay_for(self._failed_attempts)
        self._failed_attempts += 1
        log.info("Stream: reconnecting in %.1fs", delay)
        loop = asyncio.get_running_loop()
        self._reconnect_timer = loop.call_later(delay, self._fire_reconnect)

    def _cancel_reconnect(self) -> None:
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

    def _fire_reconnect(self) -> None:
        self._reconnect_timer = None
        if not self._listeners:
            self._state = ConnectionState.IDLE
            return
        log.info("Stream: attempting reconnection")
        self._connect()

    # -- delivery ------------------------------------------------------------------

    def _dispatch(self, frame: Frame) -> None:
        try:
            incident = self._decoder(frame)
        except ValueError as exc:
            log.warning("Stream: dropping malformed frame: %s", exc)
            return
        for listener in tuple(self._listeners):
            # a listener may unsubscribe another one mid-delivery
            if listener not in self._listeners:
                continue
            try:
                listener(incident)
            except Exception:
                log.exception("Stream: listener %r failed", listener)


__all__ = ["ConnectionState", "StreamSubscriptionManager"]
