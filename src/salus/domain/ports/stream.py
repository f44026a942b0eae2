"""Ports for the live incident stream transport."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from salus.domain.model import Incident

Frame = str | bytes
Listener = Callable[["Incident"], None]
FrameDecoder = Callable[[Frame], "Incident"]
"""Turn a raw frame into an incident; raises ``ValueError`` for malformed frames."""


@runtime_checkable
class StreamConnection(Protocol):
    """An open, receive-only connection. Iteration ends when the peer closes."""

    def __aiter__(self) -> AsyncIterator[Frame]: ...

    async def close(self) -> None: ...


@runtime_checkable
class StreamConnector(Protocol):
    """Open a connection to ``url``; completes once the handshake succeeded."""

    async def __call__(self, url: str) -> StreamConnection: ...


__all__ = ["Frame", "FrameDecoder", "Listener", "StreamConnection", "StreamConnector"]
