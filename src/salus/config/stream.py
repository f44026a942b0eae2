"""Live incident stream configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var

DEFAULT_STREAM_URL = "wss://stream.salusinternational.com/v1/incidents"
DEFAULT_RECONNECT_DELAY_SECONDS = 5.0
DEFAULT_RECONNECT_MAX_DELAY_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ReconnectPolicy:
    """Delay schedule between reconnect attempts.

    ``backoff`` of 1.0 keeps the interval fixed; larger values multiply the delay
    after every consecutive failed attempt, up to ``max_delay_seconds``.
    """

    delay_seconds: float = DEFAULT_RECONNECT_DELAY_SECONDS
    backoff: float = 1.0
    max_delay_seconds: float = DEFAULT_RECONNECT_MAX_DELAY_SECONDS

    def delay_for(self, attempt: int) -> float:
        """Return the delay before reconnect ``attempt`` (0-based)."""

        ceiling = max(self.delay_seconds, self.max_delay_seconds)
        delay = self.delay_seconds
        if self.backoff <= 1.0 or delay <= 0.0:
            return delay
        for _ in range(attempt):
            delay *= self.backoff
            if delay >= ceiling:
                return ceiling
        return delay


@dataclass(frozen=True, slots=True)
class StreamConfig:
    url: str = DEFAULT_STREAM_URL
    reconnect: ReconnectPolicy = ReconnectPolicy()


def get_stream_config() -> StreamConfig:
    return StreamConfig(
        url=optional_env_var("SALUS_STREAM_URL") or DEFAULT_STREAM_URL,
        reconnect=ReconnectPolicy(
            delay_seconds=env_float(
                "SALUS_RECONNECT_DELAY_SECONDS", DEFAULT_RECONNECT_DELAY_SECONDS, minimum=0.0
            ),
            backoff=env_float("SALUS_RECONNECT_BACKOFF", 1.0, minimum=1.0),
            max_delay_seconds=env_float(
                "SALUS_RECONNECT_MAX_DELAY_SECONDS",
                DEFAULT_RECONNECT_MAX_DELAY_SECONDS,
                minimum=0.0,
            ),
        ),
    )
