"""HTTP enrichment fetcher returning new incidents and candidate sentiment updates."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from salus.domain.ports.enrichment import EnrichmentError
from salus.domain.time_windows import today

from .http_resilience import ResilientClient
from .translator import parse_enrichment_response

if TYPE_CHECKING:
    from salus.config.enrichment import EnrichmentConfig
    from salus.domain.ports.enrichment import EnrichmentBatch, EnrichmentFetcher
    from salus.domain.time_windows import Clock

log = getLogger(__name__)

ClientFactory = Callable[["EnrichmentConfig"], ResilientClient]


def _default_client_factory(config: EnrichmentConfig) -> ResilientClient:
    return ResilientClient(config.resilience)


@dataclass(slots=True)
class HttpEnrichmentFetcher:
    """POST an enrichment request and translate the reply.

    Any transport, status or payload failure surfaces as ``EnrichmentError``;
    nothing is retried unless the resilience config asks for it.
    """

    config: EnrichmentConfig
    client_factory: ClientFactory = field(default=_default_client_factory)
    clock: Clock = field(default=today)

    async def __call__(self) -> EnrichmentBatch:
        received_on = self.clock()
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        body = {
            "asOf": received_on.isoformat(),
            "include": ["incidents", "candidateUpdates"],
        }

        log.info("Requesting enrichment from %s", self.config.url)
        try:
            async with self.client_factory(self.config) as client:
                response = await client.post(self.config.url, json=body, headers=headers)
                response.raise_for_status()
                text = response.text
        except httpx.HTTPError as exc:
            raise EnrichmentError(f"Enrichment request failed: {exc}") from exc

        try:
            batch = parse_enrichment_response(text, received_on=received_on)
        except ValueError as exc:
            raise EnrichmentError(f"Enrichment response unusable: {exc}") from exc

        log.info(
            "Enrichment returned %d incidents and %d candidate updates",
            len(batch.incidents),
            len(batch.candidate_updates),
        )
        return batch


if TYPE_CHECKING:
    _fetcher_check: EnrichmentFetcher = HttpEnrichmentFetcher(...)  # type: ignore[arg-type]
