"""Enrichment endpoint configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int, optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

ENRICHMENT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class EnrichmentConfig:
    """Holds enrichment endpoint configuration values."""

    url: str
    resilience: ResilienceConfig
    api_key: str | None = None


def get_enrichment_config(*, resilience: ResilienceConfig | None = None) -> EnrichmentConfig:
    values = require_env_vars(("SALUS_ENRICHMENT_URL",))
    return EnrichmentConfig(
        url=values["SALUS_ENRICHMENT_URL"],
        api_key=optional_env_var("SALUS_ENRICHMENT_API_KEY"),
        resilience=resilience
        or ResilienceConfig(
            name="enrichment",
            timeout_seconds=env_float(
                "SALUS_ENRICHMENT_TIMEOUT_SECONDS", ENRICHMENT_TIMEOUT_SECONDS, minimum=0.0
            ),
            retry=RetryPolicy(total=env_int("SALUS_ENRICHMENT_RETRIES", 0, minimum=0)),
            ratelimit=RateLimit(max_calls=1, per_seconds=2.0),
        ),
    )
