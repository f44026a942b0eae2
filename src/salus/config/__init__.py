"""Application configuration helpers."""

from __future__ import annotations

from .enrichment import EnrichmentConfig, get_enrichment_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .firestore import FirestoreConfig, firestore_enabled, get_firestore_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .reconciler import ReconcilerConfig, get_reconciler_config
from .stream import ReconnectPolicy, StreamConfig, get_stream_config

__all__ = [
    "ConfigurationError",
    "EnrichmentConfig",
    "FirestoreConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcilerConfig",
    "ReconnectPolicy",
    "ResilienceConfig",
    "RetryPolicy",
    "StreamConfig",
    "configure_logging",
    "firestore_enabled",
    "get_enrichment_config",
    "get_firestore_config",
    "get_reconciler_config",
    "get_stream_config",
    "require_env_var",
    "require_env_vars",
]
