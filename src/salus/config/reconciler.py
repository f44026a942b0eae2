"""Reconciliation and dashboard statistics defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from salus.domain.model.enums import EmptySnapshotPolicy

from .env import env_date, env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_WINDOW_DAYS = 90
DEFAULT_RECENT_WINDOW_DAYS = 30
DEFAULT_MAX_LIVE_ITEMS = 100
DEFAULT_ELECTION_DATE = date(2026, 1, 14)


@dataclass(frozen=True, slots=True)
class ReconcilerConfig:
    """Policies applied by the data reconciler.

    ``acceptance_year`` of ``None`` accepts the year of the reference date the
    filter runs against.
    """

    acceptance_year: int | None = None
    window_days: int = DEFAULT_WINDOW_DAYS
    recent_window_days: int = DEFAULT_RECENT_WINDOW_DAYS
    max_live_items: int = DEFAULT_MAX_LIVE_ITEMS
    election_date: date = DEFAULT_ELECTION_DATE
    empty_snapshot_policy: EmptySnapshotPolicy = EmptySnapshotPolicy.IGNORE


def _empty_snapshot_policy() -> EmptySnapshotPolicy:
    raw = optional_env_var("SALUS_EMPTY_SNAPSHOT_POLICY")
    if raw is None:
        return EmptySnapshotPolicy.IGNORE
    try:
        return EmptySnapshotPolicy(raw.lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in EmptySnapshotPolicy)
        raise ConfigurationError(
            f"SALUS_EMPTY_SNAPSHOT_POLICY must be one of {allowed}, got {raw!r}"
        ) from exc


def get_reconciler_config() -> ReconcilerConfig:
    acceptance_year = optional_env_var("SALUS_ACCEPTANCE_YEAR")
    return ReconcilerConfig(
        acceptance_year=(
            env_int("SALUS_ACCEPTANCE_YEAR", 0, minimum=1) if acceptance_year else None
        ),
        window_days=env_int("SALUS_WINDOW_DAYS", DEFAULT_WINDOW_DAYS, minimum=0),
        recent_window_days=env_int(
            "SALUS_RECENT_WINDOW_DAYS", DEFAULT_RECENT_WINDOW_DAYS, minimum=0
        ),
        max_live_items=env_int("SALUS_MAX_LIVE_ITEMS", DEFAULT_MAX_LIVE_ITEMS, minimum=1),
        election_date=env_date("SALUS_ELECTION_DATE", DEFAULT_ELECTION_DATE),
        empty_snapshot_policy=_empty_snapshot_policy(),
    )
