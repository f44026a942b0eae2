"""Firestore remote-subscription configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_var

INCIDENTS_COLLECTION = "incidents"
PRESIDENTIAL_COLLECTION = "presidential_candidates"
PARLIAMENTARY_COLLECTION = "parliamentary_candidates"


@dataclass(frozen=True, slots=True)
class FirestoreConfig:
    project_id: str
    database: str | None = None
    incidents_collection: str = INCIDENTS_COLLECTION
    presidential_collection: str = PRESIDENTIAL_COLLECTION
    parliamentary_collection: str = PARLIAMENTARY_COLLECTION


def firestore_enabled() -> bool:
    return optional_env_var("SALUS_FIRESTORE_PROJECT") is not None


def get_firestore_config() -> FirestoreConfig:
    return FirestoreConfig(
        project_id=require_env_var("SALUS_FIRESTORE_PROJECT"),
        database=optional_env_var("SALUS_FIRESTORE_DATABASE"),
    )
