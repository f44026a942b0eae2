"""Multi-source reconciliation of canonical collections."""

from __future__ import annotations

from .matching import apply_update, find_update, names_match, patch_candidates
from .reconciler import ChangeObserver, DataReconciler, UnknownCollectionError

__all__ = [
    "ChangeObserver",
    "DataReconciler",
    "UnknownCollectionError",
    "apply_update",
    "find_update",
    "names_match",
    "patch_candidates",
]
