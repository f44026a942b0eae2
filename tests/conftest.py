from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's SALUS_* settings from leaking into tests."""

    for name in list(os.environ):
        if name.startswith("SALUS_"):
            monkeypatch.delenv(name, raising=False)
