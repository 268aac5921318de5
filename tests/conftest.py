from __future__ import annotations

import os

import pytest

import project_config

_PREFIXES = ("PLANNER_", "CLI_PLANNER_")


@pytest.fixture(autouse=True)
def isolated_planner_env(monkeypatch):
    """Run every test without planner overrides from the calling shell."""

    for key in list(os.environ):
        if key.upper().startswith(_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    project_config.reload()
    yield
    project_config.reload()
