# tests/conftest.py
from __future__ import annotations

import os
import pytest

from errprops.config import Settings, clear_cached_defaults, reset_settings, set_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """
    Run every test against default settings, whatever ERRPROPS_* variables the
    developer's shell exports. Tests that exercise the loader set env themselves.
    """
    for name in list(os.environ):
        if name.startswith("ERRPROPS_"):
            monkeypatch.delenv(name, raising=False)
    clear_cached_defaults()
    token = set_settings(Settings())
    yield
    reset_settings(token)
    clear_cached_defaults()
