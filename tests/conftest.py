"""Pytest diagnostics and environment isolation helpers."""

from __future__ import annotations

import faulthandler
import os
import sys

import pytest

_ENV_PREFIXES = ("MOCKGEN_",)


def pytest_configure(config: pytest.Config) -> None:
    """Enable faulthandler so hangs in worker threads dump tracebacks."""
    _ = config
    if not faulthandler.is_enabled():
        faulthandler.enable(file=sys.stderr, all_threads=True)


@pytest.fixture(autouse=True)
def _isolate_mockgen_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
