"""
Pytest config.

Pins the repo root on sys.path so tests can import the local `dockgate/` package and `main.py`
regardless of how pytest is invoked.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()


@pytest.fixture(autouse=True)
def _reset_cached_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Config and the upstream provider are process-wide singletons. Reset both so env changes made
    by one test don't leak into the next.
    """
    from dockgate.api import server
    from dockgate.proxy.config import load_proxy_config

    load_proxy_config.cache_clear()
    monkeypatch.setattr(server, "_provider", None)
