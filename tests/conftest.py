"""Pytest configuration ensuring project root is importable.

Adds repository root to sys.path explicitly to avoid interpreter/path quirks.
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_config_env(tmp_path_factory):  # noqa: D401
    """Ensure global config/env/metrics side effects do not leak.

    - Point STALL_CONFIG_DIR at an empty directory (no user prefs)
    - Drop STALL__* overrides
    - Clear config cache + metrics, drop event listeners and CLI log handlers
    """
    from stall import eventbus, events, metrics
    from stall.config import clear_config_cache

    prev = {
        k: v
        for k, v in os.environ.items()
        if k == "STALL_CONFIG_DIR" or k.startswith("STALL__")
    }
    for k in prev:
        os.environ.pop(k)
    os.environ["STALL_CONFIG_DIR"] = str(tmp_path_factory.mktemp("prefs"))
    clear_config_cache()
    metrics.reset_for_tests()
    try:
        yield
    finally:
        clear_config_cache()
        eventbus.reset_for_tests()
        events.reset_listeners_for_tests()
        for k in [
            k for k in os.environ
            if k == "STALL_CONFIG_DIR" or k.startswith("STALL__")
        ]:
            os.environ.pop(k)
        os.environ.update(prev)
        logger = logging.getLogger("stall")
        for h in list(logger.handlers):
            logger.removeHandler(h)
        logger.setLevel(logging.NOTSET)


ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
