"""
tests/conftest.py — Shared fixtures and path setup for all tests.

Adds the project root to sys.path so unit tests can import:
    from config.settings import Settings
    from scripts.health import CheckResult
    from scripts import check_cdap
"""
import os
import pathlib
import sys

import pytest

# Make project root importable without installing as a package
PROJECT_ROOT = pathlib.Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _clean_check_cdap_env(monkeypatch):
    """Keep CHECK_CDAP_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CHECK_CDAP_"):
            monkeypatch.delenv(key, raising=False)
