"""
Repository-level pytest configuration (demo-safe).

Why this exists:
  - Provide safe defaults for demo environments (no secrets embedded)
  - Register command line options, which pytest only reads from the root
  - Keep behavior explicit and discoverable
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from demo_tools.common import init_logger


def pytest_addoption(parser):
    """Register command line options."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run e2e tests that drive a real browser against live sites",
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.

    Keeps local runs predictable: live browser runs are headless unless the
    caller asks for a visible browser.
    """
    defaults = {
        "BROWSER_HEADLESS": "true",
        "LOG_LEVEL": "INFO",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    init_logger()
    yield
