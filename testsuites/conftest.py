"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the entire test suite.
It registers common markers and the opt-in switch for live browser tests, and
gives browser tests the reruns (pytest-rerunfailures) and timeout
(pytest-timeout) configured in config/config.yaml.

================================================================================
"""

import os

import pytest

from testsuites.ui_testing.framework.config_loader import ConfigLoader


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests driving a real browser (opt-in)"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "unit: Framework unit tests (no browser)"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "capture: Tests related to screenshot capture"
    )
    config.addinivalue_line(
        "markers", "retry: Tests related to retry behavior"
    )
    config.addinivalue_line(
        "markers", "navigation: Recorded navigation flows"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Adds directory-based markers, applies the configured run policy to UI
    tests and skips e2e tests unless enabled with --run-e2e or RUN_E2E=1.
    """
    policy = ConfigLoader().run_policy()
    run_e2e = config.getoption("--run-e2e") or os.getenv("RUN_E2E") == "1"
    skip_e2e = pytest.mark.skip(reason="e2e tests need --run-e2e or RUN_E2E=1")

    for item in items:
        # Auto-add 'ui' marker to tests in ui_testing directory
        if "ui_testing" in str(item.fspath):
            item.add_marker(pytest.mark.ui)
            apply_run_policy(item, policy)

        # Auto-add 'unit' marker to tests in unit directory
        if item.path.parent.name == "unit":
            item.add_marker(pytest.mark.unit)

        if "e2e" in item.keywords and not run_e2e:
            item.add_marker(skip_e2e)


def apply_run_policy(item, policy):
    """Add rerun and timeout markers unless the test sets its own."""
    if policy["reruns"] > 0 and item.get_closest_marker("flaky") is None:
        item.add_marker(pytest.mark.flaky(reruns=policy["reruns"]))
    if policy["timeout"] > 0 and item.get_closest_marker("timeout") is None:
        item.add_marker(pytest.mark.timeout(policy["timeout"]))


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Playwright Demo Automation Suite",
        "=" * 60,
        "",
    ]
