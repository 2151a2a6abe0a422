"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for live browser tests: browser and context lifecycle, the session
adapter, capture helper and demo helpers.

Key Features:
- Browser settings from testsuites/config/config.yaml
- Trace / video retention decided by the test outcome
- Final-state screenshot attached to Allure per recording.screenshot
- expect() timeout from timeouts.expect

================================================================================
"""

from typing import AsyncGenerator

import allure
import pytest
from loguru import logger
from playwright.async_api import BrowserContext, Page

from demo_tools.common import get_logger
from testsuites.ui_testing.framework.browser_manager import BrowserManager, apply_expect_timeout
from testsuites.ui_testing.framework.browser_session import PlaywrightSession
from testsuites.ui_testing.framework.capture_helper import CaptureHelper
from testsuites.ui_testing.framework.config_loader import ConfigLoader
from testsuites.ui_testing.framework.demo_helpers import DemoHelpers


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase's report on the item so fixtures can see the outcome."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


def _test_failed(request) -> bool:
    report = getattr(request.node, "rep_call", None)
    return report is None or report.failed


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def ui_config() -> ConfigLoader:
    """Shared configuration loader; also sets the expect() timeout."""
    config = ConfigLoader()
    apply_expect_timeout(config)
    return config


@pytest.fixture
async def browser_manager(ui_config: ConfigLoader) -> AsyncGenerator[BrowserManager, None]:
    """Started browser manager, closed after the test."""
    async with BrowserManager(config=ui_config) as manager:
        yield manager


@pytest.fixture
async def context(
    request,
    browser_manager: BrowserManager,
) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context.

    Trace and video are kept or dropped according to the recording policy
    and the test result.
    """
    context = await browser_manager.new_context()
    yield context
    await browser_manager.finish_context(
        context,
        failed=_test_failed(request),
        name=request.node.name,
    )


@pytest.fixture
async def page(
    request,
    context: BrowserContext,
    browser_manager: BrowserManager,
) -> AsyncGenerator[Page, None]:
    """New page; its final state is attached to Allure per recording.screenshot."""
    page = await context.new_page()
    yield page

    failed = _test_failed(request)
    if browser_manager.wants_screenshot(failed) and not page.is_closed():
        try:
            allure.attach(
                await page.screenshot(full_page=True),
                name="failure_screenshot" if failed else "final_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
        except Exception as e:
            # Log but don't fail if screenshot capture fails
            logger.warning(f"Failed to capture end-of-test screenshot: {e}")


@pytest.fixture
def session(page: Page, ui_config: ConfigLoader) -> PlaywrightSession:
    """BrowserSession over the test page."""
    return PlaywrightSession(
        page,
        navigation_timeout=ui_config.get("timeouts.navigation", 15000),
    )


@pytest.fixture
def capture_helper(ui_config: ConfigLoader, tmp_path) -> CaptureHelper:
    """CaptureHelper writing into the test's temporary directory."""
    return CaptureHelper.from_config(
        ui_config,
        output_dir=tmp_path / "screenshots",
        log=get_logger("capture"),
    )


@pytest.fixture
def helpers(session: PlaywrightSession, tmp_path) -> DemoHelpers:
    """DemoHelpers bound to the test session."""
    return DemoHelpers(session, output_dir=tmp_path / "screenshots", log=get_logger("helpers"))


@pytest.fixture
def demo_wait_ms(ui_config: ConfigLoader) -> int:
    return ui_config.get("demo.wait_ms", 2000)


@pytest.fixture
def test_data():
    """
    Provides form data for the recorded contact-form flow.
    """
    return {
        "contact": {
            "first_name": "test",
            "last_name": "test",
            "company": "test",
            "email": "test@gmail.com",
            "country": "Canada",
            "message": "test",
        },
    }
