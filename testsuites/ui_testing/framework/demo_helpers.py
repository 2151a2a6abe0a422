# ================================================================================
# Demo Helpers Module
# ================================================================================
#
# Readability helpers for recorded demo flows: visible pauses, step banners,
# timestamped screenshots, quick page validations and random test data.
#
# Key Features:
#   - Demo pacing (wait, demo_mode)
#   - Step / completion banners in the log
#   - Element readiness and title/URL checks that report instead of raise
#   - Retry entry point backed by RetryExecutor
#
# Usage:
#   helpers = DemoHelpers(PlaywrightSession(page))
#   helpers.log_test_step("Open the Sapient AI menu")
#   await helpers.retry_action(lambda: page.get_by_role("button", name="Sapient AI").click())
#
# ================================================================================

from __future__ import annotations

import asyncio
import random
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar, Union

import allure
from loguru import logger

from .browser_session import BrowserSession
from .retry_executor import RetryExecutor, RetryPolicy


T = TypeVar("T")

SAMPLE_TODOS = [
    "Learn Playwright automation",
    "Complete demo presentation",
    "Review test results",
    "Update documentation",
    "Practice codegen features",
]


class DemoHelpers:
    """
    Collection of helpers that make demo tests easier to follow.

    Example:
        helpers = DemoHelpers(session, output_dir="test-results")
        await helpers.demo_mode("Cookies accepted")
        assert await helpers.validate_page_url("publicissapient.com")
    """

    def __init__(
        self,
        session: BrowserSession,
        output_dir: Union[str, Path] = "test-results",
        log: Optional[Any] = None,
    ):
        """
        Initialize helpers.

        Args:
            session: Browser session the helpers act on
            output_dir: Directory for screenshots
            log: Loguru logger (bound default if None)
        """
        self.session = session
        self.output_dir = Path(output_dir)
        self.log = log or logger.bind(component="helpers")

    async def wait(self, milliseconds: int) -> None:
        """Pause for demo visibility."""
        self.log.info(f"⏳ Waiting {milliseconds}ms for demo visibility...")
        await asyncio.sleep(milliseconds / 1000)

    @allure.step("Take screenshot: {name}")
    async def take_screenshot(self, name: str) -> Path:
        """
        Take a full-page screenshot with a timestamped file name.

        Args:
            name: Descriptive name for the screenshot

        Returns:
            Path to the saved file
        """
        timestamp = datetime.now().isoformat().replace(":", "-").replace(".", "-")
        filepath = self.output_dir / f"screenshot-{name}-{timestamp}.png"
        self.log.info(f"📸 Taking screenshot: {filepath.name}")

        png = await self.session.screenshot(None, {"full_page": True, "type": "png"})
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_bytes(png)

        self.log.info("✅ Screenshot saved")
        return filepath

    def log_test_step(self, step_description: str) -> None:
        """Log a test step as a banner."""
        self.log.info("=" * 50)
        self.log.info(f"🎯 TEST STEP: {step_description}")
        self.log.info("=" * 50)

    def log_test_completion(self, test_name: str, status: str) -> None:
        """
        Log test completion with summary.

        Args:
            test_name: Name of the completed test
            status: "PASSED" or "FAILED"
        """
        emoji = "✅" if status == "PASSED" else "❌"
        self.log.info("=" * 60)
        self.log.info(f"{emoji} TEST COMPLETED: {test_name} - {status}")
        self.log.info("=" * 60)

    @staticmethod
    def generate_random_data(kind: str) -> str:
        """
        Generate timestamped test data.

        Args:
            kind: 'email', 'name', 'text' or 'todo'; anything else gives generic data

        Returns:
            Generated value
        """
        timestamp = int(time.time() * 1000)
        kind = kind.lower()

        if kind == "email":
            return f"testuser{timestamp}@demo.com"
        if kind == "name":
            return f"TestUser{timestamp}"
        if kind == "text":
            return f"Sample text {timestamp}"
        if kind == "todo":
            return f"{random.choice(SAMPLE_TODOS)} {timestamp}"
        return f"TestData{timestamp}"

    async def verify_element_ready(
        self,
        selector: str,
        element_name: str,
        timeout: int = 10000,
    ) -> bool:
        """
        Check that an element is visible and enabled.

        Args:
            selector: CSS selector for the element
            element_name: Descriptive name for logging
            timeout: Visibility timeout in milliseconds

        Returns:
            True if the element is ready for interaction
        """
        self.log.info(f"🔍 Verifying {element_name} is ready for interaction...")

        try:
            handle = self.session.locate(selector)
            await self.session.wait_visible(handle, timeout)
            enabled = await self.session.is_enabled(selector)
        except Exception as e:
            self.log.warning(f"❌ {element_name} is not ready: {e}")
            return False

        if enabled is False:
            self.log.warning(f"❌ {element_name} is disabled")
            return False

        self.log.info(f"✅ {element_name} is ready")
        return True

    async def retry_action(
        self,
        action: Callable[[], Awaitable[T]],
        max_retries: int = 3,
        delay_ms: int = 1000,
    ) -> T:
        """
        Perform an action with retry.

        Raises:
            RetriesExhausted: If every attempt fails
        """
        policy = RetryPolicy(max_attempts=max_retries, delay_ms=delay_ms)
        return await RetryExecutor(self.log).execute(action, policy)

    async def validate_page_title(self, expected_title: str) -> bool:
        """Return True if the page title contains `expected_title`."""
        self.log.info(f'🔍 Validating page title contains: "{expected_title}"')

        actual_title = await self.session.title()
        is_valid = expected_title in actual_title

        self.log.info(f'Page title: "{actual_title}"')
        self.log.info(f"Validation {'PASSED' if is_valid else 'FAILED'}")
        return is_valid

    async def validate_page_url(self, expected_path: str) -> bool:
        """Return True if the current URL contains `expected_path`."""
        self.log.info(f'🔍 Validating URL contains: "{expected_path}"')

        current_url = self.session.url
        is_valid = expected_path in current_url

        self.log.info(f'Current URL: "{current_url}"')
        self.log.info(f"Validation {'PASSED' if is_valid else 'FAILED'}")
        return is_valid

    async def get_browser_info(self) -> Dict[str, Any]:
        """Browser and viewport details for reports."""
        user_agent = await self.session.evaluate("() => navigator.userAgent")
        return {
            "user_agent": user_agent,
            "viewport": self.session.viewport_size(),
            "url": self.session.url,
            "timestamp": datetime.now().isoformat(),
        }

    async def clear_form_fields(self, selectors: Iterable[str]) -> List[str]:
        """
        Clear input fields; fields that cannot be cleared are logged and skipped.

        Returns:
            Selectors that were cleared
        """
        self.log.info("🧹 Clearing form fields...")
        cleared = []

        for selector in selectors:
            try:
                await self.session.fill(selector, "")
            except Exception as e:
                self.log.warning(f"⚠️ Could not clear field {selector}: {e}")
                continue
            cleared.append(selector)
            self.log.info(f"✅ Cleared field: {selector}")

        return cleared

    async def demo_mode(self, action_description: str, wait_ms: int = 2000) -> Path:
        """
        Pause after an action and take a screenshot named after it.

        Returns:
            Path to the screenshot
        """
        self.log.info(f"🎭 DEMO MODE: {action_description}")
        await self.wait(wait_ms)

        screenshot_name = "-".join(action_description.lower().split())
        return await self.take_screenshot(screenshot_name)


__all__ = [
    "DemoHelpers",
]
