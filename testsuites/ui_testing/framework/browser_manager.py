"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for the UI demo suite.

Features:
    - Launch settings from config.yaml (headless, slow_mo, launch args)
    - Consistent rendering: fixed device scale factor, desktop viewport
    - Optional device emulation ("iPhone 12", "Pixel 5", ...)
    - Device projects from config.yaml (device + slow_mo per project)
    - Video, trace and end-of-test screenshot policies
    - Playwright expect() timeout from config

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    expect,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from .config_loader import ConfigLoader, ConfigurationError


RECORDING_POLICIES = ("on", "off", "retain-on-failure")
SCREENSHOT_POLICIES = ("on", "off", "only-on-failure")


def apply_expect_timeout(config: Any) -> int:
    """
    Set the default timeout of Playwright's expect() assertions.

    Args:
        config: ConfigLoader-like object (`timeouts.expect`)

    Returns:
        Timeout applied, in milliseconds
    """
    timeout = config.get("timeouts.expect", 10000)
    expect.set_options(timeout=timeout)
    logger.debug(f"expect() timeout set to {timeout}ms")
    return timeout


class BrowserManager:
    """
    Manages the browser instance and contexts for UI tests.

    Usage:
        async with BrowserManager() as manager:
            context = await manager.new_context()
            page = await context.new_page()
            await page.goto("https://www.publicissapient.com/")
            await manager.finish_context(context, failed=False)
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--force-device-scale-factor=1",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1366, "height": 720},
        "device_scale_factor": 1,
        "is_mobile": False,
        "has_touch": False,
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
        device: Optional[str] = None,
        project: Optional[str] = None,
    ):
        """
        Initialize browser manager.

        Args:
            config: Configuration (ConfigLoader() if None)
            headless: Override browser.headless
            browser_type: Override browser.type - 'chromium', 'firefox', 'webkit'
            device: Override browser.device (Playwright device descriptor name)
            project: Override browser.project (a key under `projects`)

        Raises:
            ConfigurationError: If the project is not defined in config
        """
        self.config = config or ConfigLoader()
        self.headless = self.config.get("browser.headless", True) if headless is None else headless
        self.browser_type = browser_type or self.config.get("browser.type", "chromium")
        self.project = project if project is not None else self.config.get("browser.project", "")
        self.project_settings = self._project_settings(self.project)

        if device is not None:
            self.device = device
        else:
            self.device = self.project_settings.get("device") or self.config.get("browser.device", "")

        self.output_dir = Path(self.config.get("capture.output_dir", "test-results"))
        self.video_policy = self._policy("recording.video", "off")
        self.trace_policy = self._policy("recording.trace", "off")
        self.screenshot_policy = self._policy(
            "recording.screenshot", "only-on-failure", SCREENSHOT_POLICIES
        )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry - start browser."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close browser."""
        await self.close()

    def _project_settings(self, project: str) -> Dict[str, Any]:
        if not project:
            return {}
        settings = self.config.get(f"projects.{project}")
        if not isinstance(settings, dict):
            raise ConfigurationError(f"Unknown browser project: {project}")
        return dict(settings)

    def _policy(self, key: str, default: str, allowed=RECORDING_POLICIES) -> str:
        value = str(self.config.get(key, default))
        if value not in allowed:
            logger.warning(f"Unknown {key} policy '{value}', using '{default}'")
            return default
        return value

    @property
    def launch_options(self) -> Dict[str, Any]:
        """Launch options merged from defaults and config."""
        options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
            "slow_mo": self.project_settings.get("slow_mo", self.config.get("browser.slow_mo", 0)),
        }
        args = self.config.get("browser.args")
        if args:
            options["args"] = list(args)
        return options

    @property
    def context_options(self) -> Dict[str, Any]:
        """Context options merged from defaults, config and device descriptor."""
        options = dict(self.DEFAULT_CONTEXT_OPTIONS)
        viewport = self.config.get("browser.viewport")
        if viewport:
            options["viewport"] = {"width": viewport["width"], "height": viewport["height"]}
        for key in ("device_scale_factor", "is_mobile", "has_touch"):
            value = self.config.get(f"browser.{key}")
            if value is not None:
                options[key] = value

        base_url = self.config.get("base_url")
        if base_url:
            options["base_url"] = base_url

        if self.device and self._playwright:
            # Device descriptors carry their own viewport and scale factor
            descriptor = dict(self._playwright.devices[self.device])
            descriptor.pop("default_browser_type", None)
            options.update(descriptor)

        if self.video_policy != "off":
            options["record_video_dir"] = str(self.output_dir / "videos")
        return options

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()

        # Select browser type
        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        self._browser = await browser_launcher.launch(**self.launch_options)
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless}, device={self.device or 'desktop'})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new browser context with configured timeouts and recording.

        Args:
            **options: Additional context options

        Returns:
            New BrowserContext
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self._browser.new_context(**{**self.context_options, **options})
        context.set_default_timeout(self.config.get("timeouts.action", 10000))
        context.set_default_navigation_timeout(self.config.get("timeouts.navigation", 15000))

        if self.trace_policy != "off":
            await context.tracing.start(screenshots=True, snapshots=True, sources=True)

        self._contexts.append(context)
        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """
        Create new page in new or existing context.

        Args:
            context: Existing context to use (creates new if None)
            **context_options: Options for new context

        Returns:
            New Page
        """
        if context is None:
            context = await self.new_context(**context_options)

        return await context.new_page()

    def wants_screenshot(self, failed: bool) -> bool:
        """Whether a test's final page state should be attached to the report."""
        if self.screenshot_policy == "on":
            return True
        return self.screenshot_policy == "only-on-failure" and failed

    async def finish_context(
        self,
        context: BrowserContext,
        failed: bool,
        name: str = "test",
    ) -> None:
        """
        Close a context, keeping trace and video according to policy.

        Args:
            context: Context created by new_context()
            failed: Whether the test using it failed
            name: Base name for the saved trace
        """
        if self.trace_policy != "off":
            keep_trace = self.trace_policy == "on" or failed
            if keep_trace:
                trace_path = self.output_dir / "traces" / f"{name}.zip"
                await context.tracing.stop(path=str(trace_path))
                logger.info(f"Trace saved: {trace_path}")
            else:
                await context.tracing.stop()

        videos = [page.video for page in context.pages if page.video]
        await context.close()
        if context in self._contexts:
            self._contexts.remove(context)

        if self.video_policy == "retain-on-failure" and not failed:
            for video in videos:
                await video.delete()

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
    "apply_expect_timeout",
    "RECORDING_POLICIES",
    "SCREENSHOT_POLICIES",
]
