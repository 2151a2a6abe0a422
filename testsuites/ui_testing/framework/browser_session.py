"""
================================================================================
Browser Session
================================================================================

The narrow browser surface the capture and helper utilities call into.

`BrowserSession` is the contract; `PlaywrightSession` fulfils it over a
`playwright.async_api.Page`. Unit tests substitute an in-memory fake.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from loguru import logger
from playwright.async_api import Locator, Page


@runtime_checkable
class BrowserSession(Protocol):
    """One active browser page, treated as an opaque collaborator."""

    @property
    def url(self) -> str: ...

    async def navigate(self, url: str) -> None: ...

    def locate(self, selector: str) -> Any: ...

    async def wait_visible(self, handle: Any, timeout: int) -> None: ...

    def viewport_size(self) -> Optional[Dict[str, int]]: ...

    async def set_viewport(self, width: int, height: int) -> Optional[Dict[str, int]]: ...

    async def inject_style(self, css: str) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    async def screenshot(self, target: Any = None, options: Optional[Dict[str, Any]] = None) -> bytes: ...

    async def wait(self, ms: int) -> None: ...

    async def title(self) -> str: ...

    async def fill(self, selector: str, value: str) -> None: ...

    async def is_enabled(self, selector: str) -> bool: ...


# Options Page.screenshot accepts but Locator.screenshot does not
PAGE_ONLY_SCREENSHOT_OPTIONS = ("full_page", "clip")


class PlaywrightSession:
    """
    BrowserSession backed by a Playwright async Page.

    Usage:
        session = PlaywrightSession(page)
        await session.navigate("https://www.publicissapient.com/")
        png = await session.screenshot(options={"full_page": True})
    """

    def __init__(
        self,
        page: Page,
        navigation_timeout: int = 15000,
        wait_until: str = "load",
    ):
        """
        Initialize session adapter.

        Args:
            page: Playwright Page object
            navigation_timeout: Timeout for navigate() in milliseconds
            wait_until: Load state navigate() waits for
        """
        self.page = page
        self.navigation_timeout = navigation_timeout
        self.wait_until = wait_until

    @property
    def url(self) -> str:
        return self.page.url

    async def navigate(self, url: str) -> None:
        await self.page.goto(url, wait_until=self.wait_until, timeout=self.navigation_timeout)
        logger.debug(f"Navigated to: {url}")

    def locate(self, selector: str) -> Locator:
        return self.page.locator(selector)

    async def wait_visible(self, handle: Locator, timeout: int) -> None:
        await handle.wait_for(state="visible", timeout=timeout)

    def viewport_size(self) -> Optional[Dict[str, int]]:
        size = self.page.viewport_size
        return dict(size) if size else None

    async def set_viewport(self, width: int, height: int) -> Optional[Dict[str, int]]:
        """Resize the viewport and return the size it had before."""
        previous = self.viewport_size()
        await self.page.set_viewport_size({"width": width, "height": height})
        return previous

    async def inject_style(self, css: str) -> None:
        await self.page.add_style_tag(content=css)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return await self.page.evaluate(script)
        return await self.page.evaluate(script, arg)

    async def screenshot(
        self,
        target: Optional[Locator] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> bytes:
        """
        Capture PNG bytes of the page, or of `target` when given.

        Args:
            target: Locator to capture; whole page if None
            options: Playwright screenshot keyword options
        """
        options = dict(options or {})
        if target is None:
            return await self.page.screenshot(**options)

        for key in PAGE_ONLY_SCREENSHOT_OPTIONS:
            options.pop(key, None)
        return await target.screenshot(**options)

    async def wait(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    async def title(self) -> str:
        return await self.page.title()

    async def fill(self, selector: str, value: str) -> None:
        await self.page.fill(selector, value)

    async def is_enabled(self, selector: str) -> bool:
        return await self.page.is_enabled(selector)


__all__ = [
    "BrowserSession",
    "PlaywrightSession",
]
