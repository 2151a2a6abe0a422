"""
Unit test fixtures: an in-memory BrowserSession.

FakeSession records every call so tests can assert on ordering and on the
session state left behind (viewport, zoom, injected styles).
"""

from typing import Any, Dict, List, Optional, Set

import pytest
from loguru import logger


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class FakeHandle:
    def __init__(self, selector: str):
        self.selector = selector


class FakeSession:
    """BrowserSession double with switchable failures."""

    png = PNG_BYTES

    def __init__(self, viewport: Optional[Dict[str, int]] = None):
        self.current_url = "https://www.publicissapient.com/"
        self.page_title = "Publicis Sapient | Digital Business Transformation"
        self.viewport = dict(viewport or {"width": 1366, "height": 720})
        self.zoom = 1.0
        self.device_pixel_ratio = 2
        self.styles: List[str] = []
        self.visible: Set[str] = {"#cta"}
        self.disabled: Set[str] = set()
        self.unfillable: Set[str] = set()
        self.filled: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.waits: List[int] = []

        # Failure switches
        self.fail_page_screenshot = False
        self.fail_element_screenshot = False
        self.fail_evaluate = False
        self.fail_zoom_reset = False
        self.fail_viewport_restore = False

        # Values recorded at screenshot time
        self.viewport_at_capture: Optional[Dict[str, int]] = None
        self.zoom_at_capture: Optional[float] = None

    @property
    def url(self) -> str:
        return self.current_url

    async def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        self.current_url = url

    def locate(self, selector: str) -> FakeHandle:
        self.calls.append(("locate", selector))
        return FakeHandle(selector)

    async def wait_visible(self, handle: FakeHandle, timeout: int) -> None:
        self.calls.append(("wait_visible", handle.selector, timeout))
        if handle.selector not in self.visible:
            raise TimeoutError(f"Timeout {timeout}ms waiting for {handle.selector}")

    def viewport_size(self) -> Optional[Dict[str, int]]:
        return dict(self.viewport) if self.viewport else None

    async def set_viewport(self, width: int, height: int) -> Optional[Dict[str, int]]:
        self.calls.append(("set_viewport", width, height))
        if self.fail_viewport_restore and self.viewport_at_capture is not None:
            raise RuntimeError("Target page, context or browser has been closed")
        previous = self.viewport_size()
        self.viewport = {"width": width, "height": height}
        return previous

    async def inject_style(self, css: str) -> None:
        self.calls.append(("inject_style", css))
        self.styles.append(css)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", script, arg))
        if self.fail_evaluate:
            raise RuntimeError("Execution context was destroyed")
        if "style.zoom =" in script:
            if self.fail_zoom_reset and arg == 1.0:
                raise RuntimeError("reset failed")
            self.zoom = float(arg)
            return None
        if "navigator.userAgent" in script:
            return "Mozilla/5.0 (FakeSession)"
        if script == "() => window.devicePixelRatio":
            return self.device_pixel_ratio
        if "devicePixelRatio" in script:
            return {"devicePixelRatio": 1, "cssZoom": str(self.zoom)}
        return None

    async def screenshot(self, target: Any = None, options: Optional[Dict[str, Any]] = None) -> bytes:
        self.calls.append(("screenshot", getattr(target, "selector", None), dict(options or {})))
        self.viewport_at_capture = self.viewport_size()
        self.zoom_at_capture = self.zoom
        if target is None and self.fail_page_screenshot:
            raise RuntimeError("Page crashed")
        if target is not None and self.fail_element_screenshot:
            raise RuntimeError("Element is not attached to the DOM")
        return PNG_BYTES

    async def wait(self, ms: int) -> None:
        self.calls.append(("wait", ms))
        self.waits.append(ms)

    async def title(self) -> str:
        return self.page_title

    async def fill(self, selector: str, value: str) -> None:
        if selector in self.unfillable:
            raise RuntimeError(f"Element is not an <input>: {selector}")
        self.filled[selector] = value

    async def is_enabled(self, selector: str) -> bool:
        return selector not in self.disabled


class LogCapture:
    """Collects messages written to a bound loguru logger."""

    def __init__(self):
        self.messages: List[str] = []
        self.levels: List[str] = []

    def sink(self, message) -> None:
        record = message.record
        self.messages.append(record["message"])
        self.levels.append(record["level"].name)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def log_capture():
    """Logger bound to a unique component plus the messages it received."""
    capture = LogCapture()
    handler_id = logger.add(
        capture.sink,
        level="DEBUG",
        filter=lambda record: record["extra"].get("component") == "unit-test",
    )
    yield logger.bind(component="unit-test"), capture
    logger.remove(handler_id)
