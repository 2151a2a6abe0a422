"""
================================================================================
Capture Helper
================================================================================

Screenshot capture with named presets that work around the usual causes of
"shrunken" or inconsistent screenshots.

Presets:
    - full: whole page at the current size
    - fixed_viewport: temporary viewport resize, restored afterwards
    - element: a single element, falling back to a full capture
    - styled: CSS injected first (left in place afterwards)
    - zoomed: CSS zoom on the document body, reset to 1.0 afterwards

Retina and mobile variants are plain full-page captures that also log the
device pixel ratio or viewport they were taken at.

Every capture returns a CaptureResult; failures never propagate.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Optional,
    Tuple,
    Union,
)

import allure
from loguru import logger

from demo_tools.report_tools.allure_utils import attach_json, attach_png
from .browser_session import BrowserSession


DEFAULT_OUTPUT_DIR = Path("test-results")
DEFAULT_DIMENSIONS: Tuple[int, int] = (1920, 1080)

# Neutralizes animations, zoom/transform and width constraints
DEFAULT_CAPTURE_CSS = """
  * {
    min-width: auto !important;
    animation-duration: 0s !important;
    animation-delay: 0s !important;
    transition-duration: 0s !important;
    transition-delay: 0s !important;
  }

  body {
    zoom: 1.0 !important;
    transform: none !important;
  }

  .container, .wrapper, .main {
    max-width: none !important;
    width: auto !important;
  }
"""

DEVICE_PIXEL_RATIO_SCRIPT = "() => window.devicePixelRatio"

SET_ZOOM_SCRIPT = "(zoom) => { document.body.style.zoom = String(zoom); }"

DIAGNOSTIC_SCRIPT = """() => {
  const body = document.body;
  const html = document.documentElement;
  const bodyStyle = window.getComputedStyle(body);
  return {
    devicePixelRatio: window.devicePixelRatio,
    cssZoom: body.style.zoom || '1',
    bodyTransform: bodyStyle.transform,
    dimensions: {
      scrollWidth: body.scrollWidth,
      scrollHeight: body.scrollHeight,
      clientWidth: body.clientWidth,
      clientHeight: body.clientHeight,
      windowWidth: window.innerWidth,
      windowHeight: window.innerHeight,
    },
    potentialIssues: {
      bodyMaxWidth: bodyStyle.maxWidth,
      bodyWidth: bodyStyle.width,
      htmlMaxWidth: window.getComputedStyle(html).maxWidth,
      bodyMinWidth: bodyStyle.minWidth,
      bodyTransform: bodyStyle.transform,
      bodyScale: bodyStyle.scale,
    },
  };
}"""


# =============================================================================
# Errors
# =============================================================================

class CaptureError(Exception):
    """Base class for capture errors."""
    pass


class ElementNotFound(CaptureError):
    """Raised when the element preset cannot locate or capture its target."""

    def __init__(self, selector: str, cause: Optional[BaseException] = None):
        self.selector = selector
        self.cause = cause
        super().__init__(f"Element not captured: {selector} ({cause})")


class CaptureIOFailure(CaptureError):
    """Raised when a screenshot cannot be written to the output directory."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write screenshot {path}: {cause}")


# =============================================================================
# Data Model
# =============================================================================

class CapturePreset(str, Enum):
    """Capture strategies."""
    FULL = "full"
    FIXED_VIEWPORT = "fixed_viewport"
    ELEMENT = "element"
    STYLED = "styled"
    ZOOMED = "zoomed"


@dataclass(frozen=True)
class CaptureRequest:
    """
    A single screenshot request.

    Attributes:
        name: Base file name (no extension)
        preset: Capture strategy
        dimensions: (width, height) for fixed_viewport; 1920x1080 if omitted
        selector: Target selector, required for (and only for) element
        css_override: CSS for styled; DEFAULT_CAPTURE_CSS if omitted
        zoom: Zoom factor for zoomed (1.0 = 100%)
    """
    name: str
    preset: CapturePreset = CapturePreset.FULL
    dimensions: Optional[Tuple[int, int]] = None
    selector: Optional[str] = None
    css_override: Optional[str] = None
    zoom: float = 1.0

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Capture name must not be empty")

        # Accept plain strings such as "zoomed"
        object.__setattr__(self, "preset", CapturePreset(self.preset))

        if self.preset is CapturePreset.ELEMENT and not self.selector:
            raise ValueError("Element captures require a selector")
        if self.preset is not CapturePreset.ELEMENT and self.selector is not None:
            raise ValueError(f"Selector is only valid for element captures, not {self.preset.value}")

        if self.dimensions is not None:
            width, height = self.dimensions
            if width <= 0 or height <= 0:
                raise ValueError(f"Dimensions must be positive, got {width}x{height}")
            object.__setattr__(self, "dimensions", (int(width), int(height)))

        if self.zoom <= 0:
            raise ValueError(f"Zoom must be positive, got {self.zoom}")

    @property
    def viewport(self) -> Tuple[int, int]:
        return self.dimensions or DEFAULT_DIMENSIONS

    @property
    def suffix(self) -> str:
        """File name suffix for this request's preset."""
        if self.preset is CapturePreset.FIXED_VIEWPORT:
            width, height = self.viewport
            return f"{width}x{height}"
        if self.preset is CapturePreset.ZOOMED:
            return f"desktop-{round(self.zoom * 100)}pct"
        return self.preset.value


@dataclass
class CaptureResult:
    """
    Outcome of a capture.

    Attributes:
        path: File written (or that would have been written on failure)
        succeeded: Whether a file was written
        error: Failure message; on a succeeded capture, a session restore
            problem that happened after the file was written
        fallback_used: True when an element capture fell back to full page
    """
    path: str
    succeeded: bool
    error: Optional[str] = None
    fallback_used: bool = False


# =============================================================================
# Scoped Session Mutations
# =============================================================================

@asynccontextmanager
async def viewport_override(
    session: BrowserSession,
    width: int,
    height: int,
) -> AsyncIterator[Optional[Dict[str, int]]]:
    """Resize the viewport, restoring the original size on exit."""
    original = session.viewport_size()
    try:
        await session.set_viewport(width, height)
        yield original
    finally:
        if original:
            await session.set_viewport(original["width"], original["height"])


@asynccontextmanager
async def zoom_override(session: BrowserSession, zoom: float) -> AsyncIterator[None]:
    """Apply CSS zoom to the document body, resetting it to 1.0 on exit."""
    try:
        await session.evaluate(SET_ZOOM_SCRIPT, zoom)
        yield
    finally:
        await session.evaluate(SET_ZOOM_SCRIPT, 1.0)


# =============================================================================
# Capture Helper
# =============================================================================

class CaptureHelper:
    """
    Dispatches CaptureRequests to preset strategies.

    Usage:
        helper = CaptureHelper(output_dir="test-results")
        result = await helper.capture(
            session,
            CaptureRequest("home", CapturePreset.FIXED_VIEWPORT, dimensions=(1366, 720)),
        )
        assert result.succeeded, result.error
    """

    SCREENSHOT_OPTIONS: Dict[str, Any] = {
        "full_page": True,
        "type": "png",
        "animations": "disabled",
    }

    ELEMENT_SCREENSHOT_OPTIONS: Dict[str, Any] = {
        "type": "png",
        "animations": "disabled",
    }

    def __init__(
        self,
        output_dir: Union[str, Path] = DEFAULT_OUTPUT_DIR,
        element_timeout: int = 10000,
        viewport_settle_ms: int = 1000,
        style_settle_ms: int = 1000,
        zoom_settle_ms: int = 500,
        unique_names: bool = False,
        attach_to_allure: bool = True,
        log: Optional[Any] = None,
    ):
        """
        Initialize capture helper.

        Args:
            output_dir: Directory screenshots are written to
            element_timeout: Visibility timeout for element captures (ms)
            viewport_settle_ms: Pause after resizing the viewport
            style_settle_ms: Pause after injecting CSS
            zoom_settle_ms: Pause after applying zoom
            unique_names: Append a timestamp so repeated names do not overwrite
            attach_to_allure: Attach successful captures to the Allure report
            log: Loguru logger (bound default if None)
        """
        self.output_dir = Path(output_dir)
        self.element_timeout = element_timeout
        self.viewport_settle_ms = viewport_settle_ms
        self.style_settle_ms = style_settle_ms
        self.zoom_settle_ms = zoom_settle_ms
        self.unique_names = unique_names
        self.attach_to_allure = attach_to_allure
        self.log = log or logger.bind(component="capture")

        self._handlers: Dict[
            CapturePreset,
            Callable[[BrowserSession, CaptureRequest], Awaitable[CaptureResult]],
        ] = {
            CapturePreset.FULL: self._capture_full,
            CapturePreset.FIXED_VIEWPORT: self._capture_fixed_viewport,
            CapturePreset.ELEMENT: self._capture_element,
            CapturePreset.STYLED: self._capture_styled,
            CapturePreset.ZOOMED: self._capture_zoomed,
        }

    @classmethod
    def from_config(cls, config: Any, **overrides: Any) -> "CaptureHelper":
        """
        Build a helper from a ConfigLoader-like object (`capture.*` keys).
        """
        options = {
            "output_dir": config.get("capture.output_dir", str(DEFAULT_OUTPUT_DIR)),
            "element_timeout": config.get("timeouts.action", 10000),
            "viewport_settle_ms": config.get("capture.viewport_settle_ms", 1000),
            "style_settle_ms": config.get("capture.style_settle_ms", 1000),
            "zoom_settle_ms": config.get("capture.zoom_settle_ms", 500),
            "unique_names": config.get("capture.unique_names", False),
            "attach_to_allure": config.get("capture.attach_to_allure", True),
        }
        options.update(overrides)
        return cls(**options)

    # =========================================================================
    # Public API
    # =========================================================================

    async def capture(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        """
        Capture a screenshot according to `request.preset`.

        Args:
            session: Browser session to capture
            request: What to capture and how

        Returns:
            CaptureResult; check `succeeded` before relying on `path`
        """
        handler = self._handlers[request.preset]
        with allure.step(f"Capture {request.preset.value} screenshot: {request.name}"):
            self.log.info(f"📸 Taking {request.preset.value} screenshot: {request.name}")
            try:
                return await handler(session, request)
            except Exception as e:
                path = self._path_for(request.name, request.suffix)
                self.log.error(f"❌ Screenshot failed: {request.name}: {e}")
                return CaptureResult(path=str(path), succeeded=False, error=str(e))

    async def capture_comparison(
        self,
        session: BrowserSession,
        base_name: str,
        action: Optional[Callable[[], Awaitable[Any]]] = None,
        settle_ms: int = 1000,
    ) -> Tuple[CaptureResult, CaptureResult]:
        """
        Full captures before and after an action.

        Files are `{base_name}-before.png` and `{base_name}-after.png`
        (no preset suffix).

        Args:
            session: Browser session
            base_name: Base name of both files
            action: Async callable run between the captures
            settle_ms: Pause after the action

        Returns:
            (before, after) results
        """
        with allure.step(f"Comparison screenshots: {base_name}"):
            before = await self._capture_labelled(session, base_name, "before")
            if action is not None:
                await action()
                await session.wait(settle_ms)
            after = await self._capture_labelled(session, base_name, "after")
            self.log.info(f"✅ Comparison screenshots completed: {base_name}")
            return before, after

    async def capture_retina(self, session: BrowserSession, name: str) -> CaptureResult:
        """Full capture saved as `{name}-retina.png`, logging the device pixel ratio."""
        with allure.step(f"Capture retina screenshot: {name}"):
            try:
                ratio = await session.evaluate(DEVICE_PIXEL_RATIO_SCRIPT)
            except Exception as e:
                self.log.warning(f"❌ Could not read device pixel ratio: {e}")
                ratio = None
            self.log.info(f"🔍 Device pixel ratio: {ratio}")

            result = await self._capture_labelled(session, name, "retina")
            if result.succeeded:
                self.log.info(f"✅ Retina screenshot saved (DPR: {ratio})")
            return result

    async def capture_mobile(self, session: BrowserSession, name: str) -> CaptureResult:
        """Full capture saved as `{name}-mobile.png`, logging the viewport size."""
        with allure.step(f"Capture mobile screenshot: {name}"):
            viewport = session.viewport_size() or {}
            result = await self._capture_labelled(session, name, "mobile")
            if result.succeeded:
                self.log.info(
                    f"✅ Mobile screenshot saved "
                    f"({viewport.get('width')}x{viewport.get('height')})"
                )
            return result

    async def diagnose(self, session: BrowserSession) -> Dict[str, Any]:
        """
        Collect page facts that commonly explain shrunken screenshots.

        Returns:
            Diagnostic report; contains an "error" key if collection failed
        """
        report: Dict[str, Any] = {"viewport": None}
        try:
            report["viewport"] = session.viewport_size()
            report.update(await session.evaluate(DIAGNOSTIC_SCRIPT) or {})
        except Exception as e:
            self.log.warning(f"❌ Diagnostic failed: {e}")
            report["error"] = str(e)

        self.log.info(f"🔍 Screenshot diagnostic report: {report}")
        if self.attach_to_allure:
            attach_json(report, name="Screenshot Diagnostics")
        return report

    # =========================================================================
    # Preset Strategies
    # =========================================================================

    async def _capture_full(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        png = await session.screenshot(None, self.SCREENSHOT_OPTIONS)
        return self._save(request.name, request.suffix, png)

    async def _capture_fixed_viewport(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        width, height = request.viewport
        return await self._capture_scoped(
            session,
            request,
            viewport_override(session, width, height),
            self.viewport_settle_ms,
        )

    async def _capture_element(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        try:
            png = await self._grab_element(session, request.selector)
        except ElementNotFound as e:
            self.log.warning(f"❌ Element screenshot failed, falling back to full page: {e}")
            return await self._capture_fallback(session, request)
        return self._save(request.name, request.suffix, png)

    async def _capture_styled(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        # Injected CSS stays on the page for the rest of the session
        await session.inject_style(request.css_override or DEFAULT_CAPTURE_CSS)
        await session.wait(self.style_settle_ms)
        png = await session.screenshot(None, self.SCREENSHOT_OPTIONS)
        return self._save(request.name, request.suffix, png)

    async def _capture_zoomed(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        return await self._capture_scoped(
            session,
            request,
            zoom_override(session, request.zoom),
            self.zoom_settle_ms,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _capture_scoped(
        self,
        session: BrowserSession,
        request: CaptureRequest,
        scope: AsyncContextManager[Any],
        settle_ms: int,
    ) -> CaptureResult:
        """
        Full capture inside a session override, saved before the override ends.

        A file written before the restore step failed is still reported as
        succeeded, with the restore error in `error`.
        """
        result: Optional[CaptureResult] = None
        try:
            async with scope:
                await session.wait(settle_ms)
                png = await session.screenshot(None, self.SCREENSHOT_OPTIONS)
                result = self._save(request.name, request.suffix, png)
        except Exception as e:
            if result is None:
                raise
            self.log.warning(f"⚠️ Screenshot saved but session was not restored: {e}")
            result.error = f"Restore failed: {e}"
        return result

    async def _grab_element(self, session: BrowserSession, selector: str) -> bytes:
        try:
            handle = session.locate(selector)
            await session.wait_visible(handle, self.element_timeout)
            return await session.screenshot(handle, self.ELEMENT_SCREENSHOT_OPTIONS)
        except Exception as e:
            raise ElementNotFound(selector, e) from e

    async def _capture_fallback(
        self,
        session: BrowserSession,
        request: CaptureRequest,
    ) -> CaptureResult:
        result = await self._capture_labelled(session, request.name, "fallback")
        result.fallback_used = True
        return result

    async def _capture_labelled(
        self,
        session: BrowserSession,
        name: str,
        label: str,
    ) -> CaptureResult:
        """Full-page capture saved as `{name}-{label}.png`; failures become a result."""
        self.log.info(f"📸 Taking {label} screenshot: {name}")
        try:
            png = await session.screenshot(None, self.SCREENSHOT_OPTIONS)
            return self._save(name, label, png)
        except Exception as e:
            path = self._path_for(name, label)
            self.log.error(f"❌ {label.capitalize()} screenshot failed: {e}")
            return CaptureResult(path=str(path), succeeded=False, error=str(e))

    def _path_for(self, name: str, suffix: str) -> Path:
        if self.unique_names:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            return self.output_dir / f"{name}-{suffix}-{timestamp}.png"
        return self.output_dir / f"{name}-{suffix}.png"

    def _save(self, name: str, suffix: str, png: bytes) -> CaptureResult:
        path = self._path_for(name, suffix)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(png)
        except OSError as e:
            raise CaptureIOFailure(path, e) from e

        if self.attach_to_allure:
            attach_png(png, name=f"{name}-{suffix}")

        self.log.info(f"✅ Screenshot saved: {path}")
        return CaptureResult(path=str(path), succeeded=True)


__all__ = [
    "CaptureError",
    "ElementNotFound",
    "CaptureIOFailure",
    "CapturePreset",
    "CaptureRequest",
    "CaptureResult",
    "CaptureHelper",
    "DEFAULT_CAPTURE_CSS",
    "viewport_override",
    "zoom_override",
]
