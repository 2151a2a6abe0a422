"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based helpers for the UI demo suite.

Components:
    - retry_executor: Bounded retry with constant backoff for async actions
    - capture_helper: Screenshot presets (full, fixed viewport, element, styled, zoomed)
    - browser_session: Narrow browser contract and its Playwright adapter
    - browser_manager: Browser lifecycle driven by config.yaml
    - demo_helpers: Demo pacing, step logging and quick validations
    - config_loader: YAML configuration with environment overrides

Author: Automation Team
License: MIT
================================================================================
"""

from .retry_executor import (
    ActionFailed,
    RetriesExhausted,
    RetryError,
    RetryExecutor,
    RetryPolicy,
    async_retry,
    retry_action,
)
from .capture_helper import (
    CaptureError,
    CaptureHelper,
    CaptureIOFailure,
    CapturePreset,
    CaptureRequest,
    CaptureResult,
    ElementNotFound,
)
from .browser_session import BrowserSession, PlaywrightSession
from .browser_manager import BrowserManager
from .demo_helpers import DemoHelpers
from .config_loader import ConfigLoader, ConfigurationError

__all__ = [
    "ActionFailed",
    "RetriesExhausted",
    "RetryError",
    "RetryExecutor",
    "RetryPolicy",
    "async_retry",
    "retry_action",
    "CaptureError",
    "CaptureHelper",
    "CaptureIOFailure",
    "CapturePreset",
    "CaptureRequest",
    "CaptureResult",
    "ElementNotFound",
    "BrowserSession",
    "PlaywrightSession",
    "BrowserManager",
    "DemoHelpers",
    "ConfigLoader",
    "ConfigurationError",
]
