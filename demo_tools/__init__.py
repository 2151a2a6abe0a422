"""
================================================================================
Demo Tools
================================================================================

Shared utilities for the Playwright demo suite.

Modules:
    - common: Loguru logging setup and small filesystem helpers
    - report_tools: Allure attachment helpers and result summaries

Example:
    from demo_tools.common import init_logger, get_logger
    from demo_tools.report_tools.allure_utils import attach_png

    init_logger(level="DEBUG")
    log = get_logger("capture")
    log.info("Ready")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
