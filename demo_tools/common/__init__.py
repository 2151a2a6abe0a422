"""
================================================================================
Demo Tools Common Utilities
================================================================================

Logging setup and small helpers shared by the framework and the runner.

Exports:
    - init_logger: Configure loguru sinks once per process
    - get_logger: Component-bound logger for injection into helpers
    - ensure_directory: Create a directory if missing

Usage:
    from demo_tools.common import init_logger, get_logger

    init_logger()
    helper = CaptureHelper(log=get_logger("capture"))

================================================================================
"""

import os
import sys
from typing import Any, Optional

from loguru import logger


DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<level>{message}</level>"
)

# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to. Defaults to LOG_FILE env.
        force: Re-initialize even if already done

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="logs/demo.log")
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    # Remove default handler
    logger.remove()
    logger.configure(extra={"component": "demo"})

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    format_string = format_string or DEFAULT_FORMAT

    # Add console handler
    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    # Add file handler if specified
    log_file = log_file or os.getenv("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            ensure_directory(log_dir)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation="10 MB",
            retention="7 days",
        )

    _logger_initialized = True
    logger.debug("Logger initialized successfully")


def get_logger(component: str, **extra: Any):
    """
    Returns a loguru logger bound to a component name.

    Helpers accept this as their `log` argument, so tests and callers can
    pass their own instead of relying on the global one.

    Args:
        component: Component name shown in log lines
        **extra: Additional bound context
    """
    return logger.bind(component=component, **extra)


# ============================================================
# Common Utilities
# ============================================================

def ensure_directory(path: str) -> str:
    """
    Ensures a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The path (for chaining)
    """
    os.makedirs(path, exist_ok=True)
    return path


# Export public API
__all__ = [
    "init_logger",
    "get_logger",
    "ensure_directory",
]
