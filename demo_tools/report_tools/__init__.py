"""Allure reporting helpers."""

from .allure_utils import (
    TestResultSummary,
    attach_json,
    attach_png,
    summarize_results,
)

__all__ = [
    "TestResultSummary",
    "attach_json",
    "attach_png",
    "summarize_results",
]
