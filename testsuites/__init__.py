"""
Test suites package.

Holds the Playwright demo framework (`ui_testing/framework`), the live
recorded flows (`ui_testing/tests`), browser-free unit tests (`unit`) and
the shared YAML configuration (`config`).

Kept importable so `run_tests.py` and IDEs can resolve the framework modules.
"""
