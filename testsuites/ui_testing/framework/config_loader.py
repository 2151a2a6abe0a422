"""
================================================================================
Configuration Loader
================================================================================

YAML-based browser and capture configuration with environment overrides.

Features:
    - Single YAML file describing browser, timeouts and capture settings
    - Environment variable override (BROWSER_HEADLESS overrides browser.headless)
    - Dot notation path access with type conversion against the default
    - CI profile: retries raised when the CI environment variable is set

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigLoader:
    """
    Shared settings for the browser, timeouts, recording and captures.

    Lookup order for `get("browser.headless")`:
        1. BROWSER_HEADLESS environment variable, typed like the default
        2. browser.headless in config.yaml
        3. the default passed by the caller

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("browser.viewport.width", 1366)
        1366
        >>> config.get("capture.zoom_settle_ms", 500)
        500
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """One loader per process; later calls get the same object."""
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._initialized = False
            cls._instance = instance
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Args:
            config_path: YAML file to read (DEFAULT_CONFIG_PATH if None).
                Ignored once the singleton is initialized.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        if not self._config_path.is_file():
            logger.warning(f"No config file at {self._config_path}, relying on defaults and env")
            self._config = {}
            return

        try:
            data = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse {self._config_path}: {e}") from e

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )

        self._config = data
        logger.debug(f"Config loaded: {self._config_path}")

    @staticmethod
    def env_name(key: str) -> str:
        """Environment variable that overrides `key` ("capture.output_dir" -> "CAPTURE_OUTPUT_DIR")."""
        return key.replace(".", "_").upper()

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key.

        Args:
            key: Dotted path such as "timeouts.navigation"
            default: Returned when neither env nor YAML provides the key;
                also decides how an env string is converted

        Returns:
            The resolved value
        """
        raw = os.environ.get(self.env_name(key))
        if raw is not None:
            return self._coerce(raw, default)

        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def get_section(self, section: str) -> Dict[str, Any]:
        """Copy of a top-level section ({} if absent)."""
        return dict(self._config.get(section) or {})

    @property
    def is_ci(self) -> bool:
        return bool(os.environ.get("CI"))

    @property
    def retries(self) -> int:
        """Test retries: `retries.ci` on CI, `retries.local` otherwise."""
        if self.is_ci:
            return int(self.get("retries.ci", 2))
        return int(self.get("retries.local", 1))

    def run_policy(self) -> Dict[str, Any]:
        """
        Limits applied to every browser test at collection time.

        Returns:
            {"reruns": retries for this environment,
             "timeout": timeouts.test converted to seconds}
        """
        return {
            "reruns": self.retries,
            "timeout": self.get("timeouts.test", 30000) / 1000,
        }

    def reload(self) -> None:
        """Re-read the YAML file."""
        self._load_config()
        logger.info(f"Config reloaded: {self._config_path}")

    @staticmethod
    def _coerce(raw: str, reference: Any) -> Any:
        # Env values are strings; match the type of the caller's default
        if isinstance(reference, bool):
            return raw.strip().lower() in ("true", "1", "yes", "on")
        for kind in (int, float):
            if isinstance(reference, kind):
                try:
                    return kind(raw)
                except ValueError:
                    return raw
        return raw

    @classmethod
    def reset(cls) -> None:
        """Forget the singleton so the next ConfigLoader() reads config again."""
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
]
