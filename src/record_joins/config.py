"""
Configuration Loader

Loads record_joins configuration from record_joins.json in the project root.
Environment variables always take precedence over config file values.

Config file location (in order of precedence):
1. RECORD_JOINS_PROJECT_ROOT/record_joins.json (if RECORD_JOINS_PROJECT_ROOT is set)
2. CWD/record_joins.json

Supported settings in record_joins.json:
{
    "key_separator": "||~~||",     // -> RECORD_JOINS_KEY_SEPARATOR
    "debug_log": "1",              // -> RECORD_JOINS_DEBUG_LOG
    "log_dir": ".record_joins"     // -> RECORD_JOINS_LOG_DIR
}
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .logging_config import configure_logger_for_debug_trace, wire_debug_trace_loggers

logger = configure_logger_for_debug_trace(__name__)

DEFAULT_KEY_SEPARATOR = "||~~||"

CONFIG_FILENAME = "record_joins.json"


class ConfigLoader:
    """
    Loads configuration from record_joins.json file.

    ::: This is-in-layer Service-Layer.
    ::: This is a loader.
    ::: This is-in-process Main-Process.
    ::: This is stateless.

    Priority: Environment variables > record_joins.json > defaults
    """

    # Mapping from record_joins.json keys to environment variable names
    CONFIG_KEY_TO_ENV = {
        "key_separator": "RECORD_JOINS_KEY_SEPARATOR",
        "debug_log": "RECORD_JOINS_DEBUG_LOG",
        "log_dir": "RECORD_JOINS_LOG_DIR",
    }

    DEFAULTS = {
        "key_separator": DEFAULT_KEY_SEPARATOR,
        "debug_log": "",
        "log_dir": "",
    }

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._config_path: Optional[Path] = None
        self._loaded = False

    def load(self, project_root: Optional[Path] = None) -> bool:
        """
        Load configuration from record_joins.json.

        Args:
            project_root: Project root directory. If None, uses
                RECORD_JOINS_PROJECT_ROOT or CWD.

        Returns:
            True if config file was found and loaded, False otherwise.
        """
        if self._loaded:
            return self._config_path is not None

        if project_root is None:
            env_root = os.getenv("RECORD_JOINS_PROJECT_ROOT")
            project_root = Path(env_root) if env_root else Path.cwd()

        config_path = Path(project_root) / CONFIG_FILENAME
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    self._config = self._validate(json.load(f), config_path)
                self._config_path = config_path
                logger.debug("Loaded config from: %s", config_path)
                self._apply_config()
                wire_debug_trace_loggers()
            except json.JSONDecodeError as e:
                logger.warning("Invalid JSON in %s: %s", config_path, e)
                self._config = {}

        self._loaded = True
        return self._config_path is not None

    @classmethod
    def _validate(cls, data: Any, config_path: Path) -> Dict[str, Any]:
        """
        Check the parsed file before anything is applied.

        Raises:
            ConfigurationError: if the file is not a JSON object, or a known
                setting is not a string, number or boolean
        """
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{config_path} must contain a JSON object, got {type(data).__name__}"
            )
        for config_key in cls.CONFIG_KEY_TO_ENV:
            if config_key in data and not isinstance(data[config_key], (str, int, float)):
                raise ConfigurationError(
                    f"{config_path}: {config_key!r} must be a string, number or "
                    f"boolean, got {type(data[config_key]).__name__}"
                )
        return data

    def _apply_config(self) -> None:
        """
        Apply config values as environment variables (only if not already set).
        This allows env vars to override config file values.
        """
        for config_key, env_var in self.CONFIG_KEY_TO_ENV.items():
            if config_key not in self._config:
                continue
            if os.getenv(env_var):
                continue
            value = self._config[config_key]
            if isinstance(value, bool):
                value = "true" if value else ""
            elif isinstance(value, (int, float)):
                value = str(value)
            os.environ[env_var] = value
            logger.debug("%s=%r (from %s)", env_var, value, CONFIG_FILENAME)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value, environment first, then file, then default."""
        env_var = self.CONFIG_KEY_TO_ENV.get(key)
        if env_var:
            env_value = os.getenv(env_var)
            if env_value is not None:
                return env_value
        if key in self._config:
            return self._config[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    @property
    def config_path(self) -> Optional[Path]:
        """Path to the loaded config file, or None if not loaded."""
        return self._config_path

    @property
    def config(self) -> Dict[str, Any]:
        """The loaded configuration dictionary."""
        return self._config.copy()


# Global singleton instance
_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def reset_config_loader() -> None:
    """Drop the global loader so the next call re-reads the config file."""
    global _config_loader
    _config_loader = None


def load_config(project_root: Optional[Path] = None) -> bool:
    """
    Load configuration from record_joins.json.

    Args:
        project_root: Project root directory. If None, auto-detects.

    Returns:
        True if config was loaded, False otherwise.
    """
    return get_config_loader().load(project_root)


def get_key_separator() -> str:
    """
    Separator used between composite key parts.

    Raises:
        ConfigurationError: if the configured separator is empty
    """
    separator = get_config_loader().get("key_separator")
    if not separator:
        raise ConfigurationError(
            "RECORD_JOINS_KEY_SEPARATOR must be a non-empty string"
        )
    return separator
