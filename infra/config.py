"""
Configuration Manager
---------------------
Loads configuration from YAML with environment variable overrides.

Example toolbridge.yaml:

    registry:
      validate_arguments: true
    tools:
      http_timeout: 30
      shell_timeout: 30
      max_read_bytes: 10485760
      disabled_categories: [execution]
    logging:
      level: INFO
      dir: logs

Environment variables override file values:
TOOLBRIDGE_TOOLS_HTTP_TIMEOUT=5 overrides tools.http_timeout.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging
import os

import yaml

ENV_PREFIX = "TOOLBRIDGE"
DEFAULT_CONFIG_PATH = "toolbridge.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigManager:
    """
    Centralized configuration management.
    Loads configuration from YAML with environment variable overrides.
    """

    def __init__(self, config_path: Optional[str] = None):
        self._config_path = Path(config_path or DEFAULT_CONFIG_PATH)
        self._config: Dict[str, Any] = {}
        self._logger = logging.getLogger("toolbridge.infra.config")

        self._load_config()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigManager":
        """Build a manager from an in-memory mapping (no file access)."""
        manager = cls.__new__(cls)
        manager._config_path = Path(DEFAULT_CONFIG_PATH)
        manager._config = dict(data)
        manager._logger = logging.getLogger("toolbridge.infra.config")
        return manager

    def _load_config(self) -> None:
        """Load configuration from file."""
        if self._config_path.exists():
            with open(self._config_path, "r") as f:
                self._config = yaml.safe_load(f) or {}
            self._logger.info(f"Loaded config from {self._config_path}")
        else:
            self._logger.debug(f"Config file not found: {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.
        Supports dot notation: 'section.key'
        Environment variables override file config.
        """
        env_key = f"{ENV_PREFIX}_{key.upper().replace('.', '_')}"
        env_value = os.getenv(env_key)
        if env_value is not None:
            return env_value

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only, not persisted)."""
        parts = key.split(".")
        config = self._config

        for part in parts[:-1]:
            if part not in config:
                config[part] = {}
            config = config[part]

        config[parts[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section."""
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _as_float(value: Any, default: float) -> float:
    if value is None:
        return default
    return float(value)


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    return int(value)


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]


@dataclass
class ToolSettings:
    """Settings consumed by the registry bootstrap and builtin tools."""
    validate_arguments: bool = True   # Check args against the schema before dispatch
    http_timeout: float = 30.0        # Seconds, when the context has no deadline
    shell_timeout: float = 30.0
    max_read_bytes: int = 10 * 1024 * 1024  # 10MB
    disabled_categories: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @classmethod
    def from_config(cls, config: ConfigManager) -> "ToolSettings":
        defaults = cls()
        return cls(
            validate_arguments=_as_bool(
                config.get("registry.validate_arguments"), defaults.validate_arguments
            ),
            http_timeout=_as_float(config.get("tools.http_timeout"), defaults.http_timeout),
            shell_timeout=_as_float(config.get("tools.shell_timeout"), defaults.shell_timeout),
            max_read_bytes=_as_int(config.get("tools.max_read_bytes"), defaults.max_read_bytes),
            disabled_categories=_as_list(config.get("tools.disabled_categories")),
            log_level=str(config.get("logging.level", defaults.log_level)).upper(),
            log_dir=config.get("logging.dir"),
        )


def load_settings(config_path: Optional[str] = None) -> ToolSettings:
    """Load settings from YAML (if present) and the environment."""
    return ToolSettings.from_config(ConfigManager(config_path))
