# Infrastructure module - configuration and logging
# YAML config with env overrides, Rich console + JSON file logging

from .config import ConfigManager, ToolSettings, load_settings
from .logging import (
    get_logger, configure_logging, reset_logging, CallContext,
    log_tool_call, get_call_id, generate_call_id
)

__all__ = [
    # Config
    "ConfigManager",
    "ToolSettings",
    "load_settings",
    # Logging
    "get_logger",
    "configure_logging",
    "reset_logging",
    "CallContext",
    "log_tool_call",
    "get_call_id",
    "generate_call_id",
]
