"""
Default Registry
----------------
Builds the registry populated with every builtin tool.

`create_default_registry()` always returns a fresh instance;
`get_default_registry()` builds one lazily on first use and shares it.
"""

from typing import Optional
import logging
import threading

from infra.config import ToolSettings

from .builtin import register_builtin_tools
from .registry import ToolRegistry

logger = logging.getLogger("toolbridge.tools.defaults")

_default_registry: Optional[ToolRegistry] = None
_default_lock = threading.Lock()


def create_default_registry(settings: Optional[ToolSettings] = None) -> ToolRegistry:
    """Fresh registry with the builtin tools registered in a fixed order."""
    settings = settings or ToolSettings()
    registry = ToolRegistry(validate_arguments=settings.validate_arguments, name="default")
    count = register_builtin_tools(registry, settings)
    logger.info(f"Default registry ready with {count} tools")
    return registry


def get_default_registry() -> ToolRegistry:
    """Get the shared default registry, building it on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = create_default_registry()
        return _default_registry


def reset_default_registry() -> None:
    """Drop the shared registry so the next get builds a new one."""
    global _default_registry
    with _default_lock:
        _default_registry = None
