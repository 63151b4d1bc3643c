# Builtin tools - one module per category, each exposing build_tools(settings)
# Registration is explicit: nothing is registered at import time.

from typing import Callable, List, Optional, Tuple
import logging

from infra.config import ToolSettings

from ..registry import Category, Tool, ToolRegistry
from . import (
    ai,
    archive,
    audio,
    cache,
    clock,
    computation,
    data,
    database,
    execution,
    file,
    finance,
    image,
    messaging,
    security,
    template,
    web,
)

logger = logging.getLogger("toolbridge.tools.builtin")

ToolFactory = Callable[[ToolSettings], List[Tool]]

# Registration order is listing order
TOOL_FACTORIES: List[Tuple[Category, ToolFactory]] = [
    (Category.COMPUTATION, computation.build_tools),
    (Category.HTTP, web.build_tools),
    (Category.FILE, file.build_tools),
    (Category.DATABASE, database.build_tools),
    (Category.CACHE, cache.build_tools),
    (Category.SECURITY, security.build_tools),
    (Category.TIME, clock.build_tools),
    (Category.DATA, data.build_tools),
    (Category.FINANCE, finance.build_tools),
    (Category.MESSAGING, messaging.build_tools),
    (Category.IMAGE, image.build_tools),
    (Category.AUDIO, audio.build_tools),
    (Category.TEMPLATE, template.build_tools),
    (Category.ARCHIVE, archive.build_tools),
    (Category.EXECUTION, execution.build_tools),
    (Category.AI, ai.build_tools),
]


def build_builtin_tools(settings: Optional[ToolSettings] = None) -> List[Tool]:
    """Every builtin tool whose category is not disabled, in registration order."""
    settings = settings or ToolSettings()
    disabled = {
        category
        for category in (Category.lookup(name) for name in settings.disabled_categories)
        if category is not None
    }

    tools: List[Tool] = []
    for category, factory in TOOL_FACTORIES:
        if category in disabled:
            logger.info(f"Skipping disabled category: {category.value}")
            continue
        tools.extend(factory(settings))
    return tools


def register_builtin_tools(
    registry: ToolRegistry, settings: Optional[ToolSettings] = None
) -> int:
    """Register the builtin tools into registry. Returns the number registered."""
    count = registry.register_all(build_builtin_tools(settings))
    logger.debug(f"Registered {count} builtin tools into {registry.name}")
    return count


__all__ = [
    "TOOL_FACTORIES",
    "ToolFactory",
    "build_builtin_tools",
    "register_builtin_tools",
]
