"""
Registry Composition
--------------------
Least-privilege views over a parent registry.

A derived registry is a fresh ToolRegistry holding references to the
parent's Tool objects; nothing is copied. Names or categories the parent
does not have are skipped.
"""

from typing import Iterable, Union
import logging

from .registry import Category, ToolRegistry

logger = logging.getLogger("toolbridge.tools.composition")


def create_subset(names: Iterable[str], parent: ToolRegistry) -> ToolRegistry:
    """Registry exposing only the named tools of parent."""
    names = list(names)
    child = ToolRegistry(
        validate_arguments=parent.validate_arguments,
        name=f"{parent.name}/subset",
    )

    for name in names:
        if name in child:
            continue
        tool = parent.get(name)
        if tool is None:
            logger.debug(f"Subset of {parent.name}: skipping unknown tool {name}")
            continue
        child.register(tool)

    logger.debug(f"Created subset of {parent.name} with {len(child)}/{len(names)} tools")
    return child


def create_by_categories(
    categories: Iterable[Union[Category, str]],
    parent: ToolRegistry,
) -> ToolRegistry:
    """Registry exposing every tool of the given categories."""
    wanted = []
    for category in categories:
        resolved = Category.lookup(category)
        if resolved is None:
            logger.debug(f"Category view of {parent.name}: skipping unknown category {category!r}")
            continue
        if resolved not in wanted:
            wanted.append(resolved)

    child = ToolRegistry(
        validate_arguments=parent.validate_arguments,
        name=f"{parent.name}/{'+'.join(c.value for c in wanted) or 'empty'}",
    )

    # Parent order, not argument order, so listings stay in registration order
    for tool in parent.list_tools():
        if tool.category in wanted:
            child.register(tool)

    return child
