"""
Call Bridge
-----------
Adapter between an LLM tool-calling loop and the registry.

The loop hands over (context, name, args) and gets back a JSON string it
can feed to the model as the tool result. Domain failures are encoded in
that string; call-shape errors propagate as exceptions since they point
at a broken integration, not at something the model can fix.
"""

from typing import Any, Dict, Optional
import logging

from core.errors import CallShapeError
from infra.logging import CallContext, get_call_id

from .context import ExecutionContext
from .registry import ToolRegistry


class ToolCallHandler:
    """Callable (context, name, args) -> JSON-encoded Result."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry
        self._logger = logging.getLogger("toolbridge.tools.bridge")

    def __call__(
        self,
        context: Optional[ExecutionContext],
        name: str,
        args: Optional[Dict[str, Any]] = None,
    ) -> str:
        # Reuse the caller's call_id when the loop already opened one
        with CallContext(get_call_id()) as call_id:
            self._logger.debug(f"Handling tool call {name} ({call_id})")
            try:
                result = self.registry.execute(context, name, args)
            except CallShapeError as e:
                self._logger.error(f"Rejected tool call {name}: {e}")
                raise
            return result.to_json()


def create_tool_handler(registry: Optional[ToolRegistry] = None) -> ToolCallHandler:
    """Handler over registry, or over the shared default registry."""
    if registry is None:
        from .defaults import get_default_registry
        registry = get_default_registry()
    return ToolCallHandler(registry)
