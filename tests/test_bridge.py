"""
Call Bridge Tests
-----------------
"""

import json
import logging

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import ToolNotFoundError
from infra.logging import CallContext, get_call_id
from tools.bridge import ToolCallHandler, create_tool_handler
from tools.defaults import get_default_registry, reset_default_registry
from tools.registry import Category, Tool
from tools.result import Result


class TestToolCallHandler:
    """(context, name, args) -> JSON string."""

    def test_success_json(self, registry, context):
        handler = ToolCallHandler(registry)
        output = handler(context, "echo", {"message": "hi"})

        assert json.loads(output) == {"success": True, "data": "hi"}

    def test_domain_failure_json(self, registry, context):
        output = json.loads(ToolCallHandler(registry)(context, "echo", {}))

        assert output["success"] is False
        assert "message" in output["error"]

    def test_unknown_tool_raises(self, registry, context, caplog):
        handler = ToolCallHandler(registry)

        with caplog.at_level(logging.ERROR, logger="toolbridge"):
            with pytest.raises(ToolNotFoundError):
                handler(context, "missing", {})

        assert "missing" in caplog.text

    def test_call_id_set_during_dispatch(self, registry, context):
        seen = []
        registry.register(Tool(
            name="whoami",
            description="",
            category=Category.DATA,
            executor=lambda ctx, args: Result.ok(seen.append(get_call_id())),
        ))

        ToolCallHandler(registry)(context, "whoami")

        assert seen[0] is not None
        assert seen[0].startswith("call_")
        assert get_call_id() is None

    def test_call_id_reused_from_caller(self, registry, context):
        seen = []
        registry.register(Tool(
            name="whoami",
            description="",
            category=Category.DATA,
            executor=lambda ctx, args: Result.ok(seen.append(get_call_id())),
        ))

        with CallContext("call_outer"):
            ToolCallHandler(registry)(context, "whoami")

        assert seen == ["call_outer"]


class TestCreateToolHandler:

    def test_explicit_registry(self, registry):
        assert create_tool_handler(registry).registry is registry

    def test_default_registry(self):
        reset_default_registry()
        try:
            handler = create_tool_handler()
            assert handler.registry is get_default_registry()
            assert "calculate" in handler.registry
        finally:
            reset_default_registry()
