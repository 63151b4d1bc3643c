"""
Contract Tests
---------------
Public API surface of the package.

These tests verify:
- Public symbols exist
- Error hierarchy keeps the two channels apart
- Breaking changes cause test failure
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))


class TestCoreAPI:
    """Verify core exports."""

    def test_exports_exist(self):
        import core

        for name in core.__all__:
            assert hasattr(core, name), name

    def test_error_category_values(self):
        from core.errors import ErrorCategory

        # These values appear in Result.metadata and must remain stable
        for name in [
            "TOOL_FAILURE", "VALIDATION_ERROR", "PERMISSION_ERROR", "NETWORK_ERROR",
            "TIMEOUT_ERROR", "NOT_FOUND", "CALL_SHAPE", "REGISTRATION_ERROR",
        ]:
            assert hasattr(ErrorCategory, name)

    def test_channels_are_disjoint(self):
        from core.errors import ArgumentError, CallShapeError, RegistrationError

        assert not issubclass(ArgumentError, CallShapeError)
        assert not issubclass(RegistrationError, CallShapeError)


class TestToolsAPI:
    """Verify tools exports."""

    def test_exports_exist(self):
        import tools

        for name in tools.__all__:
            assert hasattr(tools, name), name

    def test_executor_signature(self):
        from tools import ExecutionContext, Result, Tool, ToolRegistry

        def executor(context: ExecutionContext, args: dict) -> Result:
            return Result.ok(args)

        reg = ToolRegistry()
        reg.register(Tool(name="x", description="", category="data", executor=executor))
        assert reg.execute(ExecutionContext(), "x", {}).success is True

    def test_category_values(self):
        from tools import Category

        assert [c.value for c in Category] == [
            "computation", "http", "file", "database", "cache", "security",
            "time", "data", "finance", "messaging", "image", "audio",
            "template", "archive", "execution", "ai",
        ]

    def test_protocols(self):
        from tools import Protocol

        assert {p.value for p in Protocol} == {"openai", "anthropic"}


class TestInfraAPI:
    """Verify infra exports."""

    def test_exports_exist(self):
        import infra

        for name in infra.__all__:
            assert hasattr(infra, name), name


class TestBuiltinAPI:
    """Every builtin module exposes build_tools(settings)."""

    def test_factories(self, settings):
        from tools.builtin import TOOL_FACTORIES
        from tools.registry import Tool

        seen = set()
        for category, factory in TOOL_FACTORIES:
            built = factory(settings)
            assert built, category
            assert all(isinstance(t, Tool) for t in built)
            assert all(t.category is category for t in built)
            seen.add(category)

        assert len(seen) == len(TOOL_FACTORIES)

    def test_unique_names(self, settings):
        from tools.builtin import build_builtin_tools

        names = [t.name for t in build_builtin_tools(settings)]
        assert len(names) == len(set(names))
