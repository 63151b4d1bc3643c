"""
Registry Tests
--------------
Registration, lookup, dispatch and the two error channels.
"""

import json
import logging

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import (
    DuplicateToolError,
    InvalidToolError,
    NoExecutorError,
    RegistrationError,
    ToolNotFoundError,
    CallShapeError,
    ArgumentError,
)
from tools.arguments import Arguments
from tools.registry import Category, Tool, ToolRegistry, stub_tool
from tools.result import Result
from tools.schema import EMPTY_SCHEMA, integer_param, object_schema, string_param


def make_tool(name, category=Category.DATA, executor=None, **kwargs):
    return Tool(
        name=name,
        description=f"{name} tool",
        category=category,
        executor=executor or (lambda ctx, args: Result.ok(name)),
        **kwargs,
    )


class TestRegistration:
    """Register / get / list."""

    def test_register_and_get(self, echo_tool):
        reg = ToolRegistry()
        reg.register(echo_tool)

        assert reg.get("echo") is echo_tool
        assert "echo" in reg
        assert len(reg) == 1

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("missing") is None
        assert "missing" not in registry

    def test_duplicate_rejected(self, registry, echo_tool):
        with pytest.raises(DuplicateToolError) as exc_info:
            registry.register(echo_tool)

        assert "echo" in str(exc_info.value)
        assert "already registered" in str(exc_info.value)
        assert len(registry) == 1

    def test_duplicate_keeps_first(self, registry):
        other = make_tool("echo")
        with pytest.raises(RegistrationError):
            registry.register(other)
        assert registry.get("echo") is not other

    def test_empty_name_rejected(self):
        reg = ToolRegistry()
        with pytest.raises(InvalidToolError):
            reg.register(make_tool(""))
        assert len(reg) == 0

    def test_non_tool_rejected(self):
        reg = ToolRegistry()
        with pytest.raises(InvalidToolError):
            reg.register({"name": "x"})

    def test_list_in_registration_order(self):
        reg = ToolRegistry()
        for name in ["zeta", "alpha", "mid"]:
            reg.register(make_tool(name))

        assert [t.name for t in reg.list_tools()] == ["zeta", "alpha", "mid"]
        assert reg.names() == ["zeta", "alpha", "mid"]

    def test_list_is_snapshot(self, registry):
        snapshot = registry.list_tools()
        registry.register(make_tool("later"))
        assert len(snapshot) == 1
        assert len(registry.list_tools()) == 2

    def test_list_by_category(self):
        reg = ToolRegistry()
        reg.register(make_tool("a", Category.DATA))
        reg.register(make_tool("b", Category.HTTP))
        reg.register(make_tool("c", Category.DATA))

        assert [t.name for t in reg.list_by_category(Category.DATA)] == ["a", "c"]
        assert [t.name for t in reg.list_by_category("http")] == ["b"]
        assert reg.list_by_category(Category.AI) == []

    def test_unknown_category_string_is_empty(self, registry):
        assert registry.list_by_category("no-such-category") == []

    def test_categories_map(self):
        reg = ToolRegistry()
        reg.register(make_tool("a", Category.DATA))
        reg.register(make_tool("b", Category.HTTP))

        assert reg.categories() == {"data": ["a"], "http": ["b"]}

    def test_register_all_returns_count(self):
        reg = ToolRegistry()
        assert reg.register_all([make_tool("a"), make_tool("b")]) == 2


class TestCategory:
    """Closed category set with aliases."""

    def test_parse_values(self):
        assert Category.parse("computation") is Category.COMPUTATION
        assert Category.parse(" HTTP ") is Category.HTTP
        assert Category.parse(Category.AI) is Category.AI

    def test_aliases(self):
        assert Category.parse("business") is Category.MESSAGING
        assert Category.parse("vision") is Category.IMAGE

    def test_unknown_rejected(self):
        assert Category.lookup("weather") is None
        with pytest.raises(ValueError):
            Category.parse("weather")

    def test_tool_coerces_category_string(self):
        tool = Tool(name="t", description="", category="vision")
        assert tool.category is Category.IMAGE

    def test_tool_rejects_unknown_category(self):
        with pytest.raises(ValueError):
            Tool(name="t", description="", category="weather")

    def test_sixteen_categories(self):
        assert len(list(Category)) == 16


class TestTool:
    """Descriptor behavior."""

    def test_tool_is_frozen(self, echo_tool):
        with pytest.raises(Exception):
            echo_tool.name = "other"

    def test_parameters_must_be_object(self):
        with pytest.raises(ValueError):
            Tool(name="t", description="", category=Category.DATA,
                 parameters=string_param("not an object"))

    def test_default_parameters_empty_object(self):
        tool = Tool(name="t", description="", category=Category.DATA)
        assert tool.parameters is EMPTY_SCHEMA
        assert tool.json_schema() == {"type": "object", "properties": {}, "required": []}

    def test_execute_without_executor_raises(self, context):
        tool = Tool(name="t", description="", category=Category.DATA)
        with pytest.raises(NoExecutorError):
            tool.execute(context, {})

    def test_to_dict(self, echo_tool):
        data = echo_tool.to_dict()
        assert data["name"] == "echo"
        assert data["category"] == "data"
        assert data["parameters"]["required"] == ["message"]
        assert data["is_stub"] is False
        assert "executor" not in data
        json.dumps(data)


class TestDispatch:
    """ToolRegistry.execute."""

    def test_echo(self, registry, context):
        result = registry.execute(context, "echo", {"message": "hi"})

        assert result.success is True
        assert result.data == "hi"
        assert result.error == ""

    def test_context_optional(self, registry):
        assert registry.execute(None, "echo", {"message": "hi"}).data == "hi"

    def test_unknown_tool_raises(self, registry, context):
        with pytest.raises(ToolNotFoundError) as exc_info:
            registry.execute(context, "missing", {})

        assert isinstance(exc_info.value, CallShapeError)
        assert exc_info.value.tool_name == "missing"

    def test_no_executor_raises(self, context):
        reg = ToolRegistry()
        reg.register(Tool(name="bare", description="", category=Category.DATA))

        with pytest.raises(NoExecutorError):
            reg.execute(context, "bare", {})

    def test_missing_required_is_domain_error(self, registry, context):
        result = registry.execute(context, "echo", {})

        assert result.success is False
        assert "message" in result.error
        assert result.metadata["error_category"] == "VALIDATION_ERROR"

    def test_wrong_type_is_domain_error(self, registry, context):
        result = registry.execute(context, "echo", {"message": 42})
        assert result.success is False
        assert "Invalid type for message" in result.error

    def test_non_dict_args_is_domain_error(self, registry, context):
        result = registry.execute(context, "echo", ["hi"])
        assert result.success is False
        assert "object" in result.error

    def test_validation_can_be_disabled(self, context):
        seen = {}

        def executor(ctx, args):
            seen.update(args)
            return Result.ok(Arguments(args).get_int("count", 0))

        reg = ToolRegistry(validate_arguments=False)
        reg.register(Tool(
            name="count",
            description="",
            category=Category.DATA,
            parameters=object_schema({"count": integer_param("n", maximum=3)}),
            executor=executor,
        ))

        result = reg.execute(context, "count", {"count": 10})
        assert result.success is True
        assert result.data == 10

    def test_validation_runs_before_executor(self, context):
        calls = []
        reg = ToolRegistry()
        reg.register(Tool(
            name="strict",
            description="",
            category=Category.DATA,
            parameters=object_schema({"n": integer_param("n", maximum=3)}, required=["n"]),
            executor=lambda ctx, args: calls.append(args) or Result.ok(),
        ))

        result = reg.execute(context, "strict", {"n": 4})
        assert result.success is False
        assert calls == []

    def test_argument_error_becomes_failure(self, context):
        def executor(ctx, args):
            Arguments(args).get_str("needed")
            return Result.ok()

        reg = ToolRegistry(validate_arguments=False)
        reg.register(make_tool("needs", executor=executor))

        result = reg.execute(context, "needs", {})
        assert result.success is False
        assert result.error == "needed is required"
        assert result.metadata["error_category"] == "VALIDATION_ERROR"

    def test_executor_exception_becomes_failure(self, context):
        def executor(ctx, args):
            raise FileNotFoundError("nope.txt")

        reg = ToolRegistry()
        reg.register(make_tool("boom", executor=executor))

        result = reg.execute(context, "boom", {})
        assert result.success is False
        assert result.error == "nope.txt"
        assert result.metadata["error_category"] == "NOT_FOUND"

    def test_non_result_is_wrapped(self, context, caplog):
        reg = ToolRegistry()
        reg.register(make_tool("raw", executor=lambda ctx, args: {"x": 1}))

        with caplog.at_level(logging.WARNING, logger="toolbridge"):
            result = reg.execute(context, "raw", {})

        assert result.success is True
        assert result.data == {"x": 1}
        assert "wrapping as success" in caplog.text

    def test_explicit_failure_passes_through(self, context):
        reg = ToolRegistry()
        reg.register(make_tool("fails", executor=lambda ctx, args: Result.from_error("bad input")))

        result = reg.execute(context, "fails", {})
        assert result.success is False
        assert result.error == "bad input"

    def test_dispatch_is_logged(self, registry, context, caplog):
        with caplog.at_level(logging.INFO, logger="toolbridge"):
            registry.execute(context, "echo", {"message": "hi"})

        records = [r for r in caplog.records if getattr(r, "tool_name", None) == "echo"]
        assert len(records) == 1
        assert records[0].success is True


class TestStubs:
    """Stub tools always succeed."""

    @pytest.fixture
    def stub_registry(self):
        reg = ToolRegistry()
        reg.register(stub_tool(
            name="email",
            description="Send email",
            category="business",
            parameters=object_schema({"to": string_param("Recipient")}, required=["to"]),
            message="Email requires SMTP configuration",
            requires_auth=True,
        ))
        return reg

    @pytest.mark.parametrize("args", [
        {},
        {"to": "a@example.com"},
        {"to": 123, "extra": [1, 2]},
        None,
    ])
    def test_stub_succeeds_for_any_input(self, stub_registry, context, args):
        result = stub_registry.execute(context, "email", args)

        assert result.success is True
        assert result.stubbed is True
        assert result.metadata["stubbed"] is True
        assert result.data == "Email requires SMTP configuration"

    def test_stub_flags(self, stub_registry):
        tool = stub_registry.get("email")
        assert tool.is_stub is True
        assert tool.requires_auth is True
        assert tool.category is Category.MESSAGING
