# Tools module - Tool registry, dispatch and export
# Each tool: name, JSON schema, category, executor
# This registry is the firewall between LLM and system

from .schema import (
    ParameterSchema, ParameterType,
    string_param, number_param, integer_param, bool_param,
    enum_param, array_param, object_param,
    object_schema, simple_object_schema,
)
from .result import Result
from .context import ExecutionContext, ContextCancelledError
from .arguments import Arguments
from .registry import Category, Tool, ToolExecutor, ToolRegistry, stub_tool
from .composition import create_subset, create_by_categories
from .export import (
    Protocol, to_openai_tools, to_anthropic_tools,
    export_for_protocol, export_json,
)
from .bridge import ToolCallHandler, create_tool_handler
from .defaults import create_default_registry, get_default_registry

__all__ = [
    # Schema
    "ParameterSchema",
    "ParameterType",
    "string_param",
    "number_param",
    "integer_param",
    "bool_param",
    "enum_param",
    "array_param",
    "object_param",
    "object_schema",
    "simple_object_schema",
    # Execution
    "Result",
    "ExecutionContext",
    "ContextCancelledError",
    "Arguments",
    # Registry
    "Category",
    "Tool",
    "ToolExecutor",
    "ToolRegistry",
    "stub_tool",
    "create_subset",
    "create_by_categories",
    # Export
    "Protocol",
    "to_openai_tools",
    "to_anthropic_tools",
    "export_for_protocol",
    "export_json",
    # Bridge
    "ToolCallHandler",
    "create_tool_handler",
    "create_default_registry",
    "get_default_registry",
]
