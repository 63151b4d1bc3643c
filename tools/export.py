"""
Export Adapters
---------------
Render registry descriptors into the tool-declaration formats of the two
function-calling protocols:

    OpenAI:    {"type": "function",
                "function": {"name", "description", "parameters"}}
    Anthropic: {"name", "description", "input_schema"}

Entries are built through pydantic models so the emitted dicts have a
checked, stable shape.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
import json

from pydantic import BaseModel, ConfigDict

from .registry import Tool, ToolRegistry


class Protocol(str, Enum):
    """Supported LLM function-calling protocols."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    @classmethod
    def parse(cls, value: Union["Protocol", str]) -> "Protocol":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"unknown protocol {value!r}; expected one of {[p.value for p in cls]}"
            ) from None


class FunctionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, Any]


class OpenAIToolSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["function"] = "function"
    function: FunctionSpec


class AnthropicToolSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: Dict[str, Any]


def openai_spec(tool: Tool) -> OpenAIToolSpec:
    return OpenAIToolSpec(
        function=FunctionSpec(
            name=tool.name,
            description=tool.description,
            parameters=tool.json_schema(),
        )
    )


def anthropic_spec(tool: Tool) -> AnthropicToolSpec:
    return AnthropicToolSpec(
        name=tool.name,
        description=tool.description,
        input_schema=tool.json_schema(),
    )


def to_openai_tools(registry: ToolRegistry) -> List[Dict[str, Any]]:
    """One OpenAI function declaration per registered tool."""
    return [openai_spec(tool).model_dump() for tool in registry.list_tools()]


def to_anthropic_tools(registry: ToolRegistry) -> List[Dict[str, Any]]:
    """One Anthropic tool declaration per registered tool."""
    return [anthropic_spec(tool).model_dump() for tool in registry.list_tools()]


_EXPORTERS = {
    Protocol.OPENAI: to_openai_tools,
    Protocol.ANTHROPIC: to_anthropic_tools,
}


def export_for_protocol(
    registry: ToolRegistry, protocol: Union[Protocol, str]
) -> List[Dict[str, Any]]:
    """Export every tool for one protocol. Raises ValueError on unknown protocols."""
    return _EXPORTERS[Protocol.parse(protocol)](registry)


def export_json(
    registry: ToolRegistry,
    protocol: Union[Protocol, str],
    indent: Optional[int] = 2,
) -> str:
    return json.dumps(export_for_protocol(registry, protocol), indent=indent)
