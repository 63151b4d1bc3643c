"""
Export Adapter Tests
--------------------
OpenAI and Anthropic tool declarations.
"""

import json

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from tools.export import (
    Protocol,
    anthropic_spec,
    export_for_protocol,
    export_json,
    openai_spec,
    to_anthropic_tools,
    to_openai_tools,
)
from tools.registry import ToolRegistry


class TestOpenAI:
    """{"type": "function", "function": {...}}"""

    def test_shape(self, echo_tool):
        entry = openai_spec(echo_tool).model_dump()

        assert entry == {
            "type": "function",
            "function": {
                "name": "echo",
                "description": "Echo the message back",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "message": {"type": "string", "description": "Message to echo"},
                    },
                    "required": ["message"],
                },
            },
        }

    def test_one_entry_per_tool(self, default_registry):
        exported = to_openai_tools(default_registry)

        assert len(exported) == len(default_registry)
        assert [e["function"]["name"] for e in exported] == default_registry.names()

    def test_every_parameters_block_is_an_object(self, default_registry):
        for entry in to_openai_tools(default_registry):
            params = entry["function"]["parameters"]
            assert params["type"] == "object"
            assert isinstance(params["properties"], dict)
            assert isinstance(params["required"], list)


class TestAnthropic:
    """{"name", "description", "input_schema"}"""

    def test_shape(self, echo_tool):
        entry = anthropic_spec(echo_tool).model_dump()

        assert set(entry) == {"name", "description", "input_schema"}
        assert entry["input_schema"]["required"] == ["message"]

    def test_one_entry_per_tool(self, default_registry):
        exported = to_anthropic_tools(default_registry)
        assert len(exported) == len(default_registry)
        assert {e["name"] for e in exported} == set(default_registry.names())

    def test_same_schema_as_openai(self, default_registry):
        openai = {e["function"]["name"]: e["function"]["parameters"]
                  for e in to_openai_tools(default_registry)}
        for entry in to_anthropic_tools(default_registry):
            assert entry["input_schema"] == openai[entry["name"]]


class TestExportForProtocol:
    """Protocol dispatch and JSON output."""

    @pytest.mark.parametrize("protocol", ["openai", "anthropic", Protocol.OPENAI, " Anthropic "])
    def test_known_protocols(self, registry, protocol):
        assert len(export_for_protocol(registry, protocol)) == 1

    def test_unknown_protocol(self, registry):
        with pytest.raises(ValueError, match="unknown protocol"):
            export_for_protocol(registry, "gemini")

    def test_empty_registry(self):
        assert export_for_protocol(ToolRegistry(), "openai") == []

    def test_export_json_parses(self, default_registry):
        parsed = json.loads(export_json(default_registry, "anthropic"))
        assert len(parsed) == len(default_registry)
        assert parsed == to_anthropic_tools(default_registry)

    def test_export_json_compact(self, registry):
        text = export_json(registry, "openai", indent=None)
        assert "\n" not in text
