"""
AI Tools
--------
embed, classify, sentiment, translate. Each needs a model provider and is
a stub.
"""

from typing import List

from infra.config import ToolSettings

from ..registry import Category, Tool, stub_tool
from ..schema import array_param, object_schema, string_param

_PROVIDER_HINT = "requires an LLM or embedding provider to be configured"


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        stub_tool(
            name="embed",
            description="Generate a vector embedding for text",
            category=Category.AI,
            parameters=object_schema({
                "text": string_param("Text to embed"),
                "model": string_param("Embedding model name"),
            }, required=["text"]),
            message=f"Text embedding {_PROVIDER_HINT}",
            requires_auth=True,
        ),
        stub_tool(
            name="classify",
            description="Classify text into one of the given labels",
            category=Category.AI,
            parameters=object_schema({
                "text": string_param("Text to classify"),
                "labels": array_param("Candidate labels", string_param("Label")),
            }, required=["text", "labels"]),
            message=f"Text classification {_PROVIDER_HINT}",
            requires_auth=True,
        ),
        stub_tool(
            name="sentiment",
            description="Analyze the sentiment of text",
            category=Category.AI,
            parameters=object_schema({
                "text": string_param("Text to analyze"),
            }, required=["text"]),
            message=f"Sentiment analysis {_PROVIDER_HINT}",
            requires_auth=True,
        ),
        stub_tool(
            name="translate",
            description="Translate text into another language",
            category=Category.AI,
            parameters=object_schema({
                "text": string_param("Text to translate"),
                "target": string_param("Target language code (e.g., 'fr')"),
                "source": string_param("Source language code (optional)"),
            }, required=["text", "target"]),
            message=f"Translation {_PROVIDER_HINT}",
            requires_auth=True,
        ),
    ]
