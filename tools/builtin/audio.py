"""
Audio Tools
-----------
tts and stt. Both need a speech engine and are stubs.
"""

from typing import List

from infra.config import ToolSettings

from ..registry import Category, Tool, stub_tool
from ..schema import enum_param, number_param, object_schema, string_param


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        stub_tool(
            name="tts",
            description="Convert text to speech",
            category=Category.AUDIO,
            parameters=object_schema({
                "text": string_param("Text to convert to speech"),
                "voice": string_param("Voice ID or name"),
                "output": string_param("Output audio file path"),
                "format": enum_param("Output format", ["mp3", "wav", "ogg"]),
                "speed": number_param("Speech speed", minimum=0.5, maximum=2.0),
            }, required=["text"]),
            message="Text-to-speech requires a TTS engine (Piper, Edge TTS, cloud API) to be configured",
        ),
        stub_tool(
            name="stt",
            description="Transcribe speech from an audio file",
            category=Category.AUDIO,
            parameters=object_schema({
                "input": string_param("Input audio file path"),
                "language": string_param("Language code (e.g., 'en', 'es')"),
                "format": enum_param("Output format", ["text", "srt", "vtt", "json"]),
            }, required=["input"]),
            message="Speech-to-text requires a transcription engine (Whisper) to be configured",
        ),
    ]
