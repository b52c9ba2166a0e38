"""
Backend-related enums.

Identifies the interchangeable AI backends the pipeline can drive.
"""

from enum import Enum


class BackendName(str, Enum):
    """
    AI backends selectable through configuration.

    HOSTED: Cloud LLM reached through LiteLLM (Gemini, OpenAI, Anthropic, ...)
    LOCAL: Self-hosted Ollama server
    """

    HOSTED = "hosted"
    LOCAL = "local"
