"""
AI backend adapters.

Uniform "send prompt, get text" contract with a hosted (LiteLLM) and a
local (Ollama) implementation.
"""

from content_processor.services.llm.base import (
    BackendConfig,
    BackendOptions,
    LLMBackend,
)
from content_processor.services.llm.factory import (
    create_backend,
    default_backend_config,
    get_backend,
)
from content_processor.services.llm.litellm_backend import LiteLLMBackend
from content_processor.services.llm.ollama_backend import OllamaBackend

__all__ = [
    "BackendConfig",
    "BackendOptions",
    "LLMBackend",
    "LiteLLMBackend",
    "OllamaBackend",
    "create_backend",
    "default_backend_config",
    "get_backend",
]
