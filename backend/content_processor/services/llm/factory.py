"""
Backend Factory

Maps a BackendName (configuration value) to a freshly constructed backend.
Nothing is initialized at import time; callers await initialize() at batch
start and close() when done.

Usage:
    from content_processor.services.llm import get_backend, default_backend_config

    backend = get_backend()  # uses settings.LLM_BACKEND
    if not await backend.initialize(default_backend_config(backend.name)):
        raise SystemExit("backend not available")
"""

import logging
from typing import Optional, Union

from content_processor.config.settings import settings
from content_processor.enums.backend import BackendName
from content_processor.services.llm.base import BackendConfig, LLMBackend
from content_processor.services.llm.litellm_backend import LiteLLMBackend
from content_processor.services.llm.ollama_backend import OllamaBackend

logger = logging.getLogger(__name__)

BACKEND_CLASSES: dict[BackendName, type[LLMBackend]] = {
    BackendName.HOSTED: LiteLLMBackend,
    BackendName.LOCAL: OllamaBackend,
}


def create_backend(name: Union[BackendName, str]) -> LLMBackend:
    """
    Construct an uninitialized backend by name.

    Raises:
        ValueError: If name is not a known backend
    """
    backend_name = BackendName(name)
    logger.debug(f"Creating {backend_name.value} backend")
    return BACKEND_CLASSES[backend_name]()


def get_backend(name: Optional[Union[BackendName, str]] = None) -> LLMBackend:
    """Construct the backend named by the argument or settings.LLM_BACKEND."""
    return create_backend(name or settings.LLM_BACKEND)


def default_backend_config(name: Union[BackendName, str]) -> BackendConfig:
    """BackendConfig populated from application settings."""
    if BackendName(name) == BackendName.LOCAL:
        return BackendConfig(
            model=settings.OLLAMA_MODEL, base_url=settings.OLLAMA_BASE_URL
        )
    return BackendConfig(model=settings.TEXT_MODEL)
