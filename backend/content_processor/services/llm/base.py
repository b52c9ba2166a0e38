"""
AI Backend Contract

Every concrete backend (hosted LiteLLM, local Ollama) implements the same
"send prompt, get text" interface. The pipeline depends only on LLMBackend,
never on a concrete backend type.

Failure modes are translated into the exceptions from
content_processor.exceptions:
- BackendUnavailable: not initialized / not reachable
- BackendError: non-2xx or malformed transport response
- BackendTimeout: no answer within options.timeout_ms

Responses are opaque text. They may be minutes in the making and are never
assumed to be valid JSON.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from content_processor.config.processing import processing_settings
from content_processor.exceptions import BackendUnavailable

logger = logging.getLogger(__name__)


@dataclass
class BackendOptions:
    """
    Per-call generation options.

    Attributes:
        temperature: Sampling temperature
        max_output_tokens: Maximum tokens in the response
        timeout_ms: Transport timeout for the call
    """

    temperature: float = 1.0
    max_output_tokens: int = 65536
    timeout_ms: int = processing_settings.LLM_TIMEOUT_SECONDS * 1000

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@dataclass
class BackendConfig:
    """
    Initialization parameters for a backend.

    Attributes:
        model: Model identifier understood by the backend
        api_key: Credential for hosted providers (unused by local backends)
        base_url: Server URL for self-hosted backends
    """

    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None


class LLMBackend(ABC):
    """
    Uniform interface over AI providers.

    Lifecycle is explicit: construct, await initialize(config) at batch
    start, call process_content() any number of times, await close().
    """

    name: str = "backend"

    def __init__(self) -> None:
        self._initialized = False

    def is_initialized(self) -> bool:
        """Whether initialize() has succeeded."""
        return self._initialized

    @abstractmethod
    async def initialize(self, config: BackendConfig) -> bool:
        """
        Prepare the backend for use.

        Returns:
            True if the backend is ready, False otherwise (never raises for
            an unreachable service)
        """

    @abstractmethod
    async def _send(self, prompt: str, options: BackendOptions) -> str:
        """Perform one call against the provider."""

    async def process_content(
        self, prompt: str, options: Optional[BackendOptions] = None
    ) -> str:
        """
        Send a prompt and return the raw response text.

        Transient connectivity failures are retried up to
        LLM_MAX_ATTEMPTS times (1 means no retry); HTTP errors and timeouts
        are raised immediately.

        Args:
            prompt: Fully self-contained instruction string
            options: Generation options (defaults if omitted)

        Returns:
            Response text exactly as produced by the model

        Raises:
            BackendUnavailable: Backend not initialized or unreachable
            BackendError: HTTP or payload error
            BackendTimeout: Call exceeded options.timeout_ms
        """
        if not self._initialized:
            raise BackendUnavailable(f"{self.name} backend is not initialized")

        options = options or BackendOptions()
        logger.debug(
            f"Sending prompt to {self.name} backend "
            f"({len(prompt)} chars, temperature={options.temperature})"
        )

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, processing_settings.LLM_MAX_ATTEMPTS)),
            wait=wait_exponential(multiplier=1, min=2, max=30),
            retry=retry_if_exception_type(BackendUnavailable),
            reraise=True,
        ):
            with attempt:
                response = await self._send(prompt, options)

        logger.debug(f"{self.name} backend returned {len(response)} chars")
        return response

    async def close(self) -> None:
        """Release transport resources."""
        self._initialized = False
