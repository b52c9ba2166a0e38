"""
Local LLM Backend via Ollama.

Talks to a self-hosted Ollama server over its HTTP API:
- GET  /api/version   availability probe during initialize()
- GET  /api/tags      installed models
- POST /api/generate  non-streaming completion

Usage:
    from content_processor.services.llm import BackendConfig, OllamaBackend

    backend = OllamaBackend()
    if await backend.initialize(BackendConfig(base_url="http://localhost:11434")):
        text = await backend.process_content(prompt)
"""

import logging
from typing import Optional

import httpx

from content_processor.config.settings import settings
from content_processor.exceptions import (
    BackendError,
    BackendTimeout,
    BackendUnavailable,
)
from content_processor.services.llm.base import (
    BackendConfig,
    BackendOptions,
    LLMBackend,
)

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 10.0


class OllamaBackend(LLMBackend):
    """Self-hosted LLM backend."""

    name = "local"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__()
        self.base_url = settings.OLLAMA_BASE_URL
        self.model = settings.OLLAMA_MODEL
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url, transport=self._transport
            )
        return self._client

    async def initialize(self, config: BackendConfig) -> bool:
        if config.base_url and config.base_url != self.base_url:
            await self._close_client()
            self.base_url = config.base_url.rstrip("/")
        if config.model:
            self.model = config.model

        try:
            response = await self._get_client().get(
                "/api/version", timeout=PROBE_TIMEOUT_SECONDS
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                f"Ollama is not reachable at {self.base_url} ({e}). "
                "Start it with: ollama serve"
            )
            return False

        self._initialized = True
        logger.info(f"Local backend initialized at {self.base_url} with model {self.model}")
        return True

    async def list_models(self) -> list[str]:
        """Names of the models installed on the server (empty on error)."""
        try:
            response = await self._get_client().get(
                "/api/tags", timeout=PROBE_TIMEOUT_SECONDS
            )
            response.raise_for_status()
            return [m["name"] for m in response.json().get("models", [])]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(f"Error listing Ollama models: {e}")
            return []

    async def _send(self, prompt: str, options: BackendOptions) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": options.temperature,
                "num_predict": options.max_output_tokens,
            },
        }
        try:
            response = await self._get_client().post(
                "/api/generate", json=payload, timeout=options.timeout_seconds
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise BackendTimeout(
                f"Ollama did not answer within {options.timeout_seconds:.0f}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise BackendError(
                f"Ollama API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.TransportError as e:
            raise BackendUnavailable(f"Ollama unreachable: {e}") from e

        try:
            text = response.json()["response"]
        except (ValueError, KeyError, TypeError) as e:
            raise BackendError("Invalid response structure from Ollama") from e
        if not isinstance(text, str):
            raise BackendError("Invalid response structure from Ollama")
        return text

    async def _close_client(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def close(self) -> None:
        await self._close_client()
        await super().close()
