"""
Hosted LLM Backend via LiteLLM.

LiteLLM provides a unified interface to 100+ LLM providers using
the format "provider/model-name" (gemini/..., openai/..., anthropic/...).

See: https://docs.litellm.ai/

Usage:
    from content_processor.services.llm import BackendConfig, LiteLLMBackend

    backend = LiteLLMBackend()
    await backend.initialize(BackendConfig(model="gemini/gemini-2.5-flash"))
    text = await backend.process_content(prompt)
"""

import logging
import os
import time
from typing import Optional

import litellm
from litellm import acompletion

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

# Configure LiteLLM
litellm.drop_params = True  # Drop unsupported params instead of erroring
if settings.DEBUG:
    os.environ["LITELLM_LOG"] = "DEBUG"

# Provider prefix -> environment variable LiteLLM reads the key from
PROVIDER_KEY_ENV = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def _configured_api_key(model: str) -> Optional[str]:
    """Look up the API key for a model's provider from env or settings."""
    provider = model.split("/", 1)[0].lower()
    env_name = PROVIDER_KEY_ENV.get(provider)
    if env_name is None:
        return None
    return os.getenv(env_name) or getattr(settings, env_name, "") or None


class LiteLLMBackend(LLMBackend):
    """
    Cloud LLM backend.

    Sends the prompt as a single user message and returns the text of the
    first choice.
    """

    name = "hosted"

    def __init__(self) -> None:
        super().__init__()
        self.model: Optional[str] = None
        self._api_key: Optional[str] = None

    async def initialize(self, config: BackendConfig) -> bool:
        model = config.model or settings.TEXT_MODEL
        if not model:
            logger.error("Hosted backend needs a model identifier")
            return False

        api_key = config.api_key or _configured_api_key(model)
        provider = model.split("/", 1)[0].lower()
        if provider in PROVIDER_KEY_ENV and not api_key:
            logger.error(
                f"No API key configured for provider '{provider}'. "
                f"Set {PROVIDER_KEY_ENV[provider]}."
            )
            return False

        self.model = model
        self._api_key = api_key
        self._initialized = True
        logger.info(f"Hosted backend initialized with model {model}")
        return True

    async def _send(self, prompt: str, options: BackendOptions) -> str:
        kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": options.temperature,
            "max_tokens": options.max_output_tokens,
            "timeout": options.timeout_seconds,
        }
        if self._api_key:
            kwargs["api_key"] = self._api_key

        start_time = time.perf_counter()
        try:
            response = await acompletion(**kwargs)
        except litellm.Timeout as e:
            raise BackendTimeout(f"Hosted backend timed out: {e}") from e
        except litellm.APIConnectionError as e:
            raise BackendUnavailable(f"Hosted backend unreachable: {e}") from e
        except Exception as e:
            # Rate limits, auth and bad-request errors all surface here
            logger.error(f"Hosted completion failed: {e} (model={self.model})")
            raise BackendError(f"Hosted backend error: {e}") from e
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise BackendError("Invalid response structure from hosted backend") from e
        if not content:
            raise BackendError("Hosted backend returned an empty response")

        logger.debug(f"Hosted completion [{self.model}] - Latency: {latency_ms}ms")
        return content
