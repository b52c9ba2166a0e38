"""
Theory Enhancement Stage

Asks the backend to enrich each theory block of a chunk with worked
examples and deeper explanations. One backend call per block.

The stage is all-or-nothing for a chunk: if any block's response cannot be
parsed the whole stage reports failure and the caller keeps the original
blocks. Fields the backend leaves out or returns blank keep their original
values, and the block id never changes.
"""

import logging
from typing import Any, Optional, Sequence

from content_processor.config.processing import processing_settings
from content_processor.models.entities import TheoryBlock
from content_processor.services.llm.base import BackendOptions, LLMBackend
from content_processor.services.processing.prompts import (
    build_theory_enhancement_prompt,
)
from content_processor.services.processing.sanitizers import (
    parse_response,
    sanitize_theory_block,
)

logger = logging.getLogger(__name__)

# Keys of the extraction envelope that are never theory-block fields
ENVELOPE_KEYS = {"logicalBlockInfo", "theory", "questions", "tasks"}


def enhancement_options() -> BackendOptions:
    return BackendOptions(
        temperature=processing_settings.THEORY_ENHANCEMENT_TEMPERATURE,
        max_output_tokens=processing_settings.THEORY_ENHANCEMENT_MAX_TOKENS,
        timeout_ms=processing_settings.LLM_TIMEOUT_SECONDS * 1000,
    )


def _block_payload(data: dict[str, Any]) -> dict[str, Any]:
    """The enhanced block: either wrapped in a theory list or the object itself."""
    theory = data.get("theory")
    if isinstance(theory, list) and theory and isinstance(theory[0], dict):
        return theory[0]
    return {k: v for k, v in data.items() if k not in ENVELOPE_KEYS}


def _filled(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop blank fields so they never overwrite the original block."""
    return {
        key: value
        for key, value in payload.items()
        if value is not None
        and not (isinstance(value, str) and not value.strip())
        and not (isinstance(value, (list, dict)) and not value)
    }


async def enhance_theory_block(
    block: TheoryBlock,
    backend: LLMBackend,
    options: Optional[BackendOptions] = None,
) -> Optional[TheoryBlock]:
    """
    Enhance a single theory block.

    Returns:
        Enhanced block with the original id, or None if the response was
        unparseable

    Raises:
        LLMBackendError: If the backend call fails
    """
    prompt = build_theory_enhancement_prompt(block)
    response = await backend.process_content(prompt, options or enhancement_options())

    parsed = parse_response(response)
    if parsed.is_fallback:
        logger.warning(f"Enhancement response for {block.id} was unparseable")
        return None

    payload = _block_payload(parsed.data)
    if not payload:
        logger.warning(f"Enhancement response for {block.id} held no theory block")
        return None

    merged = {**block.to_json_dict(), **_filled(payload), "id": block.id}
    return sanitize_theory_block(merged)


async def enhance_theory(
    theory: Sequence[TheoryBlock],
    backend: LLMBackend,
    options: Optional[BackendOptions] = None,
) -> Optional[list[TheoryBlock]]:
    """
    Enhance every block of a chunk, in order.

    Returns:
        The full replacement list, or None if any block failed to parse
    """
    enhanced = []
    for index, block in enumerate(theory, start=1):
        logger.debug(f"Enhancing theory block {index}/{len(theory)}: {block.id}")
        result = await enhance_theory_block(block, backend, options)
        if result is None:
            return None
        enhanced.append(result)
    return enhanced
