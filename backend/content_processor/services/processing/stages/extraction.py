"""
Theory Extraction Stage

Turns the raw text of one chunk into sanitized theory blocks plus the
AI's suggested logical boundary. This is the only stage that produces a
new chunk; persisting it is left to the orchestrator.

Usage:
    from content_processor.services.processing.stages.extraction import extract_theory

    result = await extract_theory(chunk_text, backend)
    if result is not None:
        print(f"{len(result.theory)} theory blocks")
"""

import logging
from typing import Optional

from content_processor.config.processing import processing_settings
from content_processor.models.processing import ExtractionResult, LogicalBlockInfo
from content_processor.services.llm.base import BackendOptions, LLMBackend
from content_processor.services.processing.prompts import (
    build_theory_extraction_prompt,
)
from content_processor.services.processing.sanitizers import (
    parse_response,
    sanitize_questions,
    sanitize_tasks,
    sanitize_theory_blocks,
    to_envelope,
)

logger = logging.getLogger(__name__)


def extraction_options() -> BackendOptions:
    return BackendOptions(
        temperature=processing_settings.THEORY_EXTRACTION_TEMPERATURE,
        max_output_tokens=processing_settings.THEORY_EXTRACTION_MAX_TOKENS,
        timeout_ms=processing_settings.LLM_TIMEOUT_SECONDS * 1000,
    )


async def extract_theory(
    chunk_text: str,
    backend: LLMBackend,
    options: Optional[BackendOptions] = None,
    max_lines: int = processing_settings.CHUNK_SIZE_LINES,
) -> Optional[ExtractionResult]:
    """
    Extract theory blocks from one chunk of the source document.

    Args:
        chunk_text: Raw lines of the chunk
        backend: Initialized AI backend
        options: Generation options (stage defaults if omitted)
        max_lines: Upper bound on a logical unit, passed to the prompt

    Returns:
        Sanitized ExtractionResult, or None if the response could not be
        parsed at all

    Raises:
        LLMBackendError: If the backend call fails
    """
    prompt = build_theory_extraction_prompt(chunk_text, max_lines=max_lines)
    response = await backend.process_content(prompt, options or extraction_options())

    parsed = parse_response(response)
    if parsed.is_fallback:
        logger.warning("Theory extraction response was unparseable, chunk skipped")
        return None

    envelope = to_envelope(parsed)
    result = ExtractionResult(
        logical_block_info=LogicalBlockInfo(
            suggested_end_line=envelope["logicalBlockInfo"]["suggestedEndLine"]
        ),
        theory=sanitize_theory_blocks(envelope["theory"]),
        questions=sanitize_questions(envelope["questions"]),
        tasks=sanitize_tasks(envelope["tasks"]),
    )
    logger.debug(
        f"Extracted {len(result.theory)} theory blocks via {parsed.strategy.value} "
        f"(suggestedEndLine={result.logical_block_info.suggested_end_line})"
    )
    return result
