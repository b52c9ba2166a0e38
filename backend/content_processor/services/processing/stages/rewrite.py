"""
Chunk Rewrite Stage

Rewrites an existing chunk according to operator options (focus,
difficulty, question types, richer examples, simpler wording).

Only the sections the response rewrote are replaced; an empty list counts
as a rewrite only for the focused section. The chunk's id, line span and
completed flag always survive a rewrite.
"""

import logging
from typing import Any, Optional

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import RewriteFocus
from content_processor.models.processing import (
    NO_SUGGESTION,
    LogicalBlockInfo,
    ProcessedChunk,
    RewriteOptions,
    utc_now,
)
from content_processor.services.llm.base import BackendOptions, LLMBackend
from content_processor.services.processing.prompts import build_chunk_rewrite_prompt
from content_processor.services.processing.sanitizers import (
    parse_response,
    parse_suggested_end_line,
    sanitize_questions,
    sanitize_tasks,
    sanitize_theory_blocks,
)

logger = logging.getLogger(__name__)


def rewrite_options() -> BackendOptions:
    return BackendOptions(
        temperature=processing_settings.REWRITE_TEMPERATURE,
        max_output_tokens=processing_settings.REWRITE_MAX_TOKENS,
        timeout_ms=processing_settings.LLM_TIMEOUT_SECONDS * 1000,
    )


def _rewritten_fields(
    data: dict[str, Any], focus: Optional[RewriteFocus] = None
) -> dict[str, Any]:
    """
    Sanitized replacements for every section the response rewrote.

    An empty list only counts as a rewrite of the section the operator
    focused on; otherwise it is read as "left unchanged".
    """
    sanitizers = {
        RewriteFocus.THEORY: sanitize_theory_blocks,
        RewriteFocus.QUESTIONS: lambda items: sanitize_questions(
            items, limit=processing_settings.MAX_QUESTIONS
        ),
        RewriteFocus.TASKS: sanitize_tasks,
    }
    update: dict[str, Any] = {}
    for section, sanitize in sanitizers.items():
        items = data.get(section.value)
        if not isinstance(items, list):
            continue
        if not items and section != focus:
            continue
        update[section.value] = sanitize(items)

    suggested = parse_suggested_end_line(data.get("logicalBlockInfo"))
    if suggested != NO_SUGGESTION:
        update["logical_block_info"] = LogicalBlockInfo(suggested_end_line=suggested)
    return update


async def rewrite_chunk(
    chunk: ProcessedChunk,
    rewrite: RewriteOptions,
    backend: LLMBackend,
    options: Optional[BackendOptions] = None,
) -> Optional[ProcessedChunk]:
    """
    Rewrite a chunk.

    Args:
        chunk: Persisted chunk to rewrite
        rewrite: Operator rewrite options
        backend: Initialized AI backend
        options: Generation options (stage defaults if omitted)

    Returns:
        New chunk value, or None if the response was unparseable or
        carried no recognizable section

    Raises:
        LLMBackendError: If the backend call fails
    """
    prompt = build_chunk_rewrite_prompt(chunk, rewrite)
    response = await backend.process_content(prompt, options or rewrite_options())

    parsed = parse_response(response)
    if parsed.is_fallback:
        logger.warning(f"Rewrite response for {chunk.id} was unparseable")
        return None

    update = _rewritten_fields(parsed.data, rewrite.focus)
    if not update:
        logger.warning(f"Rewrite response for {chunk.id} held no chunk sections")
        return None

    logger.debug(f"Rewrite of {chunk.id} replaced: {', '.join(sorted(update))}")
    return chunk.model_copy(update={**update, "processed_date": utc_now()})
