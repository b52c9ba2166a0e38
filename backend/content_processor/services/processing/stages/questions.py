"""
Question Generation Stage

Generates quiz questions (mcq, code, open, flashcard) from the theory
blocks of a chunk. The result replaces the chunk's questions wholesale.

Usage:
    from content_processor.services.processing.stages.questions import generate_questions

    questions = await generate_questions(chunk.theory, backend)
"""

import logging
from typing import Optional, Sequence

from content_processor.config.processing import processing_settings
from content_processor.models.entities import Question, TheoryBlock
from content_processor.services.llm.base import BackendOptions, LLMBackend
from content_processor.services.processing.prompts import (
    build_question_generation_prompt,
)
from content_processor.services.processing.sanitizers import (
    parse_response,
    sanitize_questions,
)

logger = logging.getLogger(__name__)


def question_options() -> BackendOptions:
    return BackendOptions(
        temperature=processing_settings.QUESTIONS_TEMPERATURE,
        max_output_tokens=processing_settings.QUESTIONS_MAX_TOKENS,
        timeout_ms=processing_settings.LLM_TIMEOUT_SECONDS * 1000,
    )


async def generate_questions(
    theory: Sequence[TheoryBlock],
    backend: LLMBackend,
    options: Optional[BackendOptions] = None,
) -> Optional[list[Question]]:
    """
    Generate questions tied to the given theory blocks.

    Args:
        theory: Theory blocks of one chunk
        backend: Initialized AI backend
        options: Generation options (stage defaults if omitted)

    Returns:
        Sanitized questions (at most MAX_QUESTIONS), or None if the response
        was unparseable or carried no "questions" list

    Raises:
        LLMBackendError: If the backend call fails
    """
    prompt = build_question_generation_prompt(theory)
    response = await backend.process_content(prompt, options or question_options())

    parsed = parse_response(response, array_key="questions")
    if parsed.is_fallback or not isinstance(parsed.data.get("questions"), list):
        logger.warning("Question generation response held no questions list")
        return None

    questions = sanitize_questions(
        parsed.data["questions"], limit=processing_settings.MAX_QUESTIONS
    )

    # Log distribution by type
    type_counts: dict[str, int] = {}
    for q in questions:
        type_counts[q.type.value] = type_counts.get(q.type.value, 0) + 1
    logger.debug(f"Generated {len(questions)} questions: {type_counts}")

    return questions
