"""
Chunk Quality Validation

Reports quality issues in a processed chunk. Issues are logged by the
orchestrator as warnings; a chunk is never rejected for them, since the
operator can regenerate it individually.

Usage:
    from content_processor.services.processing.validation import validate_chunk

    issues = validate_chunk(chunk)
    if issues:
        print(f"Quality issues: {issues}")
"""

import logging

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import QuestionType
from content_processor.models.entities import CodeTask, Question, TheoryBlock
from content_processor.models.processing import ProcessedChunk
from content_processor.services.processing.sanitizers.theory import (
    PLACEHOLDER_EXAMPLE_CODE,
)

logger = logging.getLogger(__name__)


def validate_chunk(chunk: ProcessedChunk) -> list[str]:
    """
    Validate a chunk for quality issues.

    Checks:
    - Theory block count and content length
    - Placeholder-only examples
    - MCQ questions without options
    - Tasks whose solution matches the starting code

    Args:
        chunk: ProcessedChunk to validate

    Returns:
        List of issue descriptions (empty if all valid)
    """
    issues = []

    # Check theory
    issues.extend(_validate_theory(chunk.theory))

    # Check questions
    issues.extend(_validate_questions(chunk.questions))

    # Check tasks
    issues.extend(_validate_tasks(chunk.tasks))

    return issues


def _validate_theory(theory: list[TheoryBlock]) -> list[str]:
    """Validate theory blocks."""
    issues = []

    if len(theory) < processing_settings.MIN_THEORY_BLOCKS:
        issues.append(
            f"Too few theory blocks ({len(theory)}, "
            f"min: {processing_settings.MIN_THEORY_BLOCKS})"
        )

    for block in theory:
        if len(block.content) < processing_settings.MIN_CONTENT_LENGTH:
            issues.append(
                f"Theory block '{block.title}' content too short "
                f"({len(block.content)} chars, min: {processing_settings.MIN_CONTENT_LENGTH})"
            )
        if all(e.code == PLACEHOLDER_EXAMPLE_CODE for e in block.examples):
            issues.append(f"Theory block '{block.title}' has only placeholder examples")

    return issues


def _validate_questions(questions: list[Question]) -> list[str]:
    """Validate generated questions."""
    issues = []

    for q in questions:
        if q.type == QuestionType.MCQ and not q.options:
            issues.append(f"MCQ question {q.id} has no options")

    return issues


def _validate_tasks(tasks: list[CodeTask]) -> list[str]:
    """Validate generated coding tasks."""
    issues = []

    for task in tasks:
        if task.starting_code == task.solution_code:
            issues.append(f"Task '{task.title}' solution matches its starting code")

    return issues
