"""
Theory Block Sanitizer

Coerces a partial theory block (and its code examples) from AI output into
a valid TheoryBlock. Every block ends up with at least one example.
"""

import logging
from typing import Any

from content_processor.enums.processing import LearningPath, Technology
from content_processor.models.entities import CodeExample, TheoryBlock
from content_processor.services.processing.sanitizers.common import (
    as_mapping,
    enum_value,
    generate_id,
    mappings,
    rating,
    string_list,
    text,
)

logger = logging.getLogger(__name__)

DEFAULT_THEORY_TITLE = "Untitled Theory"
DEFAULT_EXAMPLE_TITLE = "Code Example"
PLACEHOLDER_EXAMPLE_CODE = "// Example code"
DEFAULT_EXAMPLE_LANGUAGE = "typescript"


def sanitize_code_example(raw: Any) -> CodeExample:
    data = as_mapping(raw)
    return CodeExample(
        id=text(data.get("id"), generate_id("example")),
        title=text(data.get("title"), DEFAULT_EXAMPLE_TITLE),
        code=text(data.get("code"), PLACEHOLDER_EXAMPLE_CODE),
        explanation=text(data.get("explanation"), ""),
        language=text(data.get("language"), DEFAULT_EXAMPLE_LANGUAGE),
    )


def placeholder_example() -> CodeExample:
    """Example inserted when a block has none."""
    return sanitize_code_example({})


def sanitize_theory_block(raw: Any) -> TheoryBlock:
    """
    Build a valid TheoryBlock from a partial dict or model.

    Args:
        raw: Theory entry from an AI response (camelCase keys)

    Returns:
        TheoryBlock with defaults for every missing or invalid field
    """
    data = as_mapping(raw)
    examples = [sanitize_code_example(e) for e in mappings(data.get("examples"), "example")]
    if not examples:
        examples = [placeholder_example()]

    return TheoryBlock(
        id=text(data.get("id"), generate_id("theory")),
        title=text(data.get("title"), DEFAULT_THEORY_TITLE),
        content=text(data.get("content"), ""),
        examples=examples,
        tags=string_list(data.get("tags")),
        technology=enum_value(
            Technology,
            data.get("technology"),
            default=Technology.JAVASCRIPT,
            unknown=Technology.OTHER,
        ),
        prerequisites=string_list(data.get("prerequisites")),
        complexity=rating(data.get("complexity")),
        interview_relevance=rating(data.get("interviewRelevance")),
        learning_path=enum_value(
            LearningPath, data.get("learningPath"), LearningPath.INTERMEDIATE
        ),
        required_for=string_list(data.get("requiredFor")),
        related_questions=string_list(data.get("relatedQuestions")),
        related_tasks=string_list(data.get("relatedTasks")),
    )


def sanitize_theory_blocks(items: Any) -> list[TheoryBlock]:
    """Sanitize every dict entry of a raw theory list; other entries are dropped."""
    return [sanitize_theory_block(item) for item in mappings(items, "theory")]
