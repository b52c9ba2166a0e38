"""
Question Sanitizer

Coerces a partial question from AI output into a valid Question.

Rules beyond simple defaults:
- Unknown or missing type becomes "open".
- An MCQ always carries exactly MCQ_OPTION_COUNT options: given options are
  padded with "Option N" or truncated; without options the answer plus
  placeholder distractors are used.
- Non-MCQ questions never carry options.
- Empty analysis/concept/criteria/tag lists get fixed default lists.
"""

import logging
from typing import Any, Optional

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import Difficulty, LearningPath, QuestionType
from content_processor.models.entities import Question
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

DEFAULT_ANALYSIS_POINTS = [
    "Understanding of core concepts",
    "Application of principles",
    "Recognition of patterns",
]
DEFAULT_KEY_CONCEPTS = ["Core concept", "Fundamental principle", "Best practice"]
DEFAULT_EVALUATION_CRITERIA = [
    "Accuracy of understanding",
    "Completeness of answer",
    "Application of knowledge",
]
DEFAULT_QUESTION_TAGS = ["general", "concept", "fundamentals"]


def normalize_options(
    question_type: QuestionType,
    options: Any,
    answer: str,
    option_count: int = processing_settings.MCQ_OPTION_COUNT,
) -> list[str]:
    """
    Options list matching the question type.

    Args:
        question_type: Sanitized question type
        options: Raw options from the AI response
        answer: Raw answer text (empty if missing), used as the first
            option when an MCQ has none
        option_count: Number of options an MCQ ends up with
    """
    if question_type != QuestionType.MCQ:
        return []

    given = string_list(options)
    if not given:
        distractors = [f"Incorrect option {i}" for i in range(1, option_count)]
        return [answer or "Correct answer", *distractors][:option_count]

    while len(given) < option_count:
        given.append(f"Option {len(given) + 1}")
    return given[:option_count]


def sanitize_question(raw: Any) -> Question:
    """Build a valid Question from a partial dict or model."""
    data = as_mapping(raw)
    question_type = enum_value(QuestionType, data.get("type"), QuestionType.OPEN)
    raw_answer = text(data.get("answer"), "")

    return Question(
        id=text(data.get("id"), generate_id("question")),
        topic=text(data.get("topic"), "General"),
        level=enum_value(Difficulty, data.get("level"), Difficulty.MEDIUM),
        type=question_type,
        question=text(data.get("question"), "Question text missing"),
        answer=raw_answer or "Answer text missing",
        options=normalize_options(question_type, data.get("options"), raw_answer),
        analysis_points=string_list(data.get("analysisPoints"), DEFAULT_ANALYSIS_POINTS),
        key_concepts=string_list(data.get("keyConcepts"), DEFAULT_KEY_CONCEPTS),
        evaluation_criteria=string_list(
            data.get("evaluationCriteria"), DEFAULT_EVALUATION_CRITERIA
        ),
        example=text(data.get("example"), ""),
        tags=string_list(data.get("tags"), DEFAULT_QUESTION_TAGS),
        prerequisites=string_list(data.get("prerequisites")),
        complexity=rating(data.get("complexity")),
        interview_frequency=rating(data.get("interviewFrequency")),
        learning_path=enum_value(
            LearningPath, data.get("learningPath"), LearningPath.INTERMEDIATE
        ),
    )


def sanitize_questions(items: Any, limit: Optional[int] = None) -> list[Question]:
    """
    Sanitize every dict entry of a raw question list.

    Args:
        items: Raw list from the AI response
        limit: Keep at most this many questions
    """
    questions = [sanitize_question(item) for item in mappings(items, "question")]
    if limit is not None and len(questions) > limit:
        logger.info(f"Keeping {limit} of {len(questions)} generated questions")
        questions = questions[:limit]
    return questions
