"""
Coding Task Sanitizer

Coerces a partial coding task from AI output into a valid CodeTask.
Test cases, hints and tags are never left empty.
"""

from typing import Any

from content_processor.enums.processing import Difficulty, LearningPath
from content_processor.models.entities import CodeTask
from content_processor.services.processing.sanitizers.common import (
    as_mapping,
    enum_value,
    generate_id,
    is_number,
    mappings,
    rating,
    string_list,
    text,
)

DEFAULT_TIME_ESTIMATE = 30

DEFAULT_TEST_CASES = [
    "Test with basic input: expect function(input) to return expected output",
    "Test with edge case: expect function(edgeInput) to handle edge case correctly",
    "Test with invalid input: expect function(null) to throw appropriate error",
]
DEFAULT_HINTS = [
    "Consider edge cases like empty inputs or invalid data",
    "Think about performance optimization for large inputs",
]
DEFAULT_TASK_TAGS = ["algorithm", "implementation", "problem-solving"]

DEFAULT_DESCRIPTION = (
    "Implement a solution to the given problem following the requirements."
)
DEFAULT_STARTING_CODE = (
    "// Your code here\n\n"
    "function solution(input) {\n"
    "  // TODO: Implement your solution\n"
    "  return null;\n"
    "}"
)
DEFAULT_SOLUTION_CODE = (
    "// Solution code\n\n"
    "function solution(input) {\n"
    "  if (!input) {\n"
    '    throw new Error("Invalid input");\n'
    "  }\n"
    "  return processInput(input);\n"
    "}"
)


def _time_estimate(value: Any) -> int:
    if is_number(value) and value > 0:
        return max(1, round(value))
    return DEFAULT_TIME_ESTIMATE


def sanitize_task(raw: Any) -> CodeTask:
    """
    Build a valid CodeTask from a partial dict or model.

    sanitize_task({"title": "X"}) keeps the title and fills everything else:
    a generated id, medium difficulty, three default test cases, two
    default hints and a 30 minute estimate.
    """
    data = as_mapping(raw)
    return CodeTask(
        id=text(data.get("id"), generate_id("task")),
        title=text(data.get("title"), "Untitled Task"),
        description=text(data.get("description"), DEFAULT_DESCRIPTION),
        difficulty=enum_value(Difficulty, data.get("difficulty"), Difficulty.MEDIUM),
        starting_code=text(data.get("startingCode"), DEFAULT_STARTING_CODE),
        solution_code=text(data.get("solutionCode"), DEFAULT_SOLUTION_CODE),
        test_cases=string_list(data.get("testCases"), DEFAULT_TEST_CASES),
        hints=string_list(data.get("hints"), DEFAULT_HINTS),
        tags=string_list(data.get("tags"), DEFAULT_TASK_TAGS),
        time_estimate=_time_estimate(data.get("timeEstimate")),
        prerequisites=string_list(data.get("prerequisites")),
        complexity=rating(data.get("complexity")),
        interview_relevance=rating(data.get("interviewRelevance")),
        learning_path=enum_value(
            LearningPath, data.get("learningPath"), LearningPath.INTERMEDIATE
        ),
        related_concepts=string_list(data.get("relatedConcepts")),
    )


def sanitize_tasks(items: Any) -> list[CodeTask]:
    """Sanitize every dict entry of a raw task list; other entries are dropped."""
    return [sanitize_task(item) for item in mappings(items, "task")]
