"""
Unit tests for chunk quality validation.
"""

from content_processor.enums import QuestionType
from content_processor.models import CodeTask, ProcessedChunk, Question
from content_processor.services.processing.sanitizers import (
    sanitize_task,
    sanitize_theory_block,
)
from content_processor.services.processing.validation import validate_chunk


def test_valid_chunk_has_no_issues(sample_chunk: ProcessedChunk) -> None:
    assert validate_chunk(sample_chunk) == []


def test_empty_chunk_reports_missing_theory() -> None:
    chunk = ProcessedChunk(id="chunk_0_10_1", start_line=0, end_line=10)

    issues = validate_chunk(chunk)

    assert len(issues) == 1
    assert "Too few theory blocks" in issues[0]


def test_short_content_and_placeholder_examples() -> None:
    block = sanitize_theory_block({"title": "Stub", "content": "Too short"})
    chunk = ProcessedChunk(id="chunk_0_10_1", start_line=0, end_line=10, theory=[block])

    issues = validate_chunk(chunk)

    assert any("content too short" in issue for issue in issues)
    assert any("placeholder examples" in issue for issue in issues)


def test_mcq_without_options(sample_chunk: ProcessedChunk) -> None:
    question = Question(
        id="q1", topic="Hooks", type=QuestionType.MCQ, question="Which?", answer="A"
    )
    chunk = sample_chunk.model_copy(update={"questions": [question]})

    assert validate_chunk(chunk) == ["MCQ question q1 has no options"]


def test_task_solution_matching_starting_code(sample_chunk: ProcessedChunk) -> None:
    task: CodeTask = sanitize_task(
        {"title": "Noop", "startingCode": "return x;", "solutionCode": "return x;"}
    )
    chunk = sample_chunk.model_copy(update={"tasks": [task, sanitize_task({"title": "Ok"})]})

    assert validate_chunk(chunk) == ["Task 'Noop' solution matches its starting code"]
