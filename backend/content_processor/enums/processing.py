"""
Processing-related enums.

Defines enums for pipeline stages, learning entity classification, and
rewrite focus areas.
"""

from enum import Enum


class ProcessingStage(str, Enum):
    """
    Transformations applied to a chunk.

    THEORY_EXTRACTION is the only stage that creates a chunk. The three
    post-extraction stages each replace exactly one field of an existing
    chunk, and CHUNK_REWRITE can be applied at any point.
    """

    THEORY_EXTRACTION = "theory-extraction"
    THEORY_ENHANCEMENT = "theory-enhancement"
    QUESTION_GENERATION = "question-generation"
    TASK_GENERATION = "task-generation"
    CHUNK_REWRITE = "chunk-rewrite"


# Stages an operator runs after extraction, in order
POST_EXTRACTION_STAGES: tuple[ProcessingStage, ...] = (
    ProcessingStage.THEORY_ENHANCEMENT,
    ProcessingStage.QUESTION_GENERATION,
    ProcessingStage.TASK_GENERATION,
)


class Difficulty(str, Enum):
    """Difficulty of a question or coding task."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    """Question formats supported by the quiz runner."""

    MCQ = "mcq"  # Multiple choice, always carries options
    CODE = "code"  # Write or read a snippet
    OPEN = "open"  # Free-form answer
    FLASHCARD = "flashcard"  # Short recall card


class LearningPath(str, Enum):
    """Learning path level a theory block, question or task belongs to."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class Technology(str, Enum):
    """Technology a theory block is about."""

    REACT = "React"
    NEXTJS = "Next.js"
    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"
    MUI = "MUI"
    TESTING = "Testing"
    PERFORMANCE = "Performance"
    CSS = "CSS"
    HTML = "HTML"
    OTHER = "Other"


class RewriteFocus(str, Enum):
    """Which part of a chunk a rewrite should concentrate on."""

    THEORY = "theory"
    QUESTIONS = "questions"
    TASKS = "tasks"


class ParseStrategy(str, Enum):
    """Which step of the response sanitizer produced the parsed object."""

    DIRECT = "direct"
    FENCE_STRIPPED = "fence_stripped"
    BRACE_EXTRACTED = "brace_extracted"
    REPAIRED = "repaired"
    FALLBACK = "fallback"
