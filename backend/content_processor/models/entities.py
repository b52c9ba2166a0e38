"""
Learning Entity Models (Pydantic)

The three artifacts a chunk is turned into: theory blocks (with code
examples), quiz questions and coding tasks.

These models describe the fully valid shape only. Raw AI output is never
fed to them directly; it goes through the entity sanitizers first
(services/processing/sanitizers), which fill defaults, clamp ratings and
coerce enum values so construction cannot fail.

Cross-references (related_questions, related_tasks, required_for) are weak
string ids and are not checked for existence.

Models:
- CodeExample: Worked example attached to a theory block
- TheoryBlock: Explanatory unit extracted from the source
- Question: Quiz question (mcq, code, open, flashcard)
- CodeTask: Coding exercise with starter/solution code and test cases
"""

from pydantic import Field

from content_processor.enums.processing import (
    Difficulty,
    LearningPath,
    QuestionType,
    Technology,
)
from content_processor.models.base import CamelModel

# Inclusive bounds for every 1-10 rating
RATING_MIN = 1
RATING_MAX = 10
RATING_DEFAULT = 5


class CodeExample(CamelModel):
    """
    Worked code example.

    Attributes:
        id: Unique identifier
        title: Short example title
        code: Example source code
        explanation: What the example demonstrates
        language: Language of the snippet (typescript, javascript, ...)
    """

    id: str
    title: str
    code: str
    explanation: str = ""
    language: str = "typescript"


class TheoryBlock(CamelModel):
    """
    Explanatory unit extracted from the source document.

    Attributes:
        id: Unique identifier
        title: Section title
        content: Long-form markdown, may embed code fences and image references
        examples: Worked examples, never empty after sanitization
        tags: Categorization tags
        technology: Technology the block is about
        prerequisites: Concepts to understand first
        complexity: Conceptual difficulty, 1-10
        interview_relevance: How often this comes up in interviews, 1-10
        learning_path: Learning path level
        required_for: Ids/names of concepts that build on this block
        related_questions: Weak references to question ids
        related_tasks: Weak references to task ids
    """

    id: str
    title: str
    content: str = ""
    examples: list[CodeExample] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    technology: Technology = Technology.JAVASCRIPT
    prerequisites: list[str] = Field(default_factory=list)
    complexity: int = Field(default=RATING_DEFAULT, ge=RATING_MIN, le=RATING_MAX)
    interview_relevance: int = Field(
        default=RATING_DEFAULT, ge=RATING_MIN, le=RATING_MAX
    )
    learning_path: LearningPath = LearningPath.INTERMEDIATE
    required_for: list[str] = Field(default_factory=list)
    related_questions: list[str] = Field(default_factory=list)
    related_tasks: list[str] = Field(default_factory=list)


class Question(CamelModel):
    """
    Quiz question tied to one or more theory blocks.

    Attributes:
        id: Unique identifier
        topic: Specific topic covered
        level: Difficulty (easy, medium, hard)
        type: Format (mcq, code, open, flashcard)
        question: Question text
        answer: Correct answer or solution
        options: Answer options, non-empty only for mcq
        analysis_points: Key points for analyzing an answer
        key_concepts: Core concepts tested
        evaluation_criteria: Criteria for grading an answer
        example: Code example, empty when not applicable
        tags: Categorization tags
        prerequisites: Concepts needed to understand the question
        complexity: Conceptual difficulty, 1-10
        interview_frequency: How often asked in interviews, 1-10
        learning_path: Learning path level
    """

    id: str
    topic: str
    level: Difficulty = Difficulty.MEDIUM
    type: QuestionType = QuestionType.OPEN
    question: str
    answer: str
    options: list[str] = Field(default_factory=list)
    analysis_points: list[str] = Field(default_factory=list)
    key_concepts: list[str] = Field(default_factory=list)
    evaluation_criteria: list[str] = Field(default_factory=list)
    example: str = ""
    tags: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    complexity: int = Field(default=RATING_DEFAULT, ge=RATING_MIN, le=RATING_MAX)
    interview_frequency: int = Field(
        default=RATING_DEFAULT, ge=RATING_MIN, le=RATING_MAX
    )
    learning_path: LearningPath = LearningPath.INTERMEDIATE


class CodeTask(CamelModel):
    """
    Coding exercise built from theory blocks.

    Attributes:
        id: Unique identifier
        title: Task title
        description: Requirements for the solution
        difficulty: easy, medium or hard
        starting_code: Starter template shown to the learner
        solution_code: Reference solution
        test_cases: Test case descriptions, at least one
        hints: Progressive hints, at least one
        tags: Categorization tags
        time_estimate: Expected minutes to solve, > 0
        prerequisites: Concepts needed first
        complexity: Conceptual difficulty, 1-10
        interview_relevance: How often this comes up in interviews, 1-10
        learning_path: Learning path level
        related_concepts: Concepts the task exercises
    """

    id: str
    title: str
    description: str
    difficulty: Difficulty = Difficulty.MEDIUM
    starting_code: str
    solution_code: str
    test_cases: list[str] = Field(min_length=1)
    hints: list[str] = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    time_estimate: int = Field(default=30, gt=0)
    prerequisites: list[str] = Field(default_factory=list)
    complexity: int = Field(default=RATING_DEFAULT, ge=RATING_MIN, le=RATING_MAX)
    interview_relevance: int = Field(
        default=RATING_DEFAULT, ge=RATING_MIN, le=RATING_MAX
    )
    learning_path: LearningPath = LearningPath.INTERMEDIATE
    related_concepts: list[str] = Field(default_factory=list)
