"""
Processing Data Models (Pydantic)

Models for the resumable extraction pipeline: the persisted cursor, the
persisted chunk, the sanitized extraction payload and rewrite options.

Persisted layout (JSON, camelCase):
    processingState: {"currentPosition": 0, "totalLines": 1200, ...}
    chunks: {"<chunk id>": ProcessedChunk, ...}

Line numbers are 0-based. A chunk's end_line is exclusive; display_end_line
holds the inclusive bound shown to operators.

Models:
- ProcessingState: Resumable cursor over the source document
- LogicalBlockInfo: AI-proposed better chunk boundary
- ExtractionResult: Sanitized theory-extraction payload
- ProcessedChunk: Unit of persisted work
- RewriteOptions: Operator choices for the chunk-rewrite stage

Usage:
    from content_processor.models.processing import ProcessedChunk

    chunk = ProcessedChunk.create(start_line=0, end_line=100, result=result)
    data = chunk.to_json_dict()
"""

import time
from datetime import datetime, timezone
from typing import Optional

from pydantic import Field, model_validator

from content_processor.enums.processing import Difficulty, QuestionType, RewriteFocus
from content_processor.models.base import CamelModel
from content_processor.models.entities import CodeTask, Question, TheoryBlock

# suggestedEndLine value meaning "no better boundary proposed"
NO_SUGGESTION = -1


def utc_now() -> datetime:
    """Timezone-aware current time used for processed timestamps."""
    return datetime.now(timezone.utc)


def make_chunk_id(start_line: int, end_line: int) -> str:
    """
    Build a chunk id from its line span.

    A millisecond timestamp is appended so re-running the same span never
    collides with an earlier chunk.
    """
    return f"chunk_{start_line}_{end_line}_{int(time.time() * 1000)}"


class ProcessingState(CamelModel):
    """
    Resumable cursor over the source document.

    Attributes:
        current_position: Next line to process (0-based)
        total_lines: Number of lines in the source document
        is_processing: Whether a cursor-driven step is in flight
        last_processed_date: When the cursor last moved
        error: Message of the last failed cursor-driven step
    """

    current_position: int = Field(default=0, ge=0)
    total_lines: int = Field(default=0, ge=0)
    is_processing: bool = False
    last_processed_date: Optional[datetime] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_cursor(self) -> "ProcessingState":
        if self.current_position > self.total_lines:
            raise ValueError(
                f"currentPosition ({self.current_position}) exceeds "
                f"totalLines ({self.total_lines})"
            )
        return self


class LogicalBlockInfo(CamelModel):
    """
    AI-proposed chunk boundary.

    Attributes:
        suggested_end_line: Line count (1-based, relative to the chunk) at
            which the logical unit ends, or -1 for no suggestion
    """

    suggested_end_line: int = NO_SUGGESTION


class ExtractionResult(CamelModel):
    """
    Sanitized payload of the theory-extraction stage.

    Every list holds fully sanitized entities.
    """

    logical_block_info: LogicalBlockInfo = Field(default_factory=LogicalBlockInfo)
    theory: list[TheoryBlock] = Field(default_factory=list)
    questions: list[Question] = Field(default_factory=list)
    tasks: list[CodeTask] = Field(default_factory=list)


class ProcessedChunk(CamelModel):
    """
    Unit of persisted work: a line span plus everything extracted from it.

    The chunk exclusively owns its theory/questions/tasks lists. Later stages
    replace a list wholesale; they never merge into it.

    Attributes:
        id: Chunk id (see make_chunk_id)
        start_line: First line of the span (0-based, inclusive)
        end_line: End of the span (exclusive)
        display_end_line: Inclusive end shown to operators
        theory: Theory blocks
        questions: Quiz questions
        tasks: Coding tasks
        logical_block_info: AI-proposed boundary
        completed: Set by an explicit operator action, never reverts
        processed_date: When the chunk was last written by a stage
    """

    id: str
    start_line: int = Field(ge=0)
    end_line: int
    display_end_line: Optional[int] = None
    theory: list[TheoryBlock] = Field(default_factory=list)
    questions: list[Question] = Field(default_factory=list)
    tasks: list[CodeTask] = Field(default_factory=list)
    logical_block_info: LogicalBlockInfo = Field(default_factory=LogicalBlockInfo)
    completed: bool = False
    processed_date: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_span(self) -> "ProcessedChunk":
        if self.start_line >= self.end_line:
            raise ValueError(
                f"startLine ({self.start_line}) must be below endLine ({self.end_line})"
            )
        if self.display_end_line is None:
            self.display_end_line = self.end_line - 1
        return self

    @classmethod
    def create(
        cls, start_line: int, end_line: int, result: ExtractionResult
    ) -> "ProcessedChunk":
        """Build a new chunk from a sanitized extraction result."""
        return cls(
            id=make_chunk_id(start_line, end_line),
            start_line=start_line,
            end_line=end_line,
            theory=result.theory,
            questions=result.questions,
            tasks=result.tasks,
            logical_block_info=result.logical_block_info,
        )


class RewriteOptions(CamelModel):
    """
    Operator choices for the chunk-rewrite stage.

    Attributes:
        focus: Part of the chunk to concentrate on
        difficulty: Target difficulty for questions/tasks
        question_types: Question formats to include
        enhance_examples: Improve code examples
        simplify_content: Simplify explanations for beginners
    """

    focus: Optional[RewriteFocus] = None
    difficulty: Optional[Difficulty] = None
    question_types: list[QuestionType] = Field(default_factory=list)
    enhance_examples: bool = False
    simplify_content: bool = False

    def describe(self) -> str:
        """Human-readable instruction list used inside the rewrite prompt."""
        parts = []
        if self.focus:
            parts.append(f"Focus on {self.focus.value}")
        if self.difficulty:
            parts.append(f"Set difficulty to {self.difficulty.value}")
        if self.question_types:
            types = ", ".join(t.value for t in self.question_types)
            parts.append(f"Include question types: {types}")
        if self.enhance_examples:
            parts.append("Enhance code examples")
        if self.simplify_content:
            parts.append("Simplify content for beginners")
        return ". ".join(parts) if parts else "Improve overall clarity and accuracy"
