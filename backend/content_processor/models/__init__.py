"""Pydantic models for the application."""

from content_processor.models.entities import (
    CodeExample,
    CodeTask,
    Question,
    TheoryBlock,
)
from content_processor.models.processing import (
    ExtractionResult,
    LogicalBlockInfo,
    ProcessedChunk,
    ProcessingState,
    RewriteOptions,
)

__all__ = [
    "CodeExample",
    "CodeTask",
    "Question",
    "TheoryBlock",
    "ExtractionResult",
    "LogicalBlockInfo",
    "ProcessedChunk",
    "ProcessingState",
    "RewriteOptions",
]
