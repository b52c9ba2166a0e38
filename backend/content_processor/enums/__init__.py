"""
Centralized enum definitions for the application.

All enums are organized by domain:
- processing.py: Pipeline stages, entity levels/types, sanitizer strategies
- backend.py: AI backend identifiers

Usage:
    from content_processor.enums import ProcessingStage, QuestionType

    # Or import from specific module
    from content_processor.enums.backend import BackendName
"""

from content_processor.enums.backend import BackendName
from content_processor.enums.processing import (
    POST_EXTRACTION_STAGES,
    Difficulty,
    LearningPath,
    ParseStrategy,
    ProcessingStage,
    QuestionType,
    RewriteFocus,
    Technology,
)

__all__ = [
    # Backend
    "BackendName",
    # Processing
    "POST_EXTRACTION_STAGES",
    "Difficulty",
    "LearningPath",
    "ParseStrategy",
    "ProcessingStage",
    "QuestionType",
    "RewriteFocus",
    "Technology",
]
