"""
Processing pipeline stages.

Each stage is: build prompt -> call backend -> sanitize response.
Stages return None for an irrecoverable response and let backend
errors propagate; the orchestrator contains both per chunk.
"""

from content_processor.services.processing.stages.enhancement import (
    enhance_theory,
    enhance_theory_block,
)
from content_processor.services.processing.stages.extraction import extract_theory
from content_processor.services.processing.stages.questions import generate_questions
from content_processor.services.processing.stages.rewrite import rewrite_chunk
from content_processor.services.processing.stages.tasks import generate_tasks

__all__ = [
    "enhance_theory",
    "enhance_theory_block",
    "extract_theory",
    "generate_questions",
    "generate_tasks",
    "rewrite_chunk",
]
