"""
Sanitizers for untrusted AI output.

- response: raw text -> extraction envelope (never raises)
- theory / question / task: partial dict -> fully valid entity
"""

from content_processor.services.processing.sanitizers.question import (
    sanitize_question,
    sanitize_questions,
)
from content_processor.services.processing.sanitizers.response import (
    ParsedResponse,
    empty_envelope,
    parse_suggested_end_line,
    parse_response,
    sanitize_response,
    to_envelope,
)
from content_processor.services.processing.sanitizers.task import (
    sanitize_task,
    sanitize_tasks,
)
from content_processor.services.processing.sanitizers.theory import (
    sanitize_code_example,
    sanitize_theory_block,
    sanitize_theory_blocks,
)

__all__ = [
    "ParsedResponse",
    "empty_envelope",
    "parse_suggested_end_line",
    "parse_response",
    "sanitize_response",
    "to_envelope",
    "sanitize_code_example",
    "sanitize_theory_block",
    "sanitize_theory_blocks",
    "sanitize_question",
    "sanitize_questions",
    "sanitize_task",
    "sanitize_tasks",
]
