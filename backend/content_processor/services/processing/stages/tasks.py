"""
Task Generation Stage

Generates coding tasks with starter/solution code and test cases from the
theory blocks of a chunk. The result replaces the chunk's tasks wholesale.
"""

import logging
from typing import Optional, Sequence

from content_processor.config.processing import processing_settings
from content_processor.models.entities import CodeTask, TheoryBlock
from content_processor.services.llm.base import BackendOptions, LLMBackend
from content_processor.services.processing.prompts import build_task_generation_prompt
from content_processor.services.processing.sanitizers import (
    parse_response,
    sanitize_tasks,
)

logger = logging.getLogger(__name__)


def task_options() -> BackendOptions:
    return BackendOptions(
        temperature=processing_settings.TASKS_TEMPERATURE,
        max_output_tokens=processing_settings.TASKS_MAX_TOKENS,
        timeout_ms=processing_settings.LLM_TIMEOUT_SECONDS * 1000,
    )


async def generate_tasks(
    theory: Sequence[TheoryBlock],
    backend: LLMBackend,
    options: Optional[BackendOptions] = None,
) -> Optional[list[CodeTask]]:
    """
    Generate coding tasks for the given theory blocks.

    Returns:
        Sanitized tasks, or None if the response was unparseable or carried
        no "tasks" list

    Raises:
        LLMBackendError: If the backend call fails
    """
    prompt = build_task_generation_prompt(theory)
    response = await backend.process_content(prompt, options or task_options())

    parsed = parse_response(response, array_key="tasks")
    if parsed.is_fallback or not isinstance(parsed.data.get("tasks"), list):
        logger.warning("Task generation response held no tasks list")
        return None

    tasks = sanitize_tasks(parsed.data["tasks"])
    logger.debug(f"Generated {len(tasks)} coding tasks")
    return tasks
