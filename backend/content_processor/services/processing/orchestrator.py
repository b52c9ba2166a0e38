"""
Stage Orchestrator

Runs one processing stage against one chunk and persists the result.

Stage transitions over a chunk:

    theory-extraction -> theory-enhancement -> question-generation -> task-generation
    chunk-rewrite (from any state)

Error containment:
- Backend failures (LLMBackendError) and unparseable responses are caught
  here. The chunk keeps its prior state (extraction adds nothing) and the
  failure is reported through StageOutcome.
- Structural errors (ChunkNotFoundError, UnknownStageError) propagate.

Usage:
    from content_processor.services.processing.orchestrator import StageOrchestrator

    orchestrator = StageOrchestrator(backend, store)
    outcome = await orchestrator.run_stage(ProcessingStage.QUESTION_GENERATION, chunk_id)
    if not outcome.succeeded:
        print(outcome.error)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import ProcessingStage
from content_processor.exceptions import (
    ChunkNotFoundError,
    LLMBackendError,
    UnknownStageError,
)
from content_processor.models.processing import (
    ProcessedChunk,
    RewriteOptions,
    utc_now,
)
from content_processor.services.llm.base import BackendOptions, LLMBackend
from content_processor.services.processing.stages import (
    enhance_theory,
    extract_theory,
    generate_questions,
    generate_tasks,
    rewrite_chunk,
)
from content_processor.services.processing.validation import validate_chunk
from content_processor.services.storage import ChunkStore

logger = logging.getLogger(__name__)

UNPARSEABLE_RESPONSE = "AI response could not be parsed"
NO_THEORY = "Chunk has no theory blocks"


@dataclass
class StageOutcome:
    """
    Result of running one stage on one chunk.

    Attributes:
        stage: Stage that ran
        chunk_id: Target chunk (None for a failed extraction)
        chunk: Chunk after the stage (prior state on failure, None for a
            failed extraction)
        succeeded: Whether the stage produced new content
        error: Failure message when succeeded is False
    """

    stage: ProcessingStage
    chunk_id: Optional[str]
    chunk: Optional[ProcessedChunk]
    succeeded: bool
    error: Optional[str] = None


def parse_stage(stage: Union[ProcessingStage, str]) -> ProcessingStage:
    """
    Resolve a stage name.

    Raises:
        UnknownStageError: If the name is not a processing stage
    """
    try:
        return ProcessingStage(stage)
    except ValueError:
        raise UnknownStageError(stage) from None


class StageOrchestrator:
    """
    Drives the five stages for single chunks.

    The backend is injected and must already be initialized; the
    orchestrator never inspects its concrete type.
    """

    def __init__(
        self,
        backend: LLMBackend,
        store: ChunkStore,
        backend_options: Optional[BackendOptions] = None,
    ):
        self.backend = backend
        self.store = store
        # Overrides every stage's default generation options when set
        self.backend_options = backend_options

    def _options(self, options: Optional[BackendOptions]) -> Optional[BackendOptions]:
        return options or self.backend_options

    async def run_stage(
        self,
        stage: Union[ProcessingStage, str],
        chunk_id: str,
        rewrite_options: Optional[RewriteOptions] = None,
        options: Optional[BackendOptions] = None,
    ) -> StageOutcome:
        """
        Dispatch a chunk-mutating stage by name.

        Theory extraction works on a line span, not a chunk id; use
        extract_chunk() for it.

        Raises:
            UnknownStageError: Unknown stage name, or theory-extraction
            ChunkNotFoundError: No chunk with chunk_id
        """
        resolved = parse_stage(stage)
        if resolved == ProcessingStage.THEORY_ENHANCEMENT:
            return await self.enhance_theory(chunk_id, options)
        if resolved == ProcessingStage.QUESTION_GENERATION:
            return await self.generate_questions(chunk_id, options)
        if resolved == ProcessingStage.TASK_GENERATION:
            return await self.generate_tasks(chunk_id, options)
        if resolved == ProcessingStage.CHUNK_REWRITE:
            return await self.rewrite_chunk(
                chunk_id, rewrite_options or RewriteOptions(), options
            )
        raise UnknownStageError(f"{resolved.value} (needs a line span, not a chunk id)")

    # =========================================================================
    # Creating stage
    # =========================================================================

    async def build_chunk(
        self,
        start_line: int,
        end_line: int,
        chunk_text: str,
        options: Optional[BackendOptions] = None,
        max_lines: Optional[int] = None,
    ) -> tuple[Optional[ProcessedChunk], Optional[str]]:
        """
        Run theory extraction on [start_line, end_line) without persisting.

        max_lines caps a logical unit in the prompt (CHUNK_SIZE_LINES if
        omitted).

        Returns:
            (chunk, None) on success, (None, error message) on failure
        """
        logger.debug(f"Theory extraction for lines {start_line}-{end_line}")
        try:
            result = await extract_theory(
                chunk_text,
                self.backend,
                self._options(options),
                max_lines=max_lines or processing_settings.CHUNK_SIZE_LINES,
            )
        except LLMBackendError as e:
            return None, str(e)
        if result is None:
            return None, UNPARSEABLE_RESPONSE
        return ProcessedChunk.create(start_line, end_line, result), None

    async def extract_chunk(
        self,
        start_line: int,
        end_line: int,
        chunk_text: str,
        options: Optional[BackendOptions] = None,
        max_lines: Optional[int] = None,
    ) -> StageOutcome:
        """Run theory extraction on [start_line, end_line) and persist the chunk."""
        stage = ProcessingStage.THEORY_EXTRACTION
        chunk, error = await self.build_chunk(
            start_line, end_line, chunk_text, options, max_lines
        )
        if chunk is None:
            return self._failed(stage, None, None, f"lines {start_line}-{end_line}: {error}")
        await self.persist(chunk)
        return StageOutcome(stage, chunk.id, chunk, True)

    async def persist(self, chunk: ProcessedChunk) -> None:
        """Save a chunk and log (never reject on) quality issues."""
        await self.store.save_chunk(chunk)
        logger.info(
            f"Saved chunk {chunk.id} (lines {chunk.start_line}-{chunk.display_end_line}): "
            f"{len(chunk.theory)} theory, {len(chunk.questions)} questions, "
            f"{len(chunk.tasks)} tasks"
        )
        if processing_settings.VALIDATE_OUTPUTS:
            for issue in validate_chunk(chunk):
                logger.warning(f"Chunk {chunk.id}: {issue}")

    # =========================================================================
    # Mutating stages
    # =========================================================================

    async def _load(self, chunk_id: str) -> ProcessedChunk:
        chunk = await self.store.get_chunk(chunk_id)
        if chunk is None:
            raise ChunkNotFoundError(chunk_id)
        return chunk

    def _failed(
        self,
        stage: ProcessingStage,
        chunk_id: Optional[str],
        chunk: Optional[ProcessedChunk],
        error: Optional[str],
    ) -> StageOutcome:
        logger.error(f"{stage.value} failed for {chunk_id or 'new chunk'}: {error}")
        return StageOutcome(stage, chunk_id, chunk, False, error)

    async def _replace(
        self, stage: ProcessingStage, chunk: ProcessedChunk, **fields
    ) -> StageOutcome:
        updated = chunk.model_copy(update={**fields, "processed_date": utc_now()})
        await self.persist(updated)
        return StageOutcome(stage, chunk.id, updated, True)

    async def enhance_theory(
        self, chunk_id: str, options: Optional[BackendOptions] = None
    ) -> StageOutcome:
        """Replace the chunk's theory with enhanced blocks."""
        stage = ProcessingStage.THEORY_ENHANCEMENT
        chunk = await self._load(chunk_id)
        if not chunk.theory:
            return self._failed(stage, chunk_id, chunk, NO_THEORY)
        try:
            theory = await enhance_theory(chunk.theory, self.backend, self._options(options))
        except LLMBackendError as e:
            return self._failed(stage, chunk_id, chunk, str(e))
        if theory is None:
            return self._failed(stage, chunk_id, chunk, UNPARSEABLE_RESPONSE)
        return await self._replace(stage, chunk, theory=theory)

    async def generate_questions(
        self, chunk_id: str, options: Optional[BackendOptions] = None
    ) -> StageOutcome:
        """Replace the chunk's questions with newly generated ones."""
        stage = ProcessingStage.QUESTION_GENERATION
        chunk = await self._load(chunk_id)
        if not chunk.theory:
            return self._failed(stage, chunk_id, chunk, NO_THEORY)
        try:
            questions = await generate_questions(
                chunk.theory, self.backend, self._options(options)
            )
        except LLMBackendError as e:
            return self._failed(stage, chunk_id, chunk, str(e))
        if questions is None:
            return self._failed(stage, chunk_id, chunk, UNPARSEABLE_RESPONSE)
        return await self._replace(stage, chunk, questions=questions)

    async def generate_tasks(
        self, chunk_id: str, options: Optional[BackendOptions] = None
    ) -> StageOutcome:
        """Replace the chunk's tasks with newly generated ones."""
        stage = ProcessingStage.TASK_GENERATION
        chunk = await self._load(chunk_id)
        if not chunk.theory:
            return self._failed(stage, chunk_id, chunk, NO_THEORY)
        try:
            tasks = await generate_tasks(chunk.theory, self.backend, self._options(options))
        except LLMBackendError as e:
            return self._failed(stage, chunk_id, chunk, str(e))
        if tasks is None:
            return self._failed(stage, chunk_id, chunk, UNPARSEABLE_RESPONSE)
        return await self._replace(stage, chunk, tasks=tasks)

    async def rewrite_chunk(
        self,
        chunk_id: str,
        rewrite_options: RewriteOptions,
        options: Optional[BackendOptions] = None,
    ) -> StageOutcome:
        """Rewrite the chunk per the operator's options."""
        stage = ProcessingStage.CHUNK_REWRITE
        chunk = await self._load(chunk_id)
        try:
            rewritten = await rewrite_chunk(
                chunk, rewrite_options, self.backend, self._options(options)
            )
        except LLMBackendError as e:
            return self._failed(stage, chunk_id, chunk, str(e))
        if rewritten is None:
            return self._failed(stage, chunk_id, chunk, UNPARSEABLE_RESPONSE)
        await self.persist(rewritten)
        return StageOutcome(stage, chunk_id, rewritten, True)
