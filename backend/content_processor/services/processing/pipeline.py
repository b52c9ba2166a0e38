"""
Range Processor

Top-level driver of the extraction pipeline. Walks a line range chunk by
chunk, runs theory extraction through the StageOrchestrator, persists each
chunk as soon as it exists and moves the resumable cursor, so a crash
loses at most the chunk in flight.

Chunks are processed strictly sequentially with a cooperative delay between
AI calls (rate-limit mitigation). A failing chunk is logged and recorded in
the RangeReport; it never aborts the range.

Cursor rule: after a chunk is persisted the cursor moves to its endLine
only if the chunk covers the current cursor. A failed chunk therefore pins
the cursor at its start and resuming never skips it.

Usage:
    from content_processor.services.processing.pipeline import RangeProcessor

    processor = RangeProcessor(orchestrator, state_manager, document)
    chunks = await processor.process_range(0, 500, chunk_size_lines=100)
    for failure in processor.last_report.failures:
        print(f"Re-run lines {failure.start_line}-{failure.end_line}: {failure.error}")
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import POST_EXTRACTION_STAGES, ProcessingStage
from content_processor.exceptions import (
    ExtractionFailedError,
    InvalidRangeError,
    ProcessingCompleteError,
)
from content_processor.models.processing import (
    ProcessedChunk,
    ProcessingState,
    make_chunk_id,
    utc_now,
)
from content_processor.services.llm.base import BackendOptions
from content_processor.services.processing.orchestrator import (
    StageOrchestrator,
    StageOutcome,
)
from content_processor.services.processing.segmenter import LineSpan, segment
from content_processor.services.processing.source import SourceDocument
from content_processor.services.processing.state import (
    ProcessingStateManager,
    is_processing_complete,
)

logger = logging.getLogger(__name__)


def _or_default(value, default):
    return default if value is None else value


# =============================================================================
# Reports
# =============================================================================


@dataclass
class FailedSpan:
    """A span whose extraction produced no chunk."""

    start_line: int
    end_line: int
    error: str


@dataclass
class RangeReport:
    """
    What a range run did.

    Attributes:
        start_line: First line of the (clamped) range
        end_line: Exclusive end of the (clamped) range
        chunks: Persisted chunks, in order
        failures: Spans that produced no chunk, with the reason
        stage_outcomes: Post-extraction stage results (all-stages runs only)
    """

    start_line: int
    end_line: int
    chunks: list[ProcessedChunk] = field(default_factory=list)
    failures: list[FailedSpan] = field(default_factory=list)
    stage_outcomes: list[StageOutcome] = field(default_factory=list)

    @property
    def failed_stages(self) -> list[StageOutcome]:
        return [o for o in self.stage_outcomes if not o.succeeded]

    def summary(self) -> str:
        text = (
            f"lines {self.start_line}-{self.end_line}: {len(self.chunks)} chunks saved, "
            f"{len(self.failures)} failed"
        )
        if self.stage_outcomes:
            ok = len(self.stage_outcomes) - len(self.failed_stages)
            text += f", stages {ok}/{len(self.stage_outcomes)} succeeded"
        return text


class RangeProcessor:
    """
    Drives extraction over line ranges and the cursor.

    Args:
        orchestrator: Stage orchestrator bound to an initialized backend
        state_manager: Cursor persistence
        source: Source document being processed
        sleep: Coroutine used for the inter-call delay
    """

    def __init__(
        self,
        orchestrator: StageOrchestrator,
        state_manager: ProcessingStateManager,
        source: SourceDocument,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.orchestrator = orchestrator
        self.state_manager = state_manager
        self.source = source
        self._sleep = sleep
        self.last_report: Optional[RangeReport] = None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_range(
        self, start_line: int, end_line: int, chunk_size_lines: int, delay_seconds: float
    ) -> list[LineSpan]:
        """Validate parameters, clamp to the document and segment."""
        if delay_seconds < 0:
            raise InvalidRangeError(f"delaySeconds must be >= 0, got {delay_seconds}")

        total = self.source.total_lines
        if start_line >= total:
            raise InvalidRangeError(
                f"startLine ({start_line}) is beyond the document ({total} lines)"
            )
        if end_line > total:
            logger.warning(
                f"endLine {end_line} exceeds the document, clamping to {total}"
            )
            end_line = total

        spans = segment(start_line, end_line, chunk_size_lines)
        if len(spans) > processing_settings.MAX_CHUNKS_PER_RANGE:
            raise InvalidRangeError(
                f"Range needs {len(spans)} chunks, "
                f"max: {processing_settings.MAX_CHUNKS_PER_RANGE}"
            )
        return spans

    async def _pause(self, delay_seconds: float) -> None:
        if delay_seconds > 0:
            logger.debug(f"Waiting {delay_seconds}s before the next AI call")
            await self._sleep(delay_seconds)

    async def _advance_cursor(self, chunk: ProcessedChunk) -> None:
        state = await self.state_manager.get_state()
        if chunk.start_line <= state.current_position < chunk.end_line:
            await self.state_manager.advance_to(chunk.end_line)

    # =========================================================================
    # Range processing
    # =========================================================================

    async def process_range(
        self,
        start_line: int,
        end_line: int,
        chunk_size_lines: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        backend_options: Optional[BackendOptions] = None,
    ) -> list[ProcessedChunk]:
        """
        Extract theory for every chunk of [start_line, end_line).

        Args:
            start_line: First line (0-based)
            end_line: Exclusive end; clamped to the document length
            chunk_size_lines: Max lines per chunk (CHUNK_SIZE_LINES if omitted)
            delay_seconds: Pause between AI calls (PROCESSING_DELAY_SECONDS
                if omitted)
            backend_options: Generation options for every call

        Returns:
            Persisted chunks in order. Failed spans are in last_report.

        Raises:
            InvalidRangeError: Invalid range, chunk size or delay
        """
        chunk_size = _or_default(chunk_size_lines, processing_settings.CHUNK_SIZE_LINES)
        delay = _or_default(delay_seconds, processing_settings.PROCESSING_DELAY_SECONDS)
        spans = self._resolve_range(start_line, end_line, chunk_size, delay)
        report = RangeReport(start_line=spans[0].start, end_line=spans[-1].end)
        self.last_report = report

        await self.state_manager.initialize(self.source.total_lines)
        logger.info(
            f"Processing lines {report.start_line}-{report.end_line} "
            f"in {len(spans)} chunks of up to {chunk_size} lines"
        )

        for index, span in enumerate(spans, start=1):
            if index > 1:
                await self._pause(delay)

            logger.info(f"Chunk {index}/{len(spans)}: lines {span.start}-{span.end}")
            try:
                outcome = await self.orchestrator.extract_chunk(
                    span.start,
                    span.end,
                    self.source.read_lines(span.start, span.end),
                    backend_options,
                    chunk_size,
                )
                if outcome.succeeded:
                    report.chunks.append(outcome.chunk)
                    await self._advance_cursor(outcome.chunk)
                else:
                    report.failures.append(FailedSpan(span.start, span.end, outcome.error))
            except Exception as e:
                logger.error(f"Chunk {span.start}-{span.end} failed: {e}")
                report.failures.append(FailedSpan(span.start, span.end, str(e)))

        logger.info(f"Range complete: {report.summary()}")
        return report.chunks

    async def process_all_stages(
        self,
        start_line: int,
        end_line: int,
        chunk_size_lines: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        backend_options: Optional[BackendOptions] = None,
    ) -> RangeReport:
        """
        Extract a range, then run every post-extraction stage over it.

        After extraction, every stored chunk overlapping the range goes
        through theory enhancement, question generation and task
        generation, one stage at a time across all chunks. Per-chunk
        failures are recorded and the walk continues.

        Returns:
            RangeReport with extraction results and every stage outcome
        """
        await self.process_range(
            start_line, end_line, chunk_size_lines, delay_seconds, backend_options
        )
        report = self.last_report
        delay = _or_default(delay_seconds, processing_settings.PROCESSING_DELAY_SECONDS)

        chunks = [
            c
            for c in await self.orchestrator.store.list_chunks()
            if c.start_line < report.end_line and c.end_line > report.start_line
        ]
        logger.info(
            f"Running {len(POST_EXTRACTION_STAGES)} stages over {len(chunks)} chunks"
        )

        for stage in POST_EXTRACTION_STAGES:
            for index, chunk in enumerate(chunks, start=1):
                await self._pause(delay)
                logger.info(f"{stage.value} {index}/{len(chunks)}: {chunk.id}")
                outcome = await self._run_contained(stage, chunk.id, backend_options)
                report.stage_outcomes.append(outcome)

        logger.info(f"All stages complete: {report.summary()}")
        return report

    async def _run_contained(
        self,
        stage: ProcessingStage,
        chunk_id: str,
        backend_options: Optional[BackendOptions],
    ) -> StageOutcome:
        try:
            return await self.orchestrator.run_stage(
                stage, chunk_id, options=backend_options
            )
        except Exception as e:
            logger.error(f"{stage.value} failed for {chunk_id}: {e}")
            return StageOutcome(stage, chunk_id, None, False, str(e))

    # =========================================================================
    # Cursor-driven processing
    # =========================================================================

    async def process_next_chunk(
        self,
        chunk_size_lines: Optional[int] = None,
        backend_options: Optional[BackendOptions] = None,
    ) -> tuple[ProcessedChunk, ProcessingState]:
        """
        Extract the chunk at the cursor and advance past it.

        Reads up to chunk_size_lines lines from the cursor. If the backend
        proposes a valid logical boundary (suggestedEndLine, counted from 1
        within the chunk) the chunk is shortened to it.

        Returns:
            (persisted chunk, updated state)

        Raises:
            ProcessingCompleteError: The cursor is at the end of the document
            InvalidRangeError: Non-positive chunk size or an empty document
            ExtractionFailedError: The backend failed or the response was
                unparseable (recorded in state.error)
        """
        chunk_size = _or_default(chunk_size_lines, processing_settings.CHUNK_SIZE_LINES)
        if chunk_size <= 0:
            raise InvalidRangeError(f"chunkSizeLines must be positive, got {chunk_size}")
        state = await self.state_manager.initialize(self.source.total_lines)
        if self.source.total_lines <= 0 or state.total_lines <= 0:
            raise InvalidRangeError("Source document is empty, nothing to process")
        if is_processing_complete(state):
            raise ProcessingCompleteError("Processing is already complete")

        state = state.model_copy(update={"is_processing": True, "error": None})
        await self.state_manager.save_state(state)

        try:
            start = state.current_position
            end = min(start + chunk_size, state.total_lines)
            chunk, error = await self.orchestrator.build_chunk(
                start, end, self.source.read_lines(start, end), backend_options, chunk_size
            )
            if chunk is None:
                raise ExtractionFailedError(f"Theory extraction failed: {error}")

            suggested = chunk.logical_block_info.suggested_end_line
            if 0 < suggested < end - start:
                logger.info(
                    f"AI suggested ending the logical block after {suggested} lines"
                )
                end = start + suggested
                chunk = chunk.model_copy(
                    update={
                        "id": make_chunk_id(start, end),
                        "end_line": end,
                        "display_end_line": end - 1,
                    }
                )

            await self.orchestrator.persist(chunk)
            state = state.model_copy(
                update={
                    "current_position": min(end, state.total_lines),
                    "is_processing": False,
                    "last_processed_date": utc_now(),
                }
            )
            await self.state_manager.save_state(state)
            return chunk, state
        except Exception as e:
            logger.error(f"Error processing next chunk: {e}")
            failed = await self.state_manager.get_state()
            await self.state_manager.save_state(
                failed.model_copy(update={"is_processing": False, "error": str(e)})
            )
            raise
