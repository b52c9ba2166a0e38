"""
Unit tests for the RangeProcessor.

Tests range processing with per-chunk fault isolation, the resumable
cursor, the single-step cursor operation and the all-stages run.
"""

import pytest

from content_processor.exceptions import (
    BackendError,
    ExtractionFailedError,
    InvalidRangeError,
    ProcessingCompleteError,
)
from content_processor.models import ProcessingState
from content_processor.services.processing import (
    ProcessingStateManager,
    RangeProcessor,
    StageOrchestrator,
)
from content_processor.services.processing.source import SourceDocument
from tests.fakes import extraction_response

ENHANCED = '{"content": "Enhanced explanation with more detail and examples."}'
QUESTIONS = '{"questions": [{"type": "open", "question": "Why?"}]}'
TASKS = '{"tasks": [{"title": "Build it"}]}'


@pytest.fixture
def state_manager(memory_store) -> ProcessingStateManager:
    return ProcessingStateManager(memory_store)


@pytest.fixture
def processor(fake_backend, memory_store, state_manager, sample_document, no_sleep):
    orchestrator = StageOrchestrator(fake_backend, memory_store)
    return RangeProcessor(orchestrator, state_manager, sample_document, sleep=no_sleep)


class TestProcessRange:
    """Tests for process_range()."""

    @pytest.mark.asyncio
    async def test_all_chunks_saved(self, processor, fake_backend, memory_store) -> None:
        fake_backend.queue(*(extraction_response((f"T{i}",)) for i in range(3)))

        chunks = await processor.process_range(0, 250, chunk_size_lines=100, delay_seconds=0)

        assert [(c.start_line, c.end_line) for c in chunks] == [(0, 100), (100, 200), (200, 250)]
        assert len(await memory_store.list_chunks()) == 3
        assert processor.last_report.failures == []

    @pytest.mark.asyncio
    async def test_failed_chunk_does_not_abort_range(
        self, processor, fake_backend, memory_store, state_manager
    ) -> None:
        fake_backend.queue(
            extraction_response(("First",)),
            BackendError("Ollama API error: 500"),
            extraction_response(("Third",)),
        )

        chunks = await processor.process_range(0, 250, chunk_size_lines=100, delay_seconds=0)

        assert [c.start_line for c in chunks] == [0, 200]
        failures = processor.last_report.failures
        assert [(f.start_line, f.end_line) for f in failures] == [(100, 200)]
        assert "500" in failures[0].error
        assert fake_backend.calls == 3

        # Cursor stays at the failed chunk so a resume retries it
        state = await state_manager.get_state()
        assert state.current_position == 100
        assert state.total_lines == 250

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_isolated(self, processor, fake_backend) -> None:
        fake_backend.queue(RuntimeError("boom"), extraction_response())

        chunks = await processor.process_range(0, 200, chunk_size_lines=100, delay_seconds=0)

        assert len(chunks) == 1
        assert processor.last_report.failures[0].error == "boom"

    @pytest.mark.asyncio
    async def test_cursor_advances_over_contiguous_chunks(
        self, processor, fake_backend, state_manager
    ) -> None:
        fake_backend.queue(extraction_response(), extraction_response())

        await processor.process_range(0, 200, chunk_size_lines=100, delay_seconds=0)

        assert (await state_manager.get_state()).current_position == 200

    @pytest.mark.asyncio
    async def test_range_ahead_of_cursor_leaves_it(
        self, processor, fake_backend, state_manager
    ) -> None:
        fake_backend.queue(extraction_response())

        await processor.process_range(100, 200, chunk_size_lines=100, delay_seconds=0)

        assert (await state_manager.get_state()).current_position == 0

    @pytest.mark.asyncio
    async def test_end_is_clamped(self, processor, fake_backend) -> None:
        fake_backend.queue(extraction_response())

        chunks = await processor.process_range(200, 999, chunk_size_lines=100, delay_seconds=0)

        assert [(c.start_line, c.end_line) for c in chunks] == [(200, 250)]
        assert processor.last_report.end_line == 250

    @pytest.mark.asyncio
    async def test_delay_between_calls(self, processor, fake_backend, no_sleep) -> None:
        fake_backend.queue(*(extraction_response() for _ in range(3)))

        await processor.process_range(0, 250, chunk_size_lines=100, delay_seconds=2)

        assert no_sleep.await_count == 2
        no_sleep.assert_awaited_with(2)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "start,end,size,delay",
        [(250, 300, 100, 0), (-1, 10, 100, 0), (10, 5, 100, 0), (0, 10, 0, 0), (0, 10, 5, -1)],
    )
    async def test_invalid_parameters(
        self, processor, fake_backend, start, end, size, delay
    ) -> None:
        with pytest.raises(InvalidRangeError):
            await processor.process_range(start, end, size, delay)
        assert fake_backend.calls == 0

    @pytest.mark.asyncio
    async def test_prompt_uses_requested_chunk_size(self, processor, fake_backend) -> None:
        fake_backend.queue(extraction_response(), extraction_response())

        await processor.process_range(0, 60, chunk_size_lines=30, delay_seconds=0)

        assert len(fake_backend.prompts) == 2
        assert all("must not exceed 30 lines" in p for p in fake_backend.prompts)


class TestProcessNextChunk:
    """Tests for process_next_chunk()."""

    @pytest.mark.asyncio
    async def test_advances_cursor(self, processor, fake_backend, memory_store) -> None:
        fake_backend.queue(extraction_response())

        chunk, state = await processor.process_next_chunk(chunk_size_lines=100)

        assert (chunk.start_line, chunk.end_line) == (0, 100)
        assert state.current_position == 100
        assert state.is_processing is False
        assert state.last_processed_date is not None
        assert await memory_store.get_chunk(chunk.id) is not None

    @pytest.mark.asyncio
    async def test_honors_suggested_end_line(self, processor, fake_backend) -> None:
        fake_backend.queue(extraction_response(suggested_end_line=40))

        chunk, state = await processor.process_next_chunk(chunk_size_lines=100)

        assert chunk.end_line == 40
        assert chunk.display_end_line == 39
        assert chunk.id.startswith("chunk_0_40_")
        assert state.current_position == 40

    @pytest.mark.asyncio
    @pytest.mark.parametrize("suggested", [0, 100, 150, -1])
    async def test_ignores_out_of_range_suggestion(
        self, processor, fake_backend, suggested
    ) -> None:
        fake_backend.queue(extraction_response(suggested_end_line=suggested))

        chunk, state = await processor.process_next_chunk(chunk_size_lines=100)

        assert chunk.end_line == 100
        assert state.current_position == 100

    @pytest.mark.asyncio
    async def test_last_chunk_is_truncated(
        self, processor, fake_backend, state_manager
    ) -> None:
        await state_manager.save_state(ProcessingState(current_position=200, total_lines=250))
        fake_backend.queue(extraction_response())

        chunk, state = await processor.process_next_chunk(chunk_size_lines=100)

        assert chunk.end_line == 250
        assert state.current_position == 250

    @pytest.mark.asyncio
    async def test_complete_raises(self, processor, fake_backend, state_manager) -> None:
        await state_manager.save_state(ProcessingState(current_position=250, total_lines=250))

        with pytest.raises(ProcessingCompleteError):
            await processor.process_next_chunk()
        assert fake_backend.calls == 0

    @pytest.mark.asyncio
    async def test_failure_records_error(
        self, processor, fake_backend, state_manager, memory_store
    ) -> None:
        fake_backend.queue("no JSON in here")

        with pytest.raises(ExtractionFailedError):
            await processor.process_next_chunk()

        state = await state_manager.get_state()
        assert state.current_position == 0
        assert state.is_processing is False
        assert "could not be parsed" in state.error
        assert await memory_store.list_chunks() == []

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(
        self, processor, fake_backend, state_manager
    ) -> None:
        fake_backend.queue(BackendError("down"), extraction_response())

        with pytest.raises(ExtractionFailedError):
            await processor.process_next_chunk()
        _, state = await processor.process_next_chunk()

        assert state.error is None

    @pytest.mark.asyncio
    async def test_chunk_size_reaches_prompt(self, processor, fake_backend) -> None:
        fake_backend.queue(extraction_response())

        await processor.process_next_chunk(chunk_size_lines=40)

        assert "must not exceed 40 lines" in fake_backend.prompts[0]

    @pytest.mark.asyncio
    async def test_empty_document_raises_before_backend_call(
        self, fake_backend, memory_store, state_manager, no_sleep
    ) -> None:
        processor = RangeProcessor(
            StageOrchestrator(fake_backend, memory_store),
            state_manager,
            SourceDocument.from_text(""),
            sleep=no_sleep,
        )

        with pytest.raises(InvalidRangeError):
            await processor.process_next_chunk()
        assert fake_backend.calls == 0
        assert await memory_store.list_chunks() == []


class TestProcessAllStages:
    """Tests for process_all_stages()."""

    @pytest.mark.asyncio
    async def test_runs_every_stage(self, processor, fake_backend, memory_store) -> None:
        fake_backend.queue(
            extraction_response(),
            extraction_response(),
            ENHANCED,
            ENHANCED,
            QUESTIONS,
            QUESTIONS,
            TASKS,
            TASKS,
        )

        report = await processor.process_all_stages(0, 200, 100, 0)

        assert len(report.chunks) == 2
        assert len(report.stage_outcomes) == 6
        assert report.failed_stages == []
        for chunk in await memory_store.list_chunks():
            assert chunk.theory[0].content.startswith("Enhanced")
            assert len(chunk.questions) == 1
            assert len(chunk.tasks) == 1

    @pytest.mark.asyncio
    async def test_stage_failure_is_isolated(
        self, processor, fake_backend, memory_store
    ) -> None:
        fake_backend.queue(
            extraction_response(),
            extraction_response(),
            ENHANCED,
            ENHANCED,
            BackendError("rate limited"),
            QUESTIONS,
            TASKS,
            TASKS,
        )

        report = await processor.process_all_stages(0, 200, 100, 0)

        assert len(report.failed_stages) == 1
        failed = report.failed_stages[0]
        assert failed.chunk_id == report.chunks[0].id
        assert "rate limited" in failed.error
        assert "stages 5/6 succeeded" in report.summary()

        first, second = await memory_store.list_chunks()
        assert first.questions == []
        assert len(second.questions) == 1
        assert len(first.tasks) == 1
