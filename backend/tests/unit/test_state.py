"""
Unit tests for the processing state manager.
"""

import pytest
from pydantic import ValidationError

from content_processor.models import ProcessingState
from content_processor.services.processing.state import (
    ProcessingStateManager,
    is_processing_complete,
    progress_percent,
)


@pytest.fixture
def manager(memory_store) -> ProcessingStateManager:
    return ProcessingStateManager(memory_store)


class TestProgress:
    @pytest.mark.parametrize(
        "position,total,expected",
        [(0, 0, 0.0), (0, 200, 0.0), (50, 200, 25.0), (200, 200, 100.0)],
    )
    def test_progress_percent(self, position, total, expected) -> None:
        state = ProcessingState(current_position=position, total_lines=total)
        assert progress_percent(state) == expected

    def test_is_processing_complete(self) -> None:
        assert not is_processing_complete(ProcessingState())
        assert not is_processing_complete(ProcessingState(current_position=5, total_lines=10))
        assert is_processing_complete(ProcessingState(current_position=10, total_lines=10))

    def test_cursor_beyond_total_is_invalid(self) -> None:
        with pytest.raises(ValidationError):
            ProcessingState(current_position=11, total_lines=10)


class TestProcessingStateManager:
    @pytest.mark.asyncio
    async def test_get_state_creates_default(self, manager, memory_store) -> None:
        state = await manager.get_state()

        assert state.current_position == 0
        assert state.total_lines == 0
        assert await memory_store.get_state() == state

    @pytest.mark.asyncio
    async def test_initialize_sets_total_once(self, manager) -> None:
        await manager.initialize(300)
        await manager.advance_to(120)

        state = await manager.initialize(310)

        assert state.total_lines == 300
        assert state.current_position == 120

    @pytest.mark.asyncio
    async def test_advance_is_monotonic_and_clamped(self, manager) -> None:
        await manager.initialize(100)

        assert (await manager.advance_to(40)).current_position == 40
        assert (await manager.advance_to(10)).current_position == 40
        state = await manager.advance_to(500)

        assert state.current_position == 100
        assert state.last_processed_date is not None

    @pytest.mark.asyncio
    async def test_reset_keeps_total_and_chunks(
        self, manager, memory_store, sample_chunk
    ) -> None:
        await memory_store.save_chunk(sample_chunk)
        await manager.initialize(100)
        await manager.advance_to(60)

        state = await manager.reset()

        assert state.current_position == 0
        assert state.total_lines == 100
        assert len(await memory_store.list_chunks()) == 1

    @pytest.mark.asyncio
    async def test_reset_with_new_total(self, manager) -> None:
        await manager.initialize(100)

        state = await manager.reset(total_lines=80)

        assert state.total_lines == 80
