"""
Processing State Manager

Owns the resumable cursor (ProcessingState) on top of a ChunkStore.
Single-operator: there is no locking, concurrent writers can race.

Usage:
    from content_processor.services.processing.state import ProcessingStateManager

    manager = ProcessingStateManager(store)
    state = await manager.initialize(document.total_lines)
    print(f"{progress_percent(state):.1f}% done")
"""

import logging
from typing import Optional

from content_processor.models.processing import ProcessingState, utc_now
from content_processor.services.storage import ChunkStore

logger = logging.getLogger(__name__)


def progress_percent(state: ProcessingState) -> float:
    """Share of the document behind the cursor, in [0, 100]."""
    if state.total_lines <= 0:
        return 0.0
    percent = state.current_position / state.total_lines * 100
    return min(100.0, max(0.0, percent))


def is_processing_complete(state: ProcessingState) -> bool:
    """True once the cursor has reached the end of a non-empty document."""
    return state.total_lines > 0 and state.current_position >= state.total_lines


class ProcessingStateManager:
    """Reads and writes the ProcessingState record."""

    def __init__(self, store: ChunkStore):
        self.store = store

    async def get_state(self) -> ProcessingState:
        """Stored state; a fresh state at line 0 is created and saved if absent."""
        state = await self.store.get_state()
        if state is None:
            state = ProcessingState()
            await self.store.save_state(state)
            logger.info("Created new processing state at line 0")
        return state

    async def save_state(self, state: ProcessingState) -> None:
        await self.store.save_state(state)
        logger.debug(
            f"Saved processing state: {state.current_position}/{state.total_lines}"
        )

    async def initialize(self, total_lines: int) -> ProcessingState:
        """
        Make sure the state knows the document length.

        A stored total of zero is replaced by total_lines and the cursor is
        set to 0. An existing non-zero total is left alone so a resumed run
        keeps its cursor.
        """
        state = await self.get_state()
        if state.total_lines <= 0:
            state = ProcessingState(current_position=0, total_lines=total_lines)
            await self.save_state(state)
            logger.info(f"Initialized processing state with {total_lines} lines")
        elif state.total_lines != total_lines:
            logger.warning(
                f"Stored totalLines ({state.total_lines}) differs from the source "
                f"document ({total_lines}); reset to re-read it"
            )
        return state

    async def reset(self, total_lines: Optional[int] = None) -> ProcessingState:
        """
        Start over at line 0.

        Previously produced chunks are kept; clear the catalog separately.

        Args:
            total_lines: New document length (defaults to the stored one)
        """
        previous = await self.store.get_state()
        if total_lines is None:
            total_lines = previous.total_lines if previous else 0
        state = ProcessingState(current_position=0, total_lines=total_lines)
        await self.save_state(state)
        logger.info(f"Reset processing state to line 0 of {total_lines}")
        return state

    async def advance_to(self, position: int) -> ProcessingState:
        """Move the cursor forward to position (clamped to the document end)."""
        state = await self.get_state()
        new_position = min(position, state.total_lines)
        if new_position <= state.current_position:
            return state
        state = state.model_copy(
            update={"current_position": new_position, "last_processed_date": utc_now()}
        )
        await self.save_state(state)
        logger.info(f"Cursor advanced to line {new_position}/{state.total_lines}")
        return state
