"""
Chunk and State Storage

Persists the processing cursor and the chunk catalog. The pipeline depends
only on the ChunkStore contract:

- get_state / save_state: the single ProcessingState record
- get_chunk / save_chunk: one ProcessedChunk by id (save overwrites)
- list_chunks: the full catalog, sorted by startLine
- clear_chunks: drop the whole catalog

Implementations:
- InMemoryChunkStore: tests and dry runs
- RedisChunkStore: one JSON string key for the state and one hash of
  chunk JSON keyed by chunk id, both under settings.STORAGE_PREFIX

Values are stored exactly as they are exported: camelCase JSON.

Usage:
    from content_processor.services.storage import RedisChunkStore, export_chunks

    store = RedisChunkStore()
    chunks = await store.list_chunks()
    await export_chunks(store, "exports/chunks.json")
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Union

import aiofiles
import redis.asyncio as redis

from content_processor.config.settings import settings
from content_processor.db.redis import get_redis
from content_processor.exceptions import ChunkNotFoundError
from content_processor.models.processing import ProcessedChunk, ProcessingState

logger = logging.getLogger(__name__)

STATE_KEY = "processingState"
CHUNKS_KEY = "chunks"


class ChunkStore(ABC):
    """Key-value contract for the processing state and chunk catalog."""

    @abstractmethod
    async def get_state(self) -> Optional[ProcessingState]:
        """Stored state, or None if it was never saved."""

    @abstractmethod
    async def save_state(self, state: ProcessingState) -> None:
        ...

    @abstractmethod
    async def get_chunk(self, chunk_id: str) -> Optional[ProcessedChunk]:
        ...

    @abstractmethod
    async def save_chunk(self, chunk: ProcessedChunk) -> None:
        """Insert or overwrite the chunk with chunk.id."""

    @abstractmethod
    async def list_chunks(self) -> list[ProcessedChunk]:
        """Every chunk, ordered by startLine then id."""

    @abstractmethod
    async def clear_chunks(self) -> int:
        """Delete the whole catalog and return how many chunks were removed."""

    async def close(self) -> None:
        """Release connections held by the store."""


def _sorted(chunks: list[ProcessedChunk]) -> list[ProcessedChunk]:
    return sorted(chunks, key=lambda c: (c.start_line, c.id))


class InMemoryChunkStore(ChunkStore):
    """Process-local store. Values are round-tripped through JSON like Redis."""

    def __init__(self) -> None:
        self._state: Optional[dict[str, Any]] = None
        self._chunks: dict[str, dict[str, Any]] = {}

    async def get_state(self) -> Optional[ProcessingState]:
        if self._state is None:
            return None
        return ProcessingState.model_validate(self._state)

    async def save_state(self, state: ProcessingState) -> None:
        self._state = state.to_json_dict()

    async def get_chunk(self, chunk_id: str) -> Optional[ProcessedChunk]:
        data = self._chunks.get(chunk_id)
        return ProcessedChunk.model_validate(data) if data is not None else None

    async def save_chunk(self, chunk: ProcessedChunk) -> None:
        self._chunks[chunk.id] = chunk.to_json_dict()

    async def list_chunks(self) -> list[ProcessedChunk]:
        return _sorted([ProcessedChunk.model_validate(d) for d in self._chunks.values()])

    async def clear_chunks(self) -> int:
        count = len(self._chunks)
        self._chunks.clear()
        return count


class RedisChunkStore(ChunkStore):
    """
    Redis-backed store.

    Keys:
        {prefix}:processingState  JSON string
        {prefix}:chunks           hash of chunk id -> chunk JSON
    """

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ) -> None:
        self._client = client
        self.prefix = prefix or settings.STORAGE_PREFIX

    @property
    def state_key(self) -> str:
        return f"{self.prefix}:{STATE_KEY}"

    @property
    def chunks_key(self) -> str:
        return f"{self.prefix}:{CHUNKS_KEY}"

    async def _redis(self) -> redis.Redis:
        if self._client is None:
            self._client = await get_redis()
        return self._client

    async def get_state(self) -> Optional[ProcessingState]:
        r = await self._redis()
        raw = await r.get(self.state_key)
        if raw is None:
            return None
        return ProcessingState.model_validate_json(raw)

    async def save_state(self, state: ProcessingState) -> None:
        r = await self._redis()
        await r.set(self.state_key, json.dumps(state.to_json_dict()))

    async def get_chunk(self, chunk_id: str) -> Optional[ProcessedChunk]:
        r = await self._redis()
        raw = await r.hget(self.chunks_key, chunk_id)
        if raw is None:
            return None
        return ProcessedChunk.model_validate_json(raw)

    async def save_chunk(self, chunk: ProcessedChunk) -> None:
        r = await self._redis()
        await r.hset(self.chunks_key, chunk.id, json.dumps(chunk.to_json_dict()))

    async def list_chunks(self) -> list[ProcessedChunk]:
        r = await self._redis()
        raw_chunks = await r.hgetall(self.chunks_key)
        return _sorted(
            [ProcessedChunk.model_validate_json(raw) for raw in raw_chunks.values()]
        )

    async def clear_chunks(self) -> int:
        r = await self._redis()
        count = await r.hlen(self.chunks_key)
        await r.delete(self.chunks_key)
        logger.info(f"Cleared {count} chunks from {self.chunks_key}")
        return count

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# =============================================================================
# Catalog operations
# =============================================================================


async def mark_chunk_completed(store: ChunkStore, chunk_id: str) -> ProcessedChunk:
    """
    Set a chunk's completed flag. The flag never reverts.

    Raises:
        ChunkNotFoundError: If no chunk has this id
    """
    chunk = await store.get_chunk(chunk_id)
    if chunk is None:
        raise ChunkNotFoundError(chunk_id)
    if not chunk.completed:
        chunk.completed = True
        await store.save_chunk(chunk)
        logger.info(f"Marked chunk {chunk_id} as completed")
    return chunk


async def export_chunks_json(store: ChunkStore) -> str:
    """The whole catalog as one JSON document keyed by chunk id."""
    chunks = await store.list_chunks()
    return json.dumps(
        {chunk.id: chunk.to_json_dict() for chunk in chunks},
        indent=2,
        ensure_ascii=False,
    )


async def export_chunks(store: ChunkStore, path: Union[str, Path]) -> int:
    """
    Write the catalog to a JSON file.

    Returns:
        Number of exported chunks
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    document = await export_chunks_json(store)
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(document)
    count = len(json.loads(document))
    logger.info(f"Exported {count} chunks to {path}")
    return count
