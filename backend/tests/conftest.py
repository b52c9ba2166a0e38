"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across the unit tests.
"""

import os
import sys
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root BEFORE any fixtures run
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try backend directory
    _backend_env = Path(__file__).parent.parent / ".env"
    if _backend_env.exists():
        load_dotenv(_backend_env)

from content_processor.models.entities import CodeExample, TheoryBlock  # noqa: E402
from content_processor.models.processing import ProcessedChunk  # noqa: E402
from content_processor.services.processing.source import SourceDocument  # noqa: E402
from content_processor.services.storage import InMemoryChunkStore  # noqa: E402
from tests.fakes import FakeBackend  # noqa: E402


# ============================================================================
# Environment Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """
    Set up test environment variables before any tests run.

    Overrides values from .env files so tests never reach a real provider
    or a shared Redis database.
    """
    original_env = os.environ.copy()

    test_env = {
        "REDIS_URL": os.environ.get("REDIS_URL", "redis://localhost:6379/1"),
        "GEMINI_API_KEY": "test-api-key",
        "OPENAI_API_KEY": "test-api-key",
        "OLLAMA_BASE_URL": "http://ollama.test:11434",
        "DEBUG": "true",
    }
    os.environ.update(test_env)

    yield

    os.environ.clear()
    os.environ.update(original_env)


# ============================================================================
# Backend, Storage and Source Fixtures
# ============================================================================


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def memory_store() -> InMemoryChunkStore:
    return InMemoryChunkStore()


@pytest.fixture
def sample_document() -> SourceDocument:
    """A 250-line document."""
    return SourceDocument.from_text(
        "\n".join(f"line {i}" for i in range(250)), path="notes.md"
    )


@pytest.fixture
def sample_theory_block() -> TheoryBlock:
    return TheoryBlock(
        id="theory_1",
        title="useEffect",
        content="useEffect runs side effects after render and can return a cleanup.",
        examples=[
            CodeExample(
                id="example_1",
                title="Subscribe",
                code="useEffect(() => subscribe(), []);",
                language="typescript",
            )
        ],
        tags=["react", "hooks"],
    )


@pytest.fixture
def sample_chunk(sample_theory_block: TheoryBlock) -> ProcessedChunk:
    return ProcessedChunk(
        id="chunk_0_100_1700000000000",
        start_line=0,
        end_line=100,
        theory=[sample_theory_block],
    )


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_redis() -> MagicMock:
    """
    Create a mock Redis client for unit testing.

    Backed by plain dicts so the store can be exercised without a server.
    """
    strings: dict[str, str] = {}
    hashes: dict[str, dict[str, str]] = {}

    async def _get(key):
        return strings.get(key)

    async def _set(key, value):
        strings[key] = value
        return True

    async def _hget(key, field):
        return hashes.get(key, {}).get(field)

    async def _hset(key, field, value):
        hashes.setdefault(key, {})[field] = value
        return 1

    async def _hgetall(key):
        return dict(hashes.get(key, {}))

    async def _hlen(key):
        return len(hashes.get(key, {}))

    async def _delete(*keys):
        removed = 0
        for key in keys:
            removed += int(strings.pop(key, None) is not None)
            removed += int(hashes.pop(key, None) is not None)
        return removed

    mock = MagicMock()
    mock.get = AsyncMock(side_effect=_get)
    mock.set = AsyncMock(side_effect=_set)
    mock.hget = AsyncMock(side_effect=_hget)
    mock.hset = AsyncMock(side_effect=_hset)
    mock.hgetall = AsyncMock(side_effect=_hgetall)
    mock.hlen = AsyncMock(side_effect=_hlen)
    mock.delete = AsyncMock(side_effect=_delete)
    mock.aclose = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records delays."""
    return AsyncMock(return_value=None)
