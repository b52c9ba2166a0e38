"""
Source Document Access

Read-only, line-addressed view of the study document being processed.
The file is read once (UTF-8) and kept in memory; line numbers are 0-based
and ranges are half-open.
"""

import logging
from pathlib import Path
from typing import Union

import aiofiles

logger = logging.getLogger(__name__)


class SourceDocument:
    """In-memory lines of a source document."""

    def __init__(self, lines: list[str], path: Union[str, Path, None] = None):
        self._lines = lines
        self.path = Path(path) if path else None

    @classmethod
    async def load(cls, path: Union[str, Path]) -> "SourceDocument":
        """
        Read a UTF-8 text file asynchronously.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            text = await f.read()
        document = cls.from_text(text, path=path)
        logger.info(f"Loaded source document {path} ({document.total_lines} lines)")
        return document

    @classmethod
    def from_text(
        cls, text: str, path: Union[str, Path, None] = None
    ) -> "SourceDocument":
        return cls(text.splitlines(), path=path)

    @property
    def total_lines(self) -> int:
        return len(self._lines)

    def read_lines(self, start: int, end: int) -> str:
        """Text of lines [start, end), clamped to the document length."""
        start = max(0, start)
        end = min(end, self.total_lines)
        if end <= start:
            return ""
        return "\n".join(self._lines[start:end])
