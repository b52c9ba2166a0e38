"""
Text Segmenter

Splits a line range of the source document into bounded, contiguous spans.
Pure and deterministic: no I/O, the caller reads each span's text from the
SourceDocument.

Spans use exclusive end lines, so segmenting [0, 250) with a chunk size of
100 yields [0, 100), [100, 200), [200, 250).

Usage:
    from content_processor.services.processing.segmenter import segment

    for span in segment(0, document.total_lines, chunk_size_lines=100):
        text = document.read_lines(span.start, span.end)
"""

from typing import NamedTuple

from content_processor.config.processing import processing_settings
from content_processor.exceptions import InvalidRangeError


class LineSpan(NamedTuple):
    """Half-open line range [start, end)."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def validate_range(start_line: int, end_line: int, chunk_size_lines: int) -> None:
    """
    Reject invalid range parameters before any work starts.

    Raises:
        InvalidRangeError: Negative start, end not above start, or
            non-positive chunk size
    """
    if start_line < 0:
        raise InvalidRangeError(f"startLine must be >= 0, got {start_line}")
    if end_line <= start_line:
        raise InvalidRangeError(
            f"endLine ({end_line}) must be greater than startLine ({start_line})"
        )
    if chunk_size_lines <= 0:
        raise InvalidRangeError(
            f"chunkSizeLines must be positive, got {chunk_size_lines}"
        )


def segment(
    start_line: int,
    end_line: int,
    chunk_size_lines: int = processing_settings.CHUNK_SIZE_LINES,
) -> list[LineSpan]:
    """
    Compute chunk boundaries covering [start_line, end_line).

    Every span holds at most chunk_size_lines lines; the last one is
    truncated to end_line.

    Raises:
        InvalidRangeError: See validate_range
    """
    validate_range(start_line, end_line, chunk_size_lines)
    return [
        LineSpan(start, min(start + chunk_size_lines, end_line))
        for start in range(start_line, end_line, chunk_size_lines)
    ]
