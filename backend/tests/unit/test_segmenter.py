"""
Unit tests for the text segmenter and source document access.
"""

import pytest

from content_processor.exceptions import InvalidRangeError
from content_processor.services.processing.segmenter import LineSpan, segment
from content_processor.services.processing.source import SourceDocument


class TestSegment:
    """Tests for segment()."""

    def test_last_span_is_truncated(self) -> None:
        spans = segment(0, 250, chunk_size_lines=100)

        assert spans == [LineSpan(0, 100), LineSpan(100, 200), LineSpan(200, 250)]
        assert spans[-1].length == 50

    def test_spans_are_contiguous_and_bounded(self) -> None:
        spans = segment(17, 1003, chunk_size_lines=64)

        assert spans[0].start == 17
        assert spans[-1].end == 1003
        for previous, current in zip(spans, spans[1:]):
            assert previous.end == current.start
        assert all(0 < span.length <= 64 for span in spans)

    def test_range_smaller_than_chunk(self) -> None:
        assert segment(5, 8, chunk_size_lines=100) == [LineSpan(5, 8)]

    @pytest.mark.parametrize(
        "start,end,size",
        [(-1, 10, 5), (10, 10, 5), (10, 3, 5), (0, 10, 0), (0, 10, -4)],
    )
    def test_invalid_parameters_raise(self, start: int, end: int, size: int) -> None:
        with pytest.raises(InvalidRangeError):
            segment(start, end, chunk_size_lines=size)


class TestSourceDocument:
    """Tests for SourceDocument."""

    def test_read_lines_half_open(self) -> None:
        document = SourceDocument.from_text("a\nb\nc\nd")

        assert document.total_lines == 4
        assert document.read_lines(1, 3) == "b\nc"

    def test_read_lines_clamps_to_document(self) -> None:
        document = SourceDocument.from_text("a\nb")

        assert document.read_lines(1, 50) == "b"
        assert document.read_lines(5, 10) == ""

    @pytest.mark.asyncio
    async def test_load_reads_utf8(self, tmp_path) -> None:
        path = tmp_path / "notes.md"
        path.write_text("# Hooks\nuseState – state\n", encoding="utf-8")

        document = await SourceDocument.load(path)

        assert document.total_lines == 2
        assert document.read_lines(1, 2) == "useState – state"
        assert document.path == path

    @pytest.mark.asyncio
    async def test_load_missing_file_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            await SourceDocument.load(tmp_path / "missing.md")
