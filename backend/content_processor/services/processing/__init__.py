"""
Content extraction pipeline.

Usage:
    from content_processor.services.processing import (
        ProcessingStateManager,
        RangeProcessor,
        SourceDocument,
        StageOrchestrator,
    )

    orchestrator = StageOrchestrator(backend, store)
    processor = RangeProcessor(orchestrator, ProcessingStateManager(store), document)
    await processor.process_range(0, 300)
"""

from content_processor.services.processing.orchestrator import (
    StageOrchestrator,
    StageOutcome,
)
from content_processor.services.processing.pipeline import (
    FailedSpan,
    RangeProcessor,
    RangeReport,
)
from content_processor.services.processing.segmenter import LineSpan, segment
from content_processor.services.processing.source import SourceDocument
from content_processor.services.processing.state import (
    ProcessingStateManager,
    is_processing_complete,
    progress_percent,
)
from content_processor.services.processing.validation import validate_chunk

__all__ = [
    "FailedSpan",
    "LineSpan",
    "ProcessingStateManager",
    "RangeProcessor",
    "RangeReport",
    "SourceDocument",
    "StageOrchestrator",
    "StageOutcome",
    "is_processing_complete",
    "progress_percent",
    "segment",
    "validate_chunk",
]
