"""
Exception hierarchy for the content processor.

Errors fall into three groups:

- Input validation (InvalidRangeError): rejected before any work starts.
- Backend failures (LLMBackendError and subclasses): contained per chunk by
  the stage orchestrator so a batch keeps going.
- Structural errors (ChunkNotFoundError, UnknownStageError,
  ProcessingCompleteError): caller misuse, always propagated.

Content-quality problems (malformed AI JSON) never raise in batch runs;
the sanitizers resolve them into valid entities. Only the single-step
cursor operation turns a failed extraction into ExtractionFailedError, so
the operator sees why the cursor did not move.
"""


class ContentProcessorError(Exception):
    """Base class for all content processor errors."""


class InvalidRangeError(ContentProcessorError, ValueError):
    """Invalid line range, chunk size or delay."""


class LLMBackendError(ContentProcessorError):
    """Base class for failures raised by an AI backend adapter."""


class BackendUnavailable(LLMBackendError):
    """Backend is not initialized or cannot be reached."""


class BackendError(LLMBackendError):
    """Backend answered with an HTTP error or a malformed transport payload."""


class BackendTimeout(LLMBackendError):
    """Backend did not answer within the configured timeout."""


class ChunkNotFoundError(ContentProcessorError, LookupError):
    """No chunk with the requested id exists in the catalog."""

    def __init__(self, chunk_id: str):
        super().__init__(f"Chunk not found: {chunk_id}")
        self.chunk_id = chunk_id


class UnknownStageError(ContentProcessorError, ValueError):
    """Stage name is not one of the known processing stages."""

    def __init__(self, stage: object):
        super().__init__(f"Unknown processing stage: {stage}")
        self.stage = stage


class ProcessingCompleteError(ContentProcessorError):
    """The processing cursor already sits at the end of the document."""


class ExtractionFailedError(ContentProcessorError):
    """Theory extraction produced no chunk for a single cursor-driven step."""
