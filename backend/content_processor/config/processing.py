"""
Processing Pipeline Configuration

Configuration settings for the chunk extraction pipeline. These settings
control chunk sizing, pacing between AI calls, per-stage generation
parameters, entity normalization and output validation.

All settings can be overridden via environment variables with PROCESSING_ prefix.

Usage:
    from content_processor.config.processing import processing_settings

    chunk_size = processing_settings.CHUNK_SIZE_LINES
    delay = processing_settings.PROCESSING_DELAY_SECONDS
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class ProcessingSettings(BaseSettings):
    """
    Processing pipeline configuration.

    Attributes are grouped by category:
    - Chunking and pacing
    - Per-stage LLM parameters
    - Backend transport limits
    - Entity normalization
    - Quality validation settings
    """

    # =========================================================================
    # CHUNKING AND PACING
    # =========================================================================

    # Maximum lines per chunk sent to the backend
    CHUNK_SIZE_LINES: int = 100

    # Cooperative sleep between AI calls (rate-limit mitigation)
    PROCESSING_DELAY_SECONDS: float = 1.0

    # Upper bound on chunks handled by a single range call
    MAX_CHUNKS_PER_RANGE: int = 1000

    # =========================================================================
    # STAGE PARAMETERS
    # =========================================================================
    # High temperatures follow the original operator defaults; the sanitizers
    # absorb the resulting syntax noise.

    THEORY_EXTRACTION_TEMPERATURE: float = 1.0
    THEORY_EXTRACTION_MAX_TOKENS: int = 65536

    THEORY_ENHANCEMENT_TEMPERATURE: float = 0.9
    THEORY_ENHANCEMENT_MAX_TOKENS: int = 16384

    QUESTIONS_TEMPERATURE: float = 1.0
    QUESTIONS_MAX_TOKENS: int = 32768
    MAX_QUESTIONS: int = 20

    TASKS_TEMPERATURE: float = 0.9
    TASKS_MAX_TOKENS: int = 32768

    REWRITE_TEMPERATURE: float = 0.7
    REWRITE_MAX_TOKENS: int = 65536

    # =========================================================================
    # BACKEND TRANSPORT
    # =========================================================================

    # Maximum time for a single backend call (seconds). Large chunks can take minutes.
    LLM_TIMEOUT_SECONDS: int = 600

    # Attempts per backend call for transient transport failures (1 = no retry)
    LLM_MAX_ATTEMPTS: int = 1

    # Characters of a raw response included in debug logs
    RESPONSE_LOG_PREVIEW: int = 500

    # =========================================================================
    # ENTITY NORMALIZATION
    # =========================================================================

    # Number of options every multiple-choice question ends up with
    MCQ_OPTION_COUNT: int = 4

    # =========================================================================
    # QUALITY VALIDATION SETTINGS
    # =========================================================================

    # Whether to validate extracted chunks and log quality issues
    VALIDATE_OUTPUTS: bool = True

    # Minimum number of theory blocks expected per extracted chunk
    MIN_THEORY_BLOCKS: int = 1

    # Minimum theory content length (characters)
    MIN_CONTENT_LENGTH: int = 50

    class Config:
        env_prefix = "PROCESSING_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_processing_settings() -> ProcessingSettings:
    """Get cached processing settings instance."""
    return ProcessingSettings()


# Convenience instance
processing_settings = get_processing_settings()
