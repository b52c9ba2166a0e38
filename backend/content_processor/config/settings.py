"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from content_processor.config import settings

    # Access settings
    redis_url = settings.REDIS_URL
    backend = settings.LLM_BACKEND
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Content Processor"
    DEBUG: bool = False

    # Redis (chunk catalog and processing state)
    REDIS_URL: str = "redis://localhost:6379/0"
    STORAGE_PREFIX: str = "contentProcessor"

    # Source document to be processed (markdown / plain text)
    SOURCE_DOCUMENT_PATH: str = "data/MyNotes.md"

    # Backend selection: "hosted" (LiteLLM) or "local" (Ollama)
    LLM_BACKEND: str = "hosted"

    # Hosted backend (model-agnostic via LiteLLM)
    # Format: provider/model-name
    # Examples: gemini/gemini-2.5-flash, openai/gpt-5-mini, anthropic/claude-sonnet-4-5
    TEXT_MODEL: str = "gemini/gemini-2.5-flash"
    GEMINI_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""

    # Local backend (self-hosted Ollama server)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "deepseek-coder-v2:16b"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
