"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    data_dir: Path = Path("data")
    db_path: Path = Path("data/fusionsearch.db")

    # Embedding provider (OpenAI-compatible). Empty key = deterministic embeddings only
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536
    embedding_timeout_seconds: float = 30.0
    embedding_max_input_tokens: int = 8191
    embedding_rate_limit_rpm: int = 500
    embedding_max_attempts: int = 2
    embedding_retry_backoff_seconds: float = 1.0

    # Embedding cache
    embedding_cache_size: int = 1000
    embedding_cache_ttl_seconds: float = 24 * 60 * 60

    # Search
    enable_vector_search: bool = True
    search_default_limit: int = 10
    search_candidate_limit: int = 100
    search_sample_fallback: bool = False
    rrf_k: int = 60

    # Indexing
    index_batch_size: int = 10
    index_batch_delay_seconds: float = 0.1

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def provider_configured(self) -> bool:
        """Whether a remote embedding provider credential is set."""
        return bool(self.openai_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
