"""Configuration for vecstore.

This module defines the pydantic models describing where a database lives on
disk, how documents are written, and which embedding provider turns text into
vectors.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmbeddingProviderType(str, Enum):
    """Supported embedding providers."""

    SENTENCE_TRANSFORMERS = "sentence-transformers"
    OLLAMA = "ollama"


class EmbeddingConfig(BaseModel):
    """Configuration for the embedding provider.

    Attributes:
        provider: Which provider implementation to use
        model_name: Model identifier understood by the provider
        api_base: Base URL for HTTP providers (Ollama)
        timeout: Request timeout in seconds for HTTP providers
    """

    provider: EmbeddingProviderType = Field(
        default=EmbeddingProviderType.SENTENCE_TRANSFORMERS,
        description="Embedding provider (sentence-transformers or ollama)",
    )
    model_name: str = Field(
        default="all-MiniLM-L6-v2",
        min_length=1,
        description="Name of the embedding model",
    )
    api_base: str = Field(
        default="http://localhost:11434",
        description="Base URL for HTTP embedding providers",
    )
    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Request timeout in seconds",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("api_base")
    @classmethod
    def validate_api_base(cls, v: str) -> str:
        """Ensure api_base is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base must start with http:// or https://")
        return v.rstrip("/")


class DBConfig(BaseModel):
    """Configuration for a vecstore database.

    Attributes:
        persist_directory: Root directory for persisted collections; ``None``
            keeps everything in memory
        compress: Write documents as gzip-compressed JSON
        concurrency: Default number of documents embedded in parallel
        embedding: Embedding provider settings
    """

    persist_directory: Path | None = Field(
        default=None,
        description="Directory for persisted collections (None = in-memory only)",
    )
    compress: bool = Field(
        default=False,
        description="Gzip-compress persisted documents",
    )
    concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Default ingestion concurrency",
    )
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_env(cls, **overrides: Any) -> "DBConfig":
        """Create configuration from environment variables with explicit overrides.

        Environment variables:
        - VECSTORE_PERSIST_DIR: Root directory for persisted collections
        - VECSTORE_COMPRESS: "1"/"true" to gzip persisted documents
        - VECSTORE_CONCURRENCY: Default ingestion concurrency
        - VECSTORE_EMBEDDING_PROVIDER: sentence-transformers or ollama
        - VECSTORE_EMBEDDING_MODEL: Embedding model name
        - OLLAMA_API_BASE: Base URL of the Ollama server

        Args:
            **overrides: Values that take precedence over the environment
                (``None`` values are ignored)

        Returns:
            Configured DBConfig instance
        """
        env_config: dict[str, Any] = {}

        persist_dir = os.getenv("VECSTORE_PERSIST_DIR")
        if persist_dir:
            env_config["persist_directory"] = Path(persist_dir)

        compress = os.getenv("VECSTORE_COMPRESS")
        if compress:
            env_config["compress"] = compress.strip().lower() in {"1", "true", "yes"}

        concurrency = os.getenv("VECSTORE_CONCURRENCY")
        if concurrency:
            env_config["concurrency"] = int(concurrency)

        embedding: dict[str, Any] = {}
        provider = os.getenv("VECSTORE_EMBEDDING_PROVIDER")
        if provider:
            embedding["provider"] = provider
        model_name = os.getenv("VECSTORE_EMBEDDING_MODEL")
        if model_name:
            embedding["model_name"] = model_name
        api_base = os.getenv("OLLAMA_API_BASE")
        if api_base:
            embedding["api_base"] = api_base

        embedding_overrides = overrides.pop("embedding", None) or {}
        if isinstance(embedding_overrides, EmbeddingConfig):
            embedding_overrides = embedding_overrides.model_dump()
        embedding.update({k: v for k, v in embedding_overrides.items() if v is not None})
        if embedding:
            env_config["embedding"] = EmbeddingConfig(**embedding)

        final_config = {
            **env_config,
            **{k: v for k, v in overrides.items() if v is not None},
        }

        return cls(**final_config)
