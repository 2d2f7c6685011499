"""
Embedding configuration settings.

Fixes the embedding dimensionality per record kind. Every inbound vector is
checked against these values; nothing is resized or padded.

Dependencies: pydantic, pydantic_settings
System role: Vector shape configuration for the record store
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_core.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Per-kind embedding dimensions."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    fragment_dimensions: int = Field(
        default=2000,
        ge=1,
        description="Dimension of fragment embeddings",
    )
    knowledge_unit_dimensions: int = Field(
        default=2000,
        ge=1,
        description="Dimension of knowledge unit embeddings",
    )
