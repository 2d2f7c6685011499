"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the library
"""

from functools import lru_cache

from pydantic import Field

from knowledge_core.configs.base import BaseSettings
from knowledge_core.configs.clustering import ClusteringSettings
from knowledge_core.configs.database import DatabaseSettings
from knowledge_core.configs.embedding import EmbeddingSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    clustering: ClusteringSettings = Field(default_factory=ClusteringSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for the process lifetime.
    Environment variables loaded once at first call.

    Returns:
        Settings: Application settings instance

    Usage:
        from knowledge_core.configs import get_settings
        settings = get_settings()
    """
    return Settings()
