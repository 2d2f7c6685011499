"""
Clustering configuration settings.

Tunes the automatic consolidation pass that groups similar fragments
into knowledge units.

Dependencies: pydantic, pydantic_settings
System role: Consolidation thresholds and batch sizing
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_core.configs.base import BaseSettings


class ClusteringSettings(BaseSettings):
    """Consolidation pass configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLUSTERING_",
        case_sensitive=False,
        extra="ignore",
    )

    min_similarity: float = Field(
        default=0.85,
        ge=-1.0,
        le=1.0,
        description="Minimum similarity (1 - cosine distance) for a fragment to join a cluster",
    )
    candidate_limit: int = Field(
        default=100,
        ge=1,
        description="Maximum similar fragments considered per seed fragment",
    )
    max_batch: int = Field(
        default=50,
        ge=1,
        description="Maximum seed fragments processed by one consolidation run",
    )
