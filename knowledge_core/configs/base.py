"""
Shared settings base for knowledge_core.

Every settings group reads the same .env file and ignores unrelated
variables. Only the log level lives at the top level; database, embedding
and clustering options sit in their own prefixed groups.

Dependencies: pydantic_settings
System role: Common parent of all knowledge_core settings classes
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings base reading .env with case-insensitive names."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Level for knowledge_core loggers when configure_logging gets none",
    )
