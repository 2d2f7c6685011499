"""
Observability module.

Provides logging configuration shared by the store and the services.
"""

from knowledge_core.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
