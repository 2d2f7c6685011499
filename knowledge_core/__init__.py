"""
Knowledge core: fragment similarity search and knowledge-unit consolidation.

Stores embedded fragments and knowledge units, ranks them by cosine distance,
and clusters fragments into knowledge units while keeping soft-deleted
records invisible on every read path.
"""

__version__ = "0.1.0"
