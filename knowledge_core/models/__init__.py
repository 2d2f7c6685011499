"""
Input and transfer schemas.

Exports:
  - KnowledgeUnitAttributes: Fields for a new knowledge unit
  - SimilarityQuery: Ranking options
  - ClusterProposal: Synthesizer output for the consolidation pass
  - parse_schema(): Validate into a schema, raising ValidationError

Dependencies: pydantic
"""

from knowledge_core.models.common import parse_schema
from knowledge_core.models.knowledge_unit import KnowledgeUnitAttributes
from knowledge_core.models.similarity import SimilarityQuery
from knowledge_core.models.clustering import ClusterProposal

__all__ = [
    "parse_schema",
    "KnowledgeUnitAttributes",
    "SimilarityQuery",
    "ClusterProposal",
]
