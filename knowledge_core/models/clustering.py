"""
Clustering schemas.

Dependencies: pydantic
System role: Proposal returned by a cluster synthesizer
"""

import uuid

from pydantic import BaseModel, Field

from knowledge_core.models.knowledge_unit import KnowledgeUnitAttributes


class ClusterProposal(BaseModel):
    """A knowledge unit proposed for a seed fragment and its candidates."""

    attributes: KnowledgeUnitAttributes
    included_fragment_ids: list[uuid.UUID] = Field(
        default_factory=list,
        description="Fragments the unit consolidates; ids outside the offered set are ignored",
    )
