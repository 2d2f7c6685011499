"""
Consolidation service.

Drives the automatic consolidation pass: take the newest fragment the pass
has not seen, rank its unclustered neighbours, ask a synthesizer to propose a
knowledge unit, then create the cluster through ClusteringService.

The synthesizer (typically an LLM writing the unit text) is supplied by the
caller through the ClusterSynthesizer protocol.

Dependencies: knowledge_core.core.similarity_ranker, knowledge_core.configs
System role: Background consolidation of similar fragments
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.application.services.clustering_service import (
    ClusterCreationResult,
    ClusteringService,
)
from knowledge_core.boundary.db.CRUD.fragment_crud import FragmentCRUD, fragment_crud
from knowledge_core.boundary.db.models.fragment_model import FragmentModel
from knowledge_core.configs import get_settings
from knowledge_core.configs.clustering import ClusteringSettings
from knowledge_core.core.exceptions import ValidationError
from knowledge_core.core.similarity_ranker import RankedRecord, SimilarityRanker
from knowledge_core.models.clustering import ClusterProposal

logger = logging.getLogger(__name__)


class ClusterSynthesizer(Protocol):
    """Proposes a knowledge unit for a seed fragment and its similar candidates."""

    async def synthesize(
        self,
        seed: FragmentModel,
        candidates: Sequence[RankedRecord],
    ) -> ClusterProposal | None:
        ...


class ConsolidationOutcome(str, enum.Enum):
    """
    Result of one consolidation step.

    NO_MATCHES: No unclustered fragment was similar enough to the seed
    REJECTED: The synthesizer declined to form a unit
    SINGLETON: The proposal covered a single fragment, nothing created
    CLUSTERED: A knowledge unit was created
    """

    NO_MATCHES = "no_matches"
    REJECTED = "rejected"
    SINGLETON = "singleton"
    CLUSTERED = "clustered"


@dataclass
class ConsolidationStep:
    """What happened to one seed fragment."""

    seed_id: UUID
    outcome: ConsolidationOutcome
    candidate_ids: list[UUID] = field(default_factory=list)
    creation: ClusterCreationResult | None = None

    @property
    def knowledge_unit_id(self) -> UUID | None:
        return self.creation.knowledge_unit.id if self.creation else None


class ConsolidationService:
    """Consolidation pass orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        synthesizer: ClusterSynthesizer,
        settings: ClusteringSettings | None = None,
        fragments: FragmentCRUD | None = None,
        clustering: ClusteringService | None = None,
    ) -> None:
        """
        Initialize consolidation service with async database session.

        Args:
            db: Async SQLAlchemy session
            synthesizer: Proposes units from a seed and its candidates
            settings: Thresholds and batch size (defaults to configured values)
            fragments: Fragment CRUD (defaults to the singleton)
            clustering: Clustering service (defaults to one on the same session)
        """
        self.db = db
        self.synthesizer = synthesizer
        self.settings = settings or get_settings().clustering
        self.fragments = fragments or fragment_crud
        self.ranker = SimilarityRanker(self.fragments)
        self.clustering = clustering or ClusteringService(db, fragments=self.fragments)

    async def _finish_seed(
        self,
        seed: FragmentModel,
        outcome: ConsolidationOutcome,
        candidate_ids: list[UUID],
    ) -> ConsolidationStep:
        await self.fragments.mark_clustering_processed(self.db, seed.id)
        logger.info(
            "Consolidation step finished",
            extra={
                "seed_id": str(seed.id),
                "outcome": outcome.value,
                "candidates": len(candidate_ids),
            },
        )
        return ConsolidationStep(seed.id, outcome, candidate_ids)

    async def consolidate_next(self) -> ConsolidationStep | None:
        """
        Run one consolidation step on the newest pending fragment.

        Returns:
            ConsolidationStep, or None when no fragment is pending

        Raises:
            ValidationError: If the synthesizer proposes invalid unit attributes
            StorageError: If the store fails
        """
        seed = await self.fragments.get_next_unprocessed(self.db)
        if seed is None:
            return None

        try:
            candidates = await self.ranker.find_similar(
                self.db,
                seed.embedding,
                self.settings.candidate_limit,
                FragmentModel.clustering_processed_at.is_(None),
                min_similarity=self.settings.min_similarity,
                exclude_clustered=True,
                exclude_ids=[seed.id],
            )
        except ValidationError as e:
            logger.warning(
                "Seed embedding cannot be ranked",
                extra={"seed_id": str(seed.id), "error": str(e)},
            )
            return await self._finish_seed(seed, ConsolidationOutcome.NO_MATCHES, [])
        candidate_ids = [c.record.id for c in candidates]
        if not candidates:
            return await self._finish_seed(seed, ConsolidationOutcome.NO_MATCHES, candidate_ids)

        proposal = await self.synthesizer.synthesize(seed, candidates)
        offered = {seed.id, *candidate_ids}
        included = []
        if proposal is not None:
            included = [
                fid for fid in dict.fromkeys(proposal.included_fragment_ids) if fid in offered
            ]
        if not included:
            return await self._finish_seed(seed, ConsolidationOutcome.REJECTED, candidate_ids)
        if len(included) == 1:
            return await self._finish_seed(seed, ConsolidationOutcome.SINGLETON, candidate_ids)

        creation = await self.clustering.create_cluster_from_fragments(
            included, proposal.attributes
        )
        if seed.id not in included:
            await self.fragments.mark_clustering_processed(self.db, seed.id)
        logger.info(
            "Consolidation step finished",
            extra={
                "seed_id": str(seed.id),
                "outcome": ConsolidationOutcome.CLUSTERED.value,
                "knowledge_unit_id": str(creation.knowledge_unit.id),
                "assigned": len(creation.assigned_ids),
            },
        )
        return ConsolidationStep(
            seed.id, ConsolidationOutcome.CLUSTERED, candidate_ids, creation
        )

    async def consolidate_pending(self, max_steps: int | None = None) -> list[ConsolidationStep]:
        """
        Repeat consolidation steps until nothing is pending.

        Args:
            max_steps: Step cap; defaults to the configured max_batch

        Returns:
            list[ConsolidationStep]: Steps in the order they ran
        """
        limit = max_steps if max_steps is not None else self.settings.max_batch
        steps: list[ConsolidationStep] = []
        while len(steps) < limit:
            step = await self.consolidate_next()
            if step is None:
                break
            steps.append(step)
        logger.info(
            "Consolidation pass finished",
            extra={
                "steps": len(steps),
                "clusters": sum(1 for s in steps if s.outcome is ConsolidationOutcome.CLUSTERED),
            },
        )
        return steps
