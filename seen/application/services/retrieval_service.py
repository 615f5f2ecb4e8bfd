"""Retrieval service — answers a natural-language query with ranked links.

Flow: embed query → over-fetch nearest chunks → keep the best chunk per link →
hydrate links from the relational store → rank and truncate.
"""

import logging

from seen.application.interfaces import DocumentOracle, LinkRepository, VectorIndex
from seen.domain.entities import SearchHit, VectorMatch
from seen.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("RetrievalService")

_DEFAULT_OVERFETCH_FACTOR = 4


class RetrievalService:
    """Application service for semantic search over archived links."""

    def __init__(
        self,
        link_repository: LinkRepository,
        oracle: DocumentOracle,
        vector_index: VectorIndex,
        *,
        overfetch_factor: int = _DEFAULT_OVERFETCH_FACTOR,
        min_score: float | None = None,
    ):
        self._links = link_repository
        self._oracle = oracle
        self._vectors = vector_index
        self._overfetch_factor = max(1, overfetch_factor)
        self._min_score = min_score

    async def search(
        self,
        query_text: str,
        caller: str | None = None,
        top_k: int = 5,
    ) -> list[SearchHit]:
        """Return up to ``top_k`` links ranked by their best-matching chunk.

        ``top_k <= 0`` or a blank query short-circuits without calling the oracle.

        Raises:
            OracleError: if the query cannot be embedded.
            VectorIndexError / MetadataStoreError: if a store is unavailable.
        """
        if top_k <= 0 or not query_text.strip():
            return []

        plog.step_start(PipelineStage.SEARCH, f"Searching {query_text!r}", top_k=top_k, caller=caller)
        query_vector = await self._oracle.embed_query(query_text)

        matches = await self._vectors.query(query_vector, top_k * self._overfetch_factor)
        if not matches:
            plog.step_complete(PipelineStage.SEARCH, "No matches")
            return []

        best = collapse_by_link(matches)
        links = await self._links.get_many(list(best))

        hits: list[SearchHit] = []
        for link_id, match in best.items():
            link = links.get(link_id)
            if link is None:
                # Orphaned vector from an aborted ingestion
                logger.debug("Dropping match %s: link %s is not committed", match.id, link_id)
                continue
            if self._min_score is not None and match.score < self._min_score:
                continue
            hits.append(SearchHit(link=link, score=match.score, excerpt=match.excerpt))

        hits = rank_hits(hits)[:top_k]
        plog.step_complete(
            PipelineStage.SEARCH, f"Returned {len(hits)} links",
            chunk_matches=len(matches), distinct_links=len(best),
        )
        return hits


def collapse_by_link(matches: list[VectorMatch]) -> dict[str, VectorMatch]:
    """Keep only the highest-scoring match for each link id."""
    best: dict[str, VectorMatch] = {}
    for match in matches:
        current = best.get(match.link_id)
        if current is None or match.score > current.score:
            best[match.link_id] = match
    return best


def rank_hits(hits: list[SearchHit]) -> list[SearchHit]:
    """Score descending; ties go to the more recently created link."""
    by_recency = sorted(hits, key=lambda h: h.link.created_at, reverse=True)
    return sorted(by_recency, key=lambda h: h.score, reverse=True)
