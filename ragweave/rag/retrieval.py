"""Multi-collection retrieval for RAG."""

import asyncio
from typing import List, Sequence

import numpy as np

from ..config.logging import LoggerMixin
from ..core.exceptions import UpstreamQueryError, ValidationError
from ..models.rag import RetrievedMatch
from .embeddings.base import EmbeddingProvider
from .vector_store import ChromaVectorStore


class RetrievalOrchestrator(LoggerMixin):
    """Fans a query vector out across collections and merges the results."""

    def __init__(self, vector_store: ChromaVectorStore, embedding_provider: EmbeddingProvider):
        self.vector_store = vector_store
        self.embedding_provider = embedding_provider

    async def retrieve(
        self,
        query_vector: List[float],
        collections: Sequence[str],
        k: int,
    ) -> List[RetrievedMatch]:
        """Query every collection for up to ``k`` matches and concatenate.

        Collections are queried concurrently. The result keeps the order of
        ``collections`` and, within a collection, the store's ranking. Scores
        from different collections are not comparable, so nothing is
        re-ranked across collections. Any failing collection fails the call.
        """
        if not collections:
            raise ValidationError("At least one collection is required", "collections")
        if k < 1:
            raise ValidationError("k must be at least 1", "k")

        # gather returns results by slot, not by completion order
        per_collection = await asyncio.gather(
            *(self._query_collection(name, query_vector, k) for name in collections)
        )

        matches = [match for results in per_collection for match in results]

        self.logger.info(
            "Retrieved matches",
            collections=list(collections),
            per_collection=[len(results) for results in per_collection],
            total=len(matches),
        )
        return matches

    async def _query_collection(
        self, collection: str, query_vector: List[float], k: int
    ) -> List[RetrievedMatch]:
        self.logger.debug("Querying collection", collection=collection, k=k)
        try:
            return await self.vector_store.query(collection, query_vector, k)
        except UpstreamQueryError:
            raise
        except Exception as e:
            raise UpstreamQueryError(collection, str(e))

    async def rerank(
        self,
        query: str,
        matches: Sequence[RetrievedMatch],
        k: int,
    ) -> List[RetrievedMatch]:
        """Select the top ``k`` matches by cosine similarity to ``query``.

        Match texts and the query are re-embedded with the same provider so
        every candidate is scored in one space. The returned matches carry the
        similarity as ``score``; ties keep their merge order.
        """
        if k < 1:
            raise ValidationError("k must be at least 1", "k")
        if not matches:
            return []

        query_vector = await self.embedding_provider.embed_query(query)
        match_vectors = await self.embedding_provider.embed_documents(
            [match.page_content for match in matches]
        )

        similarities = cosine_similarities(query_vector, match_vectors)

        # Stable sort on negated similarity keeps merge order for ties
        order = np.argsort(-similarities, kind="stable")[:k]
        reranked = [
            matches[index].model_copy(update={"score": float(similarities[index])})
            for index in order
        ]

        self.logger.info(
            "Matches re-ranked",
            candidates=len(matches),
            selected=len(reranked),
            ids=[match.id for match in reranked],
        )
        return reranked


def cosine_similarities(query_vector: List[float], vectors: List[List[float]]) -> np.ndarray:
    """Cosine similarity of ``query_vector`` against each row of ``vectors``."""
    query = np.asarray(query_vector, dtype=float)
    matrix = np.asarray(vectors, dtype=float)

    if matrix.ndim != 2 or matrix.shape[1] != query.shape[0]:
        raise ValidationError("Embedding dimensions do not match", "embeddings")

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query

    similarities = np.zeros(len(matrix), dtype=float)
    nonzero = norms > 0
    similarities[nonzero] = dots[nonzero] / norms[nonzero]
    return similarities
