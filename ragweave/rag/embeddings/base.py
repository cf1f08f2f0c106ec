"""Abstract base class for embedding providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp

from ...config.settings import Settings
from ...core.exceptions import EmbeddingBackendError
from ...core.http import HttpBackend
from ...utils.async_utils import map_with_concurrency


class EmbeddingProvider(HttpBackend, ABC):
    """Abstract base class for embedding providers.

    Subclasses implement ``embed_query``; ``embed_documents`` is defined as the
    ordered per-element map of it, dispatched concurrently.
    """

    error_class = EmbeddingBackendError

    def __init__(
        self,
        settings: Settings,
        model: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(settings, session)
        self.model = model or settings.EMBEDDING_MODEL

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the name of this provider."""

    @abstractmethod
    async def embed_query(self, text: str) -> List[float]:
        """Generate the embedding of a single text."""

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Generate embeddings for multiple texts, same length and order as input.

        One failing element fails the whole call.
        """
        if not texts:
            return []

        embeddings = await map_with_concurrency(
            self.embed_query, texts, self.settings.EMBEDDING_CONCURRENCY
        )

        self.logger.debug(
            "Texts embedded",
            provider=self.provider_name,
            count=len(texts),
            embedding_dim=len(embeddings[0]) if embeddings else 0,
        )
        return embeddings

    def _validate_vector(self, vector: Any) -> List[float]:
        if not isinstance(vector, list) or not vector:
            raise EmbeddingBackendError(
                f"{self.provider_name} returned no embedding vector"
            )
        try:
            return [float(value) for value in vector]
        except (TypeError, ValueError) as e:
            raise EmbeddingBackendError(f"{self.provider_name} returned a malformed vector: {e}")

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the embedding model."""
        return {
            "model_name": self.model,
            "provider": self.provider_name,
        }
