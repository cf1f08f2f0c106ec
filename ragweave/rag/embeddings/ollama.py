"""Ollama embedding provider implementation."""

from typing import Any, Dict, List

from .base import EmbeddingProvider


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Embeddings from a local Ollama server (``POST /api/embeddings``)."""

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def base_url(self) -> str:
        return self.settings.OLLAMA_BASE_URL.rstrip("/")

    async def embed_query(self, text: str) -> List[float]:
        """Generate the embedding of a single text."""
        data = await self._request_json(
            "POST",
            f"{self.base_url}/api/embeddings",
            payload={"model": self.model, "prompt": text},
        )
        return self._validate_vector(data.get("embedding") if isinstance(data, dict) else None)

    def get_model_info(self) -> Dict[str, Any]:
        """Get Ollama provider model information."""
        info = super().get_model_info()
        info["api_base"] = self.base_url
        return info
