"""OpenAI embedding provider implementation."""

from typing import Any, Dict, List, Optional

import aiohttp

from ...config.settings import Settings
from ...core.exceptions import ConfigurationError
from .base import EmbeddingProvider


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeddings from an OpenAI-compatible API (``POST /v1/embeddings``)."""

    def __init__(
        self,
        settings: Settings,
        model: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(settings, model, session)
        if not (settings.OPENAI_API_KEY or "").strip():
            raise ConfigurationError("No OPENAI_API_KEY defined", "OPENAI_API_KEY")
        self._api_key = settings.OPENAI_API_KEY.strip()

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def base_url(self) -> str:
        return self.settings.OPENAI_BASE_URL.rstrip("/")

    async def embed_query(self, text: str) -> List[float]:
        """Generate the embedding of a single text."""
        data = await self._request_json(
            "POST",
            f"{self.base_url}/v1/embeddings",
            payload={"model": self.model, "input": text},
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError):
            vector = None
        return self._validate_vector(vector)

    def get_model_info(self) -> Dict[str, Any]:
        """Get OpenAI provider model information."""
        info = super().get_model_info()
        info["api_base"] = self.base_url
        return info
