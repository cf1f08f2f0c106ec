"""Embedding provider selection."""

from typing import Dict, Optional, Type

import aiohttp

from ...config.settings import Settings
from ...core.exceptions import UnsupportedProviderError
from .base import EmbeddingProvider
from .ollama import OllamaEmbeddingProvider
from .openai import OpenAIEmbeddingProvider

EMBEDDING_PROVIDERS: Dict[str, Type[EmbeddingProvider]] = {
    "ollama": OllamaEmbeddingProvider,
    "openai": OpenAIEmbeddingProvider,
}


def create_embedding_provider(
    settings: Settings,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> EmbeddingProvider:
    """Create the embedding provider named by ``provider`` or the settings."""
    name = (provider or settings.EMBEDDING_PROVIDER).strip().lower()

    provider_class = EMBEDDING_PROVIDERS.get(name)
    if provider_class is None:
        raise UnsupportedProviderError(name)

    return provider_class(settings, model=model, session=session)
