"""Generation client selection."""

from typing import Dict, Optional, Tuple, Type

import aiohttp

from ..config.settings import Settings
from ..core.exceptions import UnsupportedProviderError, ValidationError
from .base import GenerationClient
from .ollama import OllamaGenerationClient
from .openai import OpenAIGenerationClient

GENERATION_CLIENTS: Dict[str, Type[GenerationClient]] = {
    "ollama": OllamaGenerationClient,
    "openai": OpenAIGenerationClient,
}


def parse_model_identifier(identifier: str, default_provider: str = "ollama") -> Tuple[str, str]:
    """Split ``provider:model`` into its parts.

    The provider is lower-cased; the model is everything after the first
    colon, so ``ollama:llama3:8b`` names model ``llama3:8b``. An identifier
    without a colon uses ``default_provider``.
    """
    identifier = identifier.strip()
    if not identifier:
        raise ValidationError("Model identifier cannot be empty", "model")

    if ":" not in identifier:
        return default_provider.strip().lower(), identifier

    provider, model = identifier.split(":", 1)
    provider = provider.strip().lower()
    model = model.strip()

    if not provider or not model:
        raise ValidationError(f"Invalid model identifier '{identifier}'", "model")

    return provider, model


def create_generation_client(
    settings: Settings,
    provider: str,
    model: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> GenerationClient:
    """Create the generation client registered under ``provider``."""
    client_class = GENERATION_CLIENTS.get(provider.strip().lower())
    if client_class is None:
        raise UnsupportedProviderError(provider)

    return client_class(settings, model=model, session=session)


def create_generation_client_for(
    settings: Settings,
    identifier: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> GenerationClient:
    """Create a client from a ``provider:model`` identifier (defaults from settings)."""
    provider, model = parse_model_identifier(
        identifier or settings.DEFAULT_CHAT_MODEL, settings.DEFAULT_PROVIDER
    )
    return create_generation_client(settings, provider, model, session)
