"""
Answer generation for RAG functionality.

- GenerationClient: Abstract chat-completion client (``provider`` / ``model``)
- OllamaGenerationClient / OpenAIGenerationClient: Concrete backends
- create_generation_client_for: Factory keyed on a ``provider:model`` identifier
- ContextAssembler: Turns retrieved passages and history into the prompt
"""

from .base import GenerationClient
from .context import ContextAssembler, estimate_tokens
from .factory import (
    GENERATION_CLIENTS,
    create_generation_client,
    create_generation_client_for,
    parse_model_identifier,
)
from .ollama import OllamaGenerationClient
from .openai import OpenAIGenerationClient

__all__ = [
    "GenerationClient",
    "OllamaGenerationClient",
    "OpenAIGenerationClient",
    "GENERATION_CLIENTS",
    "create_generation_client",
    "create_generation_client_for",
    "parse_model_identifier",
    "ContextAssembler",
    "estimate_tokens",
]
