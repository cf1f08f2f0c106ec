"""
Embedding generation for RAG functionality.

This package provides a small embedding system with interchangeable HTTP backends:

- **Ollama Provider**: posts ``{model, prompt}`` to a local Ollama server
- **OpenAI Provider**: posts ``{model, input}`` to an OpenAI-compatible API

Architecture:
- EmbeddingProvider: Abstract base class; ``embed_documents`` is an ordered,
  concurrent map of ``embed_query``
- create_embedding_provider: Factory keyed on a provider identifier

Vector dimensionality is defined by the backend model and treated as opaque.
"""

from .base import EmbeddingProvider
from .factory import EMBEDDING_PROVIDERS, create_embedding_provider
from .ollama import OllamaEmbeddingProvider
from .openai import OpenAIEmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "OllamaEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "EMBEDDING_PROVIDERS",
    "create_embedding_provider",
]
