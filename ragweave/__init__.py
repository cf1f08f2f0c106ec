"""
RAGWeave - retrieval-augmented generation over heterogeneous documents.

This package provides:
- Document normalization (images, PDFs, presentations, spreadsheets, text)
- Deterministic, overlapping text chunking with provenance metadata
- Pluggable embedding and generation backends (Ollama, OpenAI)
- Multi-collection retrieval against a Chroma vector store
- Prompt assembly from retrieved passages and conversation history
"""

__version__ = "0.1.0"
__author__ = "RAGWeave Team"

from .config.settings import Settings
from .core.server import RagWeaveServer

__all__ = ["RagWeaveServer", "Settings"]
