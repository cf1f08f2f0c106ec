"""
Retrieval for RAG functionality.

- embeddings: Embedding providers and their factory
- ChromaVectorStore: Collection CRUD, upsert and query over the Chroma REST API
- RetrievalOrchestrator: Per-collection fan-out, ordered merge, optional re-rank
- AskPipeline: The full question answering path
"""

from .pipeline import AskPipeline, build_sources
from .retrieval import RetrievalOrchestrator, cosine_similarities
from .vector_store import ChromaVectorStore

__all__ = [
    "AskPipeline",
    "build_sources",
    "ChromaVectorStore",
    "RetrievalOrchestrator",
    "cosine_similarities",
]
