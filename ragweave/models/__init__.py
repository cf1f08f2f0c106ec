"""RAGWeave domain models."""

from .base import FrozenModel, RagWeaveBaseModel
from .chat import (
    AskRequest,
    AskResponse,
    ConversationMessage,
    GenerationResult,
    ModelList,
    QueryOptions,
    Role,
)
from .rag import (
    Chunk,
    CollectionRecord,
    CreateCollectionRequest,
    Document,
    FileIngestionResult,
    IndexFilesRequest,
    IngestionReport,
    RetrievedMatch,
    UploadItem,
)

__all__ = [
    # Base models
    "RagWeaveBaseModel",
    "FrozenModel",

    # Conversation models
    "Role",
    "ConversationMessage",
    "QueryOptions",
    "GenerationResult",
    "AskRequest",
    "AskResponse",
    "ModelList",

    # Ingestion and retrieval models
    "Document",
    "Chunk",
    "CollectionRecord",
    "CreateCollectionRequest",
    "RetrievedMatch",
    "UploadItem",
    "IndexFilesRequest",
    "FileIngestionResult",
    "IngestionReport",
]
