"""Ingestion and retrieval domain models for RAGWeave."""

import base64
import binascii
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import FrozenModel, RagWeaveBaseModel


class Document(FrozenModel):
    """Normalized text unit produced from one input blob."""

    page_content: str = Field(alias="pageContent", description="Plain text content")
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provenance metadata; always contains 'source'",
    )


class Chunk(FrozenModel):
    """Bounded-size fragment of a Document, the unit of embedding and storage."""

    page_content: str = Field(alias="pageContent", description="Chunk text")
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Source metadata plus 'locFrom'/'locTo' character offsets",
    )

    @property
    def loc_from(self) -> Optional[int]:
        return self.metadata.get("locFrom")

    @property
    def loc_to(self) -> Optional[int]:
        return self.metadata.get("locTo")


class CollectionRecord(RagWeaveBaseModel):
    """A named, independently queryable partition of the vector store."""

    id: str = Field(description="Collection identifier")
    name: str = Field(description="Collection name")


class CreateCollectionRequest(RagWeaveBaseModel):
    """Request body for creating a collection."""

    collection_name: str = Field(alias="collectionName", min_length=1)


class RetrievedMatch(RagWeaveBaseModel):
    """A single match returned by a collection query."""

    id: str = Field(description="Stored chunk identifier")
    page_content: str = Field(alias="pageContent", description="Stored chunk text")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Stored chunk metadata")
    score: Optional[float] = Field(
        default=None,
        description="Distance from the vector store, or similarity after re-ranking",
    )
    collection: Optional[str] = Field(default=None, description="Collection the match came from")


class UploadItem(RagWeaveBaseModel):
    """A base64 encoded file submitted for ingestion."""

    data: str = Field(description="Base64 encoded file content")
    name: str = Field(min_length=1, description="File name, used as the 'source'")

    @field_validator("data")
    @classmethod
    def validate_base64(cls, value: str) -> str:
        value = value.strip()
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"data is not valid base64: {e}")
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name cannot be blank")
        return value

    def decode(self) -> bytes:
        """Get the raw file bytes."""
        return base64.b64decode(self.data)


class IndexFilesRequest(RagWeaveBaseModel):
    """Request body for indexing a batch of uploads into a collection."""

    chunk_overlap: int = Field(alias="chunkOverlap", ge=0)
    chunk_size: int = Field(alias="chunkSize", ge=1)
    collection_name: str = Field(alias="collectionName", min_length=1)
    uploads: List[UploadItem] = Field(min_length=1)
    language: Optional[str] = Field(default=None, description="OCR language hint for images")


class FileIngestionResult(RagWeaveBaseModel):
    """Outcome of ingesting one input unit."""

    name: str = Field(description="Source name")
    documents: int = Field(default=0, ge=0, description="Documents produced by normalization")
    chunks: int = Field(default=0, ge=0, description="Chunks upserted")
    error: Optional[str] = Field(default=None, description="Decode failure, if any")

    @property
    def succeeded(self) -> bool:
        return self.error is None


class IngestionReport(RagWeaveBaseModel):
    """Per-file results of an ingestion batch, in input order."""

    collection: str = Field(description="Target collection name")
    files: List[FileIngestionResult] = Field(default_factory=list)

    @property
    def failed(self) -> List[FileIngestionResult]:
        return [f for f in self.files if not f.succeeded]

    @property
    def total_chunks(self) -> int:
        return sum(f.chunks for f in self.files)
