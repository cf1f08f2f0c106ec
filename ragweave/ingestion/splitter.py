"""Recursive, overlapping text chunking."""

from typing import Any, Dict, List, Optional, Sequence

from langchain_text_splitters import RecursiveCharacterTextSplitter

from ..config.logging import LoggerMixin
from ..core.exceptions import ValidationError
from ..models.rag import Chunk, Document

# Paragraph, line, sentence-ish punctuation, word, then a hard character cut
DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", "; ", " ", ""]


class ChunkSplitter(LoggerMixin):
    """Splits texts into chunks of at most ``chunk_size`` characters.

    Consecutive chunks of one text overlap by up to ``chunk_overlap``
    characters. Each chunk records the ``[locFrom, locTo)`` character range
    it occupies in its source text.
    """

    def __init__(
        self,
        chunk_size: int,
        chunk_overlap: int,
        separators: Optional[List[str]] = None,
    ):
        if chunk_size < 1:
            raise ValidationError("chunkSize must be at least 1", "chunkSize")
        if chunk_overlap < 0:
            raise ValidationError("chunkOverlap cannot be negative", "chunkOverlap")
        if chunk_overlap >= chunk_size:
            raise ValidationError("chunkOverlap must be smaller than chunkSize", "chunkOverlap")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=separators or DEFAULT_SEPARATORS,
            keep_separator="end",
            length_function=len,
            strip_whitespace=True,
        )

    def split(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Optional[Dict[str, Any]]]] = None,
    ) -> List[Chunk]:
        """Split ``texts`` in order; ``metadatas`` runs parallel to ``texts``."""
        if metadatas is not None and len(metadatas) != len(texts):
            raise ValidationError(
                f"Got {len(texts)} texts but {len(metadatas)} metadatas", "metadatas"
            )

        chunks: List[Chunk] = []
        for index, text in enumerate(texts):
            metadata = (metadatas[index] if metadatas is not None else None) or {}
            chunks.extend(self._split_text(text, metadata))

        self.logger.debug(
            "Texts split",
            texts=len(texts),
            chunks=len(chunks),
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )
        return chunks

    def split_documents(self, documents: Sequence[Document]) -> List[Chunk]:
        """Split documents, carrying their metadata onto every chunk."""
        return self.split(
            [document.page_content for document in documents],
            [document.metadata for document in documents],
        )

    def _split_text(self, text: str, metadata: Dict[str, Any]) -> List[Chunk]:
        chunks = []
        previous_start = 0
        previous_length = 0

        for piece in self._splitter.split_text(text):
            # Next chunk starts no earlier than the previous one minus the overlap
            search_from = max(previous_start, previous_start + previous_length - self.chunk_overlap)
            start = text.find(piece, search_from)
            if start < 0:
                start = text.find(piece, previous_start)

            chunk_metadata = dict(metadata)
            if start >= 0:
                chunk_metadata["locFrom"] = start
                chunk_metadata["locTo"] = start + len(piece)
                previous_start = start
                previous_length = len(piece)

            chunks.append(Chunk(page_content=piece, metadata=chunk_metadata))

        return chunks
