"""Batch ingestion: normalize, split, embed and upsert."""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import DecodeError
from ..models.rag import Document, FileIngestionResult, IndexFilesRequest, IngestionReport
from ..rag.embeddings.base import EmbeddingProvider
from ..rag.vector_store import ChromaVectorStore
from ..utils.async_utils import gather_with_concurrency
from .normalizer import DocumentNormalizer
from .splitter import ChunkSplitter


class IngestionPipeline(LoggerMixin):
    """Indexes a batch of input units into one collection.

    Decode failures are isolated per input unit and reported; embedding and
    upsert failures abort the batch.
    """

    def __init__(
        self,
        settings: Settings,
        embedding_provider: EmbeddingProvider,
        vector_store: ChromaVectorStore,
        normalizer: Optional[DocumentNormalizer] = None,
    ):
        self.settings = settings
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.normalizer = normalizer or DocumentNormalizer(settings)

    async def ingest(
        self,
        collection: str,
        items: Sequence[Tuple[str, Union[bytes, Path]]],
        chunk_size: int,
        chunk_overlap: int,
        language: Optional[str] = None,
    ) -> IngestionReport:
        """Ingest ``(name, data)`` pairs into ``collection``.

        ``data`` is either raw bytes or a local path read during decoding.

        Items are decoded concurrently; splitting, embedding and upserting
        follow in input order, one upsert per successfully decoded item.
        """
        # Parameters are validated before any decoding or network call
        splitter = ChunkSplitter(chunk_size, chunk_overlap)

        self.logger.info(
            "Indexing files",
            collection=collection,
            files=len(items),
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
        )

        decoded = await gather_with_concurrency(
            [self._decode(name, data, language) for name, data in items],
            self.settings.INGESTION_CONCURRENCY,
        )

        results: List[FileIngestionResult] = []
        for (name, _), outcome in zip(items, decoded):
            if isinstance(outcome, DecodeError):
                results.append(FileIngestionResult(name=name, error=outcome.message))
                continue

            chunks = splitter.split_documents(outcome)
            if chunks:
                embeddings = await self.embedding_provider.embed_documents(
                    [chunk.page_content for chunk in chunks]
                )
                await self.vector_store.upsert(collection, chunks, embeddings)

            results.append(
                FileIngestionResult(name=name, documents=len(outcome), chunks=len(chunks))
            )

        report = IngestionReport(collection=collection, files=results)
        self.logger.info(
            "Files indexed",
            collection=collection,
            files=len(results),
            failed=len(report.failed),
            chunks=report.total_chunks,
        )
        return report

    async def _decode(
        self, name: str, data: Union[bytes, Path], language: Optional[str]
    ) -> Union[List[Document], DecodeError]:
        if isinstance(data, Path):
            try:
                data = await asyncio.to_thread(data.read_bytes)
            except OSError as e:
                self.logger.warning("Could not read file", source=name, error=str(e))
                return DecodeError(name, e.strerror or str(e))

        try:
            return await self.normalizer.normalize(data, name, language)
        except DecodeError as e:
            return e

    async def ingest_uploads(
        self, request: IndexFilesRequest, language: Optional[str] = None
    ) -> IngestionReport:
        """Ingest a base64 upload batch.

        An explicit ``language`` overrides the one carried by the request.
        """
        items = [(upload.name, upload.decode()) for upload in request.uploads]
        return await self.ingest(
            request.collection_name,
            items,
            request.chunk_size,
            request.chunk_overlap,
            language or request.language,
        )

    async def ingest_files(
        self,
        collection: str,
        paths: Sequence[Path],
        chunk_size: int,
        chunk_overlap: int,
        language: Optional[str] = None,
    ) -> IngestionReport:
        """Ingest local files; each file's name is its source."""
        items = [(path.name, path) for path in paths]
        return await self.ingest(collection, items, chunk_size, chunk_overlap, language)
