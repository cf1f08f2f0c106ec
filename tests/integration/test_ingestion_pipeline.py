"""Integration tests for batch ingestion against mocked backends."""

import base64

import pytest

from ragweave.config.settings import Settings
from ragweave.core.exceptions import EmbeddingBackendError, ValidationError
from ragweave.ingestion.pipeline import IngestionPipeline
from ragweave.models.rag import Document, IndexFilesRequest
from ragweave.rag.embeddings.ollama import OllamaEmbeddingProvider
from ragweave.rag.vector_store import ChromaVectorStore
from tests.utils import (
    FakeBackend,
    MockFactory,
    MockResponse,
    build_corrupt_spreadsheet,
    build_spreadsheet,
    keyword_vector,
)


def make_pipeline(settings: Settings, handler) -> tuple:
    session = MockFactory.create_routing_session_mock(handler)
    pipeline = IngestionPipeline(
        settings,
        OllamaEmbeddingProvider(settings, session=session),
        ChromaVectorStore(settings, session=session),
    )
    return pipeline, session


class TestIngestionPipeline:
    """Test normalize -> split -> embed -> upsert."""

    @pytest.mark.asyncio
    async def test_corrupt_file_is_isolated(self, test_settings: Settings):
        backend = FakeBackend()
        pipeline, _ = make_pipeline(test_settings, backend)
        items = [
            ("sky.txt", b"The sky is blue. Grass is green."),
            ("broken.xlsx", build_corrupt_spreadsheet()),
            ("table.xlsx", build_spreadsheet({"Colors": [["sky", "blue"], ["grass", "green"]]})),
        ]

        report = await pipeline.ingest("docs", items, chunk_size=20, chunk_overlap=5)

        assert [f.name for f in report.files] == ["sky.txt", "broken.xlsx", "table.xlsx"]
        assert [f.name for f in report.failed] == ["broken.xlsx"]
        assert "broken.xlsx" in report.failed[0].error
        assert len(backend.upserts) == 2
        assert [collection for collection, _ in backend.upserts] == ["docs", "docs"]

        first_payload = backend.upserts[0][1]
        assert first_payload["documents"] == ["The sky is blue.", "Grass is green."]
        assert [m["source"] for m in first_payload["metadatas"]] == ["sky.txt", "sky.txt"]
        assert first_payload["embeddings"] == [
            keyword_vector("The sky is blue."),
            keyword_vector("Grass is green."),
        ]

        second_payload = backend.upserts[1][1]
        assert second_payload["metadatas"][0]["sheet"] == "Colors"
        assert report.files[2].documents == 1
        assert report.total_chunks == report.files[0].chunks + report.files[2].chunks

    @pytest.mark.asyncio
    async def test_invalid_chunking_fails_before_network(self, test_settings: Settings):
        pipeline, session = make_pipeline(test_settings, FakeBackend())

        with pytest.raises(ValidationError):
            await pipeline.ingest("docs", [("a.txt", b"text")], chunk_size=10, chunk_overlap=10)

        assert session.requests == []

    @pytest.mark.asyncio
    async def test_empty_file_is_not_upserted(self, test_settings: Settings):
        backend = FakeBackend()
        pipeline, _ = make_pipeline(test_settings, backend)

        report = await pipeline.ingest("docs", [("empty.txt", b"")], chunk_size=10, chunk_overlap=0)

        assert report.files[0].succeeded
        assert report.files[0].chunks == 0
        assert backend.upserts == []

    @pytest.mark.asyncio
    async def test_embedding_failure_aborts_batch(self, test_settings: Settings):
        def handler(method, url, payload):
            if url.endswith("/api/embeddings"):
                return MockResponse({"error": "model not loaded"}, 500, text="model not loaded")
            return FakeBackend()(method, url, payload)

        pipeline, _ = make_pipeline(test_settings, handler)

        with pytest.raises(EmbeddingBackendError):
            await pipeline.ingest("docs", [("a.txt", b"some text")], chunk_size=100, chunk_overlap=0)

    @pytest.mark.asyncio
    async def test_ingest_uploads(self, test_settings: Settings):
        backend = FakeBackend()
        pipeline, _ = make_pipeline(test_settings, backend)
        request = IndexFilesRequest.model_validate(
            {
                "chunkOverlap": 0,
                "chunkSize": 100,
                "collectionName": "notes",
                "uploads": [
                    {"name": "a.txt", "data": base64.b64encode(b"Alpha text").decode()},
                    {"name": "b.txt", "data": base64.b64encode(b"Beta text").decode()},
                ],
            }
        )

        report = await pipeline.ingest_uploads(request)

        assert report.collection == "notes"
        assert [f.chunks for f in report.files] == [1, 1]
        assert [payload["documents"] for _, payload in backend.upserts] == [["Alpha text"], ["Beta text"]]

    @pytest.mark.asyncio
    async def test_ingest_files(self, test_settings: Settings, temp_dir):
        backend = FakeBackend()
        pipeline, _ = make_pipeline(test_settings, backend)
        path = temp_dir / "notes.md"
        path.write_text("# Notes\n\nGrass is green.", encoding="utf-8")

        report = await pipeline.ingest_files("docs", [path], chunk_size=100, chunk_overlap=10)

        assert report.files[0].name == "notes.md"
        assert backend.upserts[0][1]["metadatas"][0]["source"] == "notes.md"

    @pytest.mark.asyncio
    async def test_unreadable_file_is_isolated(self, test_settings: Settings, temp_dir):
        backend = FakeBackend()
        pipeline, _ = make_pipeline(test_settings, backend)
        readable = temp_dir / "notes.txt"
        readable.write_text("Grass is green.", encoding="utf-8")

        report = await pipeline.ingest_files(
            "docs", [temp_dir / "missing.txt", readable], chunk_size=100, chunk_overlap=0
        )

        assert [f.name for f in report.failed] == ["missing.txt"]
        assert "missing.txt" in report.failed[0].error
        assert report.files[1].chunks == 1
        assert len(backend.upserts) == 1

    @pytest.mark.asyncio
    async def test_ingest_uploads_forwards_language(self, test_settings: Settings):
        class RecordingNormalizer:
            def __init__(self):
                self.languages = []

            async def normalize(self, data, source, language=None):
                self.languages.append(language)
                return [Document(page_content=data.decode(), metadata={"source": source})]

        normalizer = RecordingNormalizer()
        session = MockFactory.create_routing_session_mock(FakeBackend())
        pipeline = IngestionPipeline(
            test_settings,
            OllamaEmbeddingProvider(test_settings, session=session),
            ChromaVectorStore(test_settings, session=session),
            normalizer=normalizer,
        )
        request = IndexFilesRequest.model_validate(
            {
                "chunkOverlap": 0,
                "chunkSize": 100,
                "collectionName": "scans",
                "language": "deu",
                "uploads": [{"name": "a.txt", "data": base64.b64encode(b"Hallo").decode()}],
            }
        )

        await pipeline.ingest_uploads(request)
        await pipeline.ingest_uploads(request, language="fra")

        assert normalizer.languages == ["deu", "fra"]
