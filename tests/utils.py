"""Test utilities and helper functions for RAGWeave tests."""

import asyncio
import io
import json
import zipfile
from typing import Any, Callable, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

from ragweave.models.rag import RetrievedMatch


class MockResponse:
    """Stand-in for an aiohttp response."""

    def __init__(self, data: Any = None, status: int = 200, text: Optional[str] = None):
        self.status = status
        self._data = data
        self._text = text if text is not None else json.dumps(data)

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    async def text(self) -> str:
        return self._text


class MockAsyncContextManager:
    """Async context manager yielding a response or raising an exception."""

    def __init__(self, response: Any):
        self.response = response

    async def __aenter__(self):
        if isinstance(self.response, BaseException):
            raise self.response
        return self.response

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


# handler(method, url, json_payload) -> MockResponse | exception | plain JSON data
RequestHandler = Callable[[str, str, Optional[Dict[str, Any]]], Any]


class MockFactory:
    """Factory for creating various mocks used in tests."""

    @staticmethod
    def create_aiohttp_session_mock(response_data: Any = None, status: int = 200) -> MagicMock:
        """Create a mock aiohttp session answering every request the same way."""
        response = (
            response_data
            if isinstance(response_data, (MockResponse, BaseException))
            else MockResponse(response_data, status)
        )
        return MockFactory.create_routing_session_mock(lambda method, url, payload: response)

    @staticmethod
    def create_routing_session_mock(handler: RequestHandler) -> MagicMock:
        """Create a mock aiohttp session whose answers are computed per request.

        Every request is recorded in ``session.requests`` as
        ``(method, url, payload, headers)``.
        """
        session_mock = MagicMock()
        session_mock.requests = []

        def make_method(method: str) -> MagicMock:
            def call(url, headers=None, json=None, **kwargs):
                session_mock.requests.append((method, url, json, headers))
                result = handler(method, url, json)
                if not isinstance(result, (MockResponse, BaseException)):
                    result = MockResponse(result)
                return MockAsyncContextManager(result)

            return MagicMock(side_effect=call)

        session_mock.get = make_method("GET")
        session_mock.post = make_method("POST")
        session_mock.delete = make_method("DELETE")
        session_mock.close = AsyncMock()
        return session_mock


def keyword_vector(text: str) -> List[float]:
    """Deterministic toy embedding: counts of a few keywords plus a bias term."""
    lowered = text.lower()
    return [
        float(lowered.count("sky") + lowered.count("blue")),
        float(lowered.count("grass") + lowered.count("green")),
        1.0,
    ]


class FakeBackend:
    """In-memory Ollama + Chroma backend for routing session mocks."""

    def __init__(self, answer: str = "The sky is blue.", query_results: Optional[Dict[str, list]] = None):
        self.answer = answer
        self.query_results = query_results or {}
        self.upserts: List[Tuple[str, Dict[str, Any]]] = []
        self.chat_payloads: List[Dict[str, Any]] = []

    def __call__(self, method: str, url: str, payload: Optional[Dict[str, Any]]) -> Any:
        if url.endswith("/api/embeddings"):
            return {"embedding": keyword_vector(payload["prompt"])}

        if url.endswith("/api/chat"):
            self.chat_payloads.append(payload)
            return {"message": {"role": "assistant", "content": self.answer}}

        if url.endswith("/upsert"):
            collection = url.split("/collections/")[1].split("/")[0]
            self.upserts.append((collection, payload))
            return MockResponse(None, 201, text="")

        if url.endswith("/query"):
            collection = url.split("/collections/")[1].split("/")[0]
            matches = self.query_results.get(collection, [])[: payload["n_results"]]
            return chroma_query_result(matches)

        return MockResponse({"error": "not found"}, 404, text="Not Found")


def chroma_query_result(matches: List[RetrievedMatch]) -> Dict[str, Any]:
    """Encode matches the way Chroma answers a single-embedding query."""
    return {
        "ids": [[match.id for match in matches]],
        "documents": [[match.page_content for match in matches]],
        "metadatas": [[match.metadata for match in matches]],
        "distances": [[match.score for match in matches]],
    }


def build_spreadsheet(sheets: Dict[str, List[list]]) -> bytes:
    """Build an .xlsx workbook with one worksheet per entry."""
    from openpyxl import Workbook

    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title)
        for row in rows:
            sheet.append(row)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_presentation(slides: List[Tuple[str, str]]) -> bytes:
    """Build a .pptx deck with a title and a text box per slide."""
    from pptx import Presentation
    from pptx.util import Inches

    presentation = Presentation()
    for title, body in slides:
        slide = presentation.slides.add_slide(presentation.slide_layouts[5])
        slide.shapes.title.text = title
        textbox = slide.shapes.add_textbox(Inches(1), Inches(2), Inches(6), Inches(1))
        textbox.text_frame.text = body

    buffer = io.BytesIO()
    presentation.save(buffer)
    return buffer.getvalue()


def build_pdf(pages: int) -> bytes:
    """Build a PDF with ``pages`` blank pages."""
    from pypdf import PdfWriter

    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def build_png() -> bytes:
    """Build a small PNG image."""
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), color="white").save(buffer, format="PNG")
    return buffer.getvalue()


def build_corrupt_spreadsheet() -> bytes:
    """A zip that sniffs as a spreadsheet but is not a valid workbook."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("xl/garbage.txt", "not a workbook")
    return buffer.getvalue()


class StubVectorStore:
    """Vector store double with per-collection delays and failures."""

    def __init__(
        self,
        results: Dict[str, List[RetrievedMatch]],
        delays: Optional[Dict[str, float]] = None,
        failures: Optional[Dict[str, Exception]] = None,
    ):
        self.results = results
        self.delays = delays or {}
        self.failures = failures or {}
        self.queries: List[Tuple[str, int]] = []
        self.completed: List[str] = []

    async def query(self, collection: str, vector: List[float], k: int) -> List[RetrievedMatch]:
        self.queries.append((collection, k))
        await asyncio.sleep(self.delays.get(collection, 0))
        if collection in self.failures:
            raise self.failures[collection]
        self.completed.append(collection)
        return self.results.get(collection, [])[:k]


class StubEmbeddingProvider:
    """Embedding provider double backed by ``keyword_vector``."""

    provider_name = "stub"
    model = "keywords"

    def __init__(self):
        self.queries: List[str] = []

    async def embed_query(self, text: str) -> List[float]:
        self.queries.append(text)
        return keyword_vector(text)

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [keyword_vector(text) for text in texts]
