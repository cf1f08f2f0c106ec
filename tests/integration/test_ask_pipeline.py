"""Integration tests for the question answering path."""

import json

import pytest

from ragweave.config.settings import Settings
from ragweave.core.exceptions import ConfigurationError, UnsupportedProviderError, UpstreamQueryError
from ragweave.generation.context import CONTEXT_PREFIX
from ragweave.models.chat import AskRequest, ConversationMessage, Role
from ragweave.models.rag import RetrievedMatch
from ragweave.rag.embeddings.ollama import OllamaEmbeddingProvider
from ragweave.rag.pipeline import AskPipeline, build_sources
from ragweave.rag.vector_store import ChromaVectorStore
from tests.utils import FakeBackend, MockFactory, MockResponse


def match(match_id: str, text: str, source: str, distance: float) -> RetrievedMatch:
    return RetrievedMatch(id=match_id, page_content=text, metadata={"source": source}, score=distance)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        answer="Grass is green.",
        query_results={
            "sky": [match("s1", "The sky is blue.", "sky.txt", 0.1)],
            "grass": [
                match("g1", "Grass is green.", "grass.txt", 0.2),
                match("g2", "Green grass grows.", "grass.txt", 0.3),
            ],
        },
    )


def make_pipeline(settings: Settings, backend: FakeBackend) -> tuple:
    session = MockFactory.create_routing_session_mock(backend)
    pipeline = AskPipeline(
        settings,
        OllamaEmbeddingProvider(settings, session=session),
        ChromaVectorStore(settings, session=session),
        session=session,
    )
    return pipeline, session


class TestAskPipeline:
    """Test embed -> retrieve -> assemble -> generate."""

    @pytest.mark.asyncio
    async def test_answer_without_rerank(self, test_settings: Settings, backend: FakeBackend):
        pipeline, session = make_pipeline(test_settings, backend)
        request = AskRequest(
            collections=["sky", "grass"],
            model="ollama:llama4",
            query="What color is grass?",
            rerank=False,
        )

        response = await pipeline.ask(request)

        assert [m.role for m in response.conversation] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
        answer = response.answer
        assert answer.content == "Grass is green."
        assert [s["id"] for s in answer.sources] == ["s1", "g1", "g2"]
        assert answer.sources[0] == {
            "source": "sky.txt",
            "id": "s1",
            "collection": "sky",
            "score": 0.1,
        }

        # Collections were queried with the configured default k
        query_payloads = [p for m, u, p, h in session.requests if u.endswith("/query")]
        assert all(p["n_results"] == 10 for p in query_payloads)

        chat_payload = backend.chat_payloads[0]
        assert chat_payload["model"] == "llama4"
        assert chat_payload["options"] == {"temperature": 0.3}
        user_content = chat_payload["messages"][-1]["content"]
        assert user_content.startswith(CONTEXT_PREFIX)
        assert json.dumps("The sky is blue.\n\nGrass is green.\n\nGreen grass grows.") in user_content
        assert all(set(m) == {"role", "content"} for m in chat_payload["messages"])

    @pytest.mark.asyncio
    async def test_answer_with_rerank(self, test_settings: Settings, backend: FakeBackend):
        pipeline, _ = make_pipeline(test_settings, backend)
        request = AskRequest(
            collections=["sky", "grass"],
            model="ollama:llama4",
            query="green grass",
            number_of_vector_docs=2,
        )

        response = await pipeline.ask(request)

        sources = response.answer.sources
        assert [s["id"] for s in sources] == ["g1", "g2"]
        assert sources[0]["score"] >= sources[1]["score"]

    @pytest.mark.asyncio
    async def test_history_is_forwarded(self, test_settings: Settings, backend: FakeBackend):
        pipeline, _ = make_pipeline(test_settings, backend)
        request = AskRequest(
            collections=["sky"],
            model="llama4",
            query="And the sky?",
            temperature=1.2,
            language="German",
            rerank=False,
            conversation=[
                ConversationMessage(role=Role.USER, content="What color is grass?"),
                ConversationMessage(
                    role=Role.ASSISTANT, content="Green.", sources=[{"id": "g1"}]
                ),
            ],
        )

        response = await pipeline.ask(request)

        roles = [m.role for m in response.conversation]
        assert roles == [Role.SYSTEM, Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT]
        assert response.conversation[0].content.endswith("Always answer in German.")
        assert response.conversation[2].sources == [{"id": "g1"}]

        chat_payload = backend.chat_payloads[0]
        assert chat_payload["options"] == {"temperature": 1.2}
        assert len(chat_payload["messages"]) == 4

    @pytest.mark.asyncio
    async def test_unsupported_provider_fails_before_network(
        self, test_settings: Settings, backend: FakeBackend
    ):
        pipeline, session = make_pipeline(test_settings, backend)
        request = AskRequest(collections=["sky"], model="mistral:large", query="Q")

        with pytest.raises(UnsupportedProviderError):
            await pipeline.ask(request)

        assert session.requests == []

    @pytest.mark.asyncio
    async def test_missing_openai_key_fails_before_network(
        self, test_settings: Settings, backend: FakeBackend
    ):
        pipeline, session = make_pipeline(test_settings, backend)
        request = AskRequest(collections=["sky"], model="openai:gpt-4o-mini", query="Q")

        with pytest.raises(ConfigurationError):
            await pipeline.ask(request)

        assert session.requests == []

    @pytest.mark.asyncio
    async def test_unknown_collection_fails(self, test_settings: Settings):
        def handler(method, url, payload):
            if "/collections/missing/" in url:
                return MockResponse(None, 404, text="Collection missing does not exist")
            return FakeBackend()(method, url, payload)

        session = MockFactory.create_routing_session_mock(handler)
        pipeline = AskPipeline(
            test_settings,
            OllamaEmbeddingProvider(test_settings, session=session),
            ChromaVectorStore(test_settings, session=session),
            session=session,
        )
        request = AskRequest(collections=["sky", "missing"], model="ollama:llama4", query="Q")

        with pytest.raises(UpstreamQueryError) as exc_info:
            await pipeline.ask(request)

        assert exc_info.value.collection == "missing"
        assert not any(u.endswith("/api/chat") for _, u, _, _ in session.requests)


class TestBuildSources:
    """Test provenance construction."""

    def test_sources_follow_match_order(self, sample_matches):
        sources = build_sources(sample_matches)

        assert [s["id"] for s in sources] == ["chunk-1", "chunk-2"]
        assert sources[1] == {
            "source": "grass.txt",
            "locFrom": 17,
            "locTo": 32,
            "id": "chunk-2",
            "collection": "docs",
            "score": 0.2,
        }
