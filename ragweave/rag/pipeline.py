"""Question answering over indexed collections."""

from typing import Any, Dict, List, Optional

import aiohttp

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..generation.context import ContextAssembler
from ..generation.factory import create_generation_client_for
from ..models.chat import AskRequest, AskResponse, ConversationMessage, QueryOptions, Role
from ..models.rag import RetrievedMatch
from .embeddings.base import EmbeddingProvider
from .retrieval import RetrievalOrchestrator
from .vector_store import ChromaVectorStore


def build_sources(matches: List[RetrievedMatch]) -> List[Dict[str, Any]]:
    """Provenance of the passages used, in context order."""
    sources = []
    for match in matches:
        source = dict(match.metadata)
        source["id"] = match.id
        if match.collection is not None:
            source["collection"] = match.collection
        if match.score is not None:
            source["score"] = match.score
        sources.append(source)
    return sources


class AskPipeline(LoggerMixin):
    """Embeds a question, retrieves passages, and asks a generation backend.

    The generation client is created per request from the request's
    ``provider:model`` identifier and shares the pipeline's HTTP session
    when one is given.
    """

    def __init__(
        self,
        settings: Settings,
        embedding_provider: EmbeddingProvider,
        vector_store: ChromaVectorStore,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.settings = settings
        self.embedding_provider = embedding_provider
        self.retriever = RetrievalOrchestrator(vector_store, embedding_provider)
        self.assembler = ContextAssembler(settings.ANSWER_LANGUAGE)
        self.session = session

    async def ask(self, request: AskRequest) -> AskResponse:
        """Answer ``request.query`` and return the extended conversation."""
        k = request.number_of_vector_docs or self.settings.DEFAULT_NUMBER_OF_VECTOR_DOCS
        options = QueryOptions(
            max_tokens=request.max_tokens or self.settings.DEFAULT_MAX_TOKENS,
            temperature=(
                request.temperature
                if request.temperature is not None
                else self.settings.DEFAULT_TEMPERATURE
            ),
        )

        # Provider and credentials are resolved before any network call
        client = create_generation_client_for(self.settings, request.model, self.session)

        self.logger.info(
            "Answering question",
            provider=client.provider,
            model=client.model,
            collections=request.collections,
            k=k,
            rerank=request.rerank,
            query_length=len(request.query),
        )

        query_vector = await self.embedding_provider.embed_query(request.query)
        matches = await self.retriever.retrieve(query_vector, request.collections, k)

        if request.rerank:
            matches = await self.retriever.rerank(request.query, matches, k)

        messages = self.assembler.assemble(
            request.conversation,
            matches,
            request.query,
            language=request.language,
            max_tokens=options.max_tokens,
        )

        await client.initialize()
        try:
            result = await client.query(messages, options)
        finally:
            await client.close()

        answer = ConversationMessage(
            role=Role.ASSISTANT,
            content=result.content,
            sources=build_sources(matches),
        )
        return AskResponse(conversation=[*messages, answer])
