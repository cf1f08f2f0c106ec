"""Main RAGWeave HTTP server implementation."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

import aiohttp
import uvicorn
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.logging import LoggerMixin, setup_logging
from ..config.settings import Settings
from ..generation.factory import create_generation_client
from ..ingestion.pipeline import IngestionPipeline
from ..models.chat import AskRequest, AskResponse, ModelList
from ..models.rag import CollectionRecord, CreateCollectionRequest, IndexFilesRequest, IngestionReport
from ..rag.embeddings.base import EmbeddingProvider
from ..rag.embeddings.factory import create_embedding_provider
from ..rag.pipeline import AskPipeline
from ..rag.vector_store import ChromaVectorStore
from ..utils.text_utils import filter_models
from .exceptions import BackendError, DecodeError, RagWeaveError, ValidationError


def status_for_error(error: RagWeaveError) -> int:
    """Map a domain error to an HTTP status code."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, DecodeError):
        return 422
    if isinstance(error, BackendError):
        return 502
    return 400


class RagWeaveServer(LoggerMixin):
    """RAGWeave HTTP service for ingestion, collections and question answering."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the server with configuration."""
        self.settings = settings or Settings()
        self.settings.create_directories()

        setup_logging(self.settings)
        self.logger.info("Initializing RAGWeave server", version=__version__)

        # Shared clients are created in the lifespan context
        self.session: Optional[aiohttp.ClientSession] = None
        self.embedding_provider: Optional[EmbeddingProvider] = None
        self.vector_store: Optional[ChromaVectorStore] = None
        self.ask_pipeline: Optional[AskPipeline] = None
        self.ingestion_pipeline: Optional[IngestionPipeline] = None

        self.app: Optional[FastAPI] = None
        self._running = False

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncGenerator[None, None]:
        """FastAPI lifespan context manager."""
        try:
            await self._startup()
            yield
        finally:
            await self._shutdown()

    async def _startup(self) -> None:
        """Create the shared HTTP session and backend clients."""
        self.logger.info("Starting RAGWeave server components")

        try:
            timeout = aiohttp.ClientTimeout(total=self.settings.REQUEST_TIMEOUT_SECONDS)
            self.session = aiohttp.ClientSession(timeout=timeout)

            self.embedding_provider = create_embedding_provider(
                self.settings, session=self.session
            )
            self.vector_store = ChromaVectorStore(self.settings, session=self.session)

            self.ask_pipeline = AskPipeline(
                self.settings, self.embedding_provider, self.vector_store, self.session
            )
            self.ingestion_pipeline = IngestionPipeline(
                self.settings, self.embedding_provider, self.vector_store
            )

            self._running = True
            self.logger.info(
                "All server components started successfully",
                embedding_provider=self.embedding_provider.provider_name,
                embedding_model=self.embedding_provider.model,
                chroma=self.settings.CHROMA_BASE_URL,
            )

        except Exception as e:
            self.logger.error("Failed to start server components", error=str(e))
            if self.session:
                await self.session.close()
                self.session = None
            raise

    async def _shutdown(self) -> None:
        """Close the shared HTTP session."""
        self.logger.info("Shutting down RAGWeave server")
        self._running = False

        if self.session:
            await self.session.close()
            self.session = None

        self.logger.info("Server shutdown complete")

    def _require(self, component: Optional[object], name: str):
        if component is None:
            raise HTTPException(status_code=503, detail=f"{name} not available")
        return component

    async def _list_models(self, provider: str) -> ModelList:
        """List chat models of ``provider``; failures yield an empty list."""
        try:
            client = create_generation_client(self.settings, provider, session=self.session)
            async with client:
                names = await client.list_models()
            return ModelList(models=filter_models(names, self.settings.MODEL_FILTER))
        except RagWeaveError as e:
            self.logger.error("Failed to list models", provider=provider, error=str(e))
            return ModelList(models=[])

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title="RAGWeave",
            description="Retrieval-augmented generation over heterogeneous documents",
            version=__version__,
            lifespan=self.lifespan,
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @app.exception_handler(RagWeaveError)
        async def ragweave_exception_handler(request: Request, exc: RagWeaveError):
            status_code = status_for_error(exc)
            log = self.logger.warning if status_code < 500 else self.logger.error
            log("Request failed", path=request.url.path, error=str(exc), status=status_code)
            return JSONResponse(status_code=status_code, content=exc.to_dict())

        @app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            return JSONResponse(
                status_code=400,
                content={
                    "error": "Invalid request body",
                    "error_code": "VALIDATION_ERROR",
                    "details": {"errors": jsonable_errors(exc)},
                },
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error"},
            )

        @app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "status": "healthy",
                "version": __version__,
                "components": {
                    "embeddings": self.embedding_provider is not None,
                    "vector_store": self.vector_store is not None,
                    "ask": self.ask_pipeline is not None,
                    "ingestion": self.ingestion_pipeline is not None,
                },
            }

        @app.post("/api/chats/ask", response_model=AskResponse, response_model_exclude_none=True)
        async def ask(request: AskRequest) -> AskResponse:
            pipeline: AskPipeline = self._require(self.ask_pipeline, "Ask pipeline")
            return await pipeline.ask(request)

        @app.get("/api/collections", response_model=List[CollectionRecord])
        async def list_collections() -> List[CollectionRecord]:
            store: ChromaVectorStore = self._require(self.vector_store, "Vector store")
            return await store.list_collections()

        @app.post("/api/collections", response_model=CollectionRecord, status_code=201)
        async def create_collection(request: CreateCollectionRequest) -> CollectionRecord:
            store: ChromaVectorStore = self._require(self.vector_store, "Vector store")
            return await store.create_collection(request.collection_name)

        @app.delete("/api/collections/{collection_id}", status_code=204)
        async def delete_collection(collection_id: str) -> Response:
            store: ChromaVectorStore = self._require(self.vector_store, "Vector store")
            await store.delete_collection(collection_id)
            return Response(status_code=204)

        @app.post("/api/collections/{collection_id}/files", response_model=IngestionReport)
        async def index_files(collection_id: str, request: IndexFilesRequest) -> IngestionReport:
            pipeline: IngestionPipeline = self._require(
                self.ingestion_pipeline, "Ingestion pipeline"
            )
            self.logger.debug(
                "Index request",
                collection_id=collection_id,
                collection=request.collection_name,
            )
            return await pipeline.ingest_uploads(request)

        @app.get("/api/ollama/models/chat", response_model=ModelList)
        async def ollama_models() -> ModelList:
            return await self._list_models("ollama")

        @app.get("/api/openai/models/chat", response_model=ModelList)
        async def openai_models() -> ModelList:
            return await self._list_models("openai")

        self.app = app
        return app

    async def start(self) -> None:
        """Start the server using uvicorn."""
        app = self.create_app()

        config = uvicorn.Config(
            app,
            host=self.settings.SERVER_HOST,
            port=self.settings.SERVER_PORT,
            log_level=self.settings.LOG_LEVEL.lower(),
            access_log=self.settings.DEBUG,
        )

        server = uvicorn.Server(config)
        await server.serve()

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running


def jsonable_errors(exc: RequestValidationError) -> List[dict]:
    """Reduce pydantic error entries to JSON-safe location/message pairs."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": str(error.get("msg", ""))}
        for error in exc.errors()
    ]
