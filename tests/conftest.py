"""Pytest configuration and shared fixtures for RAGWeave tests."""

import os
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from ragweave.config.settings import Settings
from ragweave.models.rag import RetrievedMatch


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings pointing at fake backends and temporary directories."""
    return Settings(
        _env_file=None,

        # Server settings
        SERVER_HOST="127.0.0.1",
        SERVER_PORT=8081,
        DEBUG=True,
        LOG_LEVEL="DEBUG",

        # Local paths (temporary)
        LOG_DIRECTORY=temp_dir / "logs",
        DATA_DIRECTORY=temp_dir / "data",

        # Backends (never contacted, sessions are mocked)
        OLLAMA_BASE_URL="http://ollama.test:11434",
        OPENAI_BASE_URL="https://openai.test",
        OPENAI_API_KEY=None,
        CHROMA_BASE_URL="http://chroma.test:8000",
        CHROMA_TENANT="default_tenant",
        CHROMA_DATABASE="default_database",
        REQUEST_TIMEOUT_SECONDS=5.0,

        # Models
        EMBEDDING_PROVIDER="ollama",
        EMBEDDING_MODEL="nomic-embed-text",
        DEFAULT_PROVIDER="ollama",
        DEFAULT_CHAT_MODEL="ollama:llama4",
        DEFAULT_MAX_TOKENS=10000,
        DEFAULT_TEMPERATURE=0.3,
        DEFAULT_NUMBER_OF_VECTOR_DOCS=10,
        ANSWER_LANGUAGE=None,
        MODEL_FILTER=None,

        # Ingestion
        DEFAULT_CHUNK_SIZE=1000,
        DEFAULT_CHUNK_OVERLAP=200,
        OCR_LANGUAGE="eng",
        EMBEDDING_CONCURRENCY=4,
        INGESTION_CONCURRENCY=2,
    )


@pytest.fixture
def openai_settings(test_settings: Settings) -> Settings:
    """Test settings with an OpenAI key configured."""
    test_settings.OPENAI_API_KEY = "sk-test"
    return test_settings


@pytest.fixture
def sample_matches() -> List[RetrievedMatch]:
    """Two matches from one collection, in store ranking order."""
    return [
        RetrievedMatch(
            id="chunk-1",
            page_content="The sky is blue.",
            metadata={"source": "sky.txt", "locFrom": 0, "locTo": 16},
            score=0.1,
            collection="docs",
        ),
        RetrievedMatch(
            id="chunk-2",
            page_content="Grass is green.",
            metadata={"source": "grass.txt", "locFrom": 17, "locTo": 32},
            score=0.2,
            collection="docs",
        ),
    ]


# Environment cleanup
@pytest.fixture(autouse=True)
def cleanup_env():
    """Clean up environment variables before/after tests."""
    original_env = dict(os.environ)

    yield

    os.environ.clear()
    os.environ.update(original_env)
