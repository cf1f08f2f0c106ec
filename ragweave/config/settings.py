"""Configuration settings for RAGWeave."""

from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    SERVER_HOST: str = Field(default="localhost", description="Server host")
    SERVER_PORT: int = Field(default=8080, description="Server port")
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIRECTORY: Path = Field(default=Path("./logs"), description="Log file directory")

    # Local files
    DATA_DIRECTORY: Path = Field(
        default=Path("./data"), description="Directory scanned by interactive ingestion"
    )

    # Backends
    OLLAMA_BASE_URL: str = Field(
        default="http://host.docker.internal:11434", description="Ollama base URL"
    )
    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com", description="OpenAI API base URL"
    )
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="OpenAI API key")
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=120.0, gt=0, description="Total deadline for a single backend HTTP call"
    )

    # Embedding Configuration
    EMBEDDING_PROVIDER: str = Field(
        default="ollama", description="Embedding provider: 'ollama' or 'openai'"
    )
    EMBEDDING_MODEL: str = Field(
        default="nomic-embed-text", description="Embedding model name"
    )
    EMBEDDING_CONCURRENCY: int = Field(
        default=8, ge=1, description="Maximum concurrent embedding requests"
    )

    # Vector Store Configuration
    CHROMA_BASE_URL: str = Field(
        default="http://localhost:8000", description="Chroma server base URL"
    )
    CHROMA_TENANT: str = Field(default="default_tenant", description="Chroma tenant")
    CHROMA_DATABASE: str = Field(default="default_database", description="Chroma database")

    # Generation Configuration
    DEFAULT_PROVIDER: str = Field(
        default="ollama", description="Provider used when a model id has no 'provider:' prefix"
    )
    DEFAULT_CHAT_MODEL: str = Field(
        default="ollama:llama4", description="Default 'provider:model' identifier"
    )
    DEFAULT_MAX_TOKENS: int = Field(default=10000, ge=1, description="Default token budget")
    DEFAULT_TEMPERATURE: float = Field(default=0.3, description="Default sampling temperature")
    DEFAULT_NUMBER_OF_VECTOR_DOCS: int = Field(
        default=10, ge=1, description="Default number of matches per collection"
    )
    ANSWER_LANGUAGE: Optional[str] = Field(
        default=None, description="Answer language; defaults to the question's language"
    )
    MODEL_FILTER: Optional[str] = Field(
        default=None, description="Regular expression applied to model listings"
    )

    # Ingestion Configuration
    DEFAULT_CHUNK_SIZE: int = Field(default=1000, ge=1, description="Default chunk size")
    DEFAULT_CHUNK_OVERLAP: int = Field(default=200, ge=0, description="Default chunk overlap")
    OCR_LANGUAGE: str = Field(default="eng", description="Default Tesseract language")
    INGESTION_CONCURRENCY: int = Field(
        default=4, ge=1, description="Maximum files decoded concurrently"
    )

    def create_directories(self) -> None:
        """Create necessary directories."""
        self.DATA_DIRECTORY.mkdir(parents=True, exist_ok=True)
        self.LOG_DIRECTORY.mkdir(parents=True, exist_ok=True)

    @property
    def chroma_database_url(self) -> str:
        """Get the tenant/database scoped Chroma API URL."""
        return (
            f"{self.CHROMA_BASE_URL.rstrip('/')}/api/v2"
            f"/tenants/{quote(self.CHROMA_TENANT, safe='')}"
            f"/databases/{quote(self.CHROMA_DATABASE, safe='')}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump(exclude={"OPENAI_API_KEY"})

    def __repr__(self) -> str:
        """String representation of settings."""
        return (
            f"Settings(host={self.SERVER_HOST}, port={self.SERVER_PORT}, "
            f"embedding={self.EMBEDDING_PROVIDER}:{self.EMBEDDING_MODEL}, debug={self.DEBUG})"
        )
