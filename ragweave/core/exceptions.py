"""Custom exceptions for RAGWeave."""

from typing import Any, Dict, Optional


class RagWeaveError(Exception):
    """Base exception for all RAGWeave errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [self.message]
        if self.error_code:
            parts.append(f"(code: {self.error_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ValidationError(RagWeaveError):
    """Raised when input or configuration validation fails."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidArgumentError(ValidationError):
    """Raised when an argument passed to a component is out of range."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, field)
        self.error_code = "INVALID_ARGUMENT"


class ConfigurationError(ValidationError):
    """Raised when there's a configuration issue, such as missing credentials."""

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        super().__init__(message)
        self.error_code = "CONFIGURATION_ERROR"
        if config_key:
            self.details = {"config_key": config_key}


class UnsupportedProviderError(ValidationError):
    """Raised when a provider identifier does not name a known backend."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"AI provider '{provider}' not supported", "provider")
        self.error_code = "UNSUPPORTED_PROVIDER"
        self.details["provider"] = provider


class DecodeError(RagWeaveError):
    """Raised when a format-specific decoder fails on one input unit."""

    def __init__(
        self,
        source: str,
        reason: str,
        mime_type: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {"source": source}
        if mime_type:
            details["mime_type"] = mime_type
        super().__init__(f"Could not decode '{source}': {reason}", "DECODE_ERROR", details)
        self.source = source
        self.mime_type = mime_type


class BackendError(RagWeaveError):
    """Raised when an external HTTP dependency fails or answers unexpectedly."""

    def __init__(
        self,
        message: str,
        service: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {"service": service}
        if status is not None:
            details["status"] = status
        if body:
            details["body"] = body
        super().__init__(message, "BACKEND_ERROR", details)
        self.service = service
        self.status = status
        self.body = body


class EmbeddingBackendError(BackendError):
    """Raised when the embedding backend fails."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message, "embedding", status, body)
        self.error_code = "EMBEDDING_BACKEND_ERROR"


class GenerationBackendError(BackendError):
    """Raised when a generation backend fails."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message, "generation", status, body)
        self.error_code = "GENERATION_BACKEND_ERROR"


class VectorStoreError(BackendError):
    """Raised when a vector store request fails."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message, "vector_store", status, body)
        self.error_code = "VECTOR_STORE_ERROR"


class UpstreamQueryError(VectorStoreError):
    """Raised when querying a single collection fails."""

    def __init__(
        self,
        collection: str,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(f"Query on collection '{collection}' failed: {message}", status, body)
        self.error_code = "UPSTREAM_QUERY_ERROR"
        self.details["collection"] = collection
        self.collection = collection
