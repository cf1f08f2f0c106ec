"""Core server functionality for RAGWeave."""

from .exceptions import BackendError, DecodeError, RagWeaveError, ValidationError
from .server import RagWeaveServer

__all__ = ["RagWeaveServer", "RagWeaveError", "ValidationError", "DecodeError", "BackendError"]
