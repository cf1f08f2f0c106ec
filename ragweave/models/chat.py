"""Conversation and generation models for RAGWeave."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import RagWeaveBaseModel


class Role(str, Enum):
    """Conversation roles understood by every generation backend."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(RagWeaveBaseModel):
    """One entry of a dialogue."""

    role: Role = Field(description="Author of the message")
    content: str = Field(description="Message text")
    sources: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="Provenance of the passages behind an answer; never sent to a backend",
    )

    def to_backend(self) -> Dict[str, str]:
        """Serialize to the role/content pair every chat backend accepts."""
        return {"role": self.role.value, "content": self.content}


class QueryOptions(RagWeaveBaseModel):
    """Options for a single generation request."""

    max_tokens: int = Field(default=10000, alias="maxTokens", ge=1)
    # Range is enforced by the generation clients, never clamped here
    temperature: float = Field(default=0.3)


class GenerationResult(RagWeaveBaseModel):
    """Answer extracted from a generation backend."""

    content: str = Field(description="Answer text")


class AskRequest(RagWeaveBaseModel):
    """A question to answer from one or more collections."""

    collections: List[str] = Field(min_length=1, description="Collections to search")
    conversation: List[ConversationMessage] = Field(
        default_factory=list, description="Prior conversation, resent by the caller"
    )
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens", ge=1, le=128000)
    model: str = Field(min_length=1, description="'provider:model' identifier")
    number_of_vector_docs: Optional[int] = Field(
        default=None, alias="numberOfVectorDocs", ge=1
    )
    query: str = Field(min_length=1, description="The question")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    language: Optional[str] = Field(default=None, description="Answer language")
    rerank: bool = Field(
        default=True, description="Re-rank merged matches into one globally ranked set"
    )

    @field_validator("collections")
    @classmethod
    def strip_collections(cls, value: List[str]) -> List[str]:
        stripped = [name.strip() for name in value]
        if any(not name for name in stripped):
            raise ValueError("collection names cannot be blank")
        return stripped

    @field_validator("model")
    @classmethod
    def strip_model(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("model cannot be blank")
        return value


class AskResponse(RagWeaveBaseModel):
    """The full conversation including the new answer."""

    conversation: List[ConversationMessage]

    @property
    def answer(self) -> ConversationMessage:
        return self.conversation[-1]


class ModelList(RagWeaveBaseModel):
    """Available model identifiers of a provider."""

    models: List[str] = Field(default_factory=list)
