"""Abstract base class for generation clients."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Set

import aiohttp

from ..config.settings import Settings
from ..core.exceptions import GenerationBackendError, InvalidArgumentError
from ..core.http import HttpBackend
from ..models.chat import ConversationMessage, GenerationResult, QueryOptions

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0


class GenerationClient(HttpBackend, ABC):
    """A chat-completion backend.

    Subclasses provide the wire format through ``_build_payload`` /
    ``_extract_content`` and the endpoint through ``chat_url``.
    """

    error_class = GenerationBackendError

    #: Model used when none is given
    default_model: str = ""

    def __init__(
        self,
        settings: Settings,
        model: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(settings, session)
        self.model = (model or self.default_model).strip()

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider identifier."""

    @property
    @abstractmethod
    def chat_url(self) -> str:
        """Get the chat completion endpoint."""

    @abstractmethod
    def _build_payload(self, messages: List[Dict[str, str]], options: QueryOptions) -> Dict[str, Any]:
        """Build the backend request body."""

    @abstractmethod
    def _extract_content(self, data: Any) -> str:
        """Extract the answer text from the backend response body."""

    @property
    @abstractmethod
    def models_url(self) -> str:
        """Endpoint that lists the available models."""

    @abstractmethod
    def _extract_models(self, data: Any) -> Set[str]:
        """Pull model identifiers out of a listing response."""

    def _auth_headers(self) -> Dict[str, str]:
        return {}

    async def query(
        self,
        messages: Sequence[ConversationMessage],
        options: QueryOptions,
    ) -> GenerationResult:
        """Send the conversation and return the single answer."""
        if not MIN_TEMPERATURE <= options.temperature <= MAX_TEMPERATURE:
            raise InvalidArgumentError(
                f"options.temperature must be between {MIN_TEMPERATURE:g} and {MAX_TEMPERATURE:g}",
                "temperature",
            )

        # Provenance fields stay local
        wire_messages = [message.to_backend() for message in messages]

        data = await self._request_json(
            "POST",
            self.chat_url,
            payload=self._build_payload(wire_messages, options),
            headers=self._auth_headers(),
        )

        try:
            content = self._extract_content(data)
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationBackendError(f"Malformed {self.provider} response: missing {e}")

        self.logger.info(
            "Answer received",
            provider=self.provider,
            model=self.model,
            messages=len(wire_messages),
            answer_length=len(content),
        )
        return GenerationResult(content=content)

    async def list_models(self) -> Set[str]:
        """List the model identifiers available on the backend."""
        data = await self._request_json("GET", self.models_url, headers=self._auth_headers())

        try:
            return self._extract_models(data)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise GenerationBackendError(f"Malformed {self.provider} model listing: {e!r}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider}, model={self.model})"
