"""OpenAI generation client."""

from typing import Any, Dict, List, Optional, Set

import aiohttp

from ..config.settings import Settings
from ..core.exceptions import ConfigurationError
from ..models.chat import QueryOptions
from .base import GenerationClient


class OpenAIGenerationClient(GenerationClient):
    """Chat completions from the hosted OpenAI API."""

    default_model = "gpt-4o-mini"

    def __init__(
        self,
        settings: Settings,
        model: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(settings, model, session)
        if not (settings.OPENAI_API_KEY or "").strip():
            raise ConfigurationError("No OPENAI_API_KEY defined", "OPENAI_API_KEY")
        self._api_key = settings.OPENAI_API_KEY.strip()

    @property
    def provider(self) -> str:
        return "openai"

    @property
    def base_url(self) -> str:
        return self.settings.OPENAI_BASE_URL.rstrip("/")

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/v1/chat/completions"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _build_payload(self, messages: List[Dict[str, str]], options: QueryOptions) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "temperature": options.temperature,
        }

    def _extract_content(self, data: Any) -> str:
        return str(data["choices"][0]["message"]["content"] or "")

    @property
    def models_url(self) -> str:
        return f"{self.base_url}/v1/models"

    def _extract_models(self, data: Any) -> Set[str]:
        # Only chat models owned by OpenAI
        return {
            str(item["id"])
            for item in data.get("data") or []
            if item.get("object") == "model" and item.get("owned_by") == "openai"
        }
