"""Ollama generation client."""

from typing import Any, Dict, List, Set

from ..models.chat import QueryOptions
from .base import GenerationClient


class OllamaGenerationClient(GenerationClient):
    """Chat completions from a local Ollama server."""

    default_model = "llama4"

    @property
    def provider(self) -> str:
        return "ollama"

    @property
    def base_url(self) -> str:
        return self.settings.OLLAMA_BASE_URL.rstrip("/")

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/api/chat"

    def _build_payload(self, messages: List[Dict[str, str]], options: QueryOptions) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": options.temperature},
        }

    def _extract_content(self, data: Any) -> str:
        return str(data["message"]["content"] or "")

    @property
    def models_url(self) -> str:
        return f"{self.base_url}/api/tags"

    def _extract_models(self, data: Any) -> Set[str]:
        return {str(model["name"]) for model in data.get("models") or []}
