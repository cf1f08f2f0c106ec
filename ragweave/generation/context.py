"""Prompt assembly from retrieved passages and conversation history."""

import json
from typing import List, Optional, Sequence

from ..config.logging import LoggerMixin
from ..models.chat import ConversationMessage, Role
from ..models.rag import RetrievedMatch

CONTEXT_PREFIX = "### CONTEXT: "
QUESTION_PREFIX = "### QUESTION: "
ANSWER_SUFFIX = "Answer:"

SYSTEM_PROMPT = (
    "Use the following context to answer the question "
    "(both are submitted as serialized JSON strings)."
)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Approximate token count (~4 characters per token)."""
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN)


class ContextAssembler(LoggerMixin):
    """Builds the grounded prompt for a question."""

    def __init__(self, default_language: Optional[str] = None):
        self.default_language = default_language

    @staticmethod
    def build_context(matches: Sequence[RetrievedMatch]) -> str:
        """Join passage texts with blank lines."""
        return "\n\n".join(match.page_content for match in matches).strip()

    @staticmethod
    def build_user_message(context: str, question: str) -> ConversationMessage:
        """Frame context and question as JSON strings so neither can break the template."""
        content = (
            f"{CONTEXT_PREFIX}{json.dumps(context, ensure_ascii=False)}\n\n"
            f"{QUESTION_PREFIX}{json.dumps(question, ensure_ascii=False)}\n\n"
            f"{ANSWER_SUFFIX}"
        )
        return ConversationMessage(role=Role.USER, content=content)

    def build_system_message(self, language: Optional[str] = None) -> ConversationMessage:
        language = (language or self.default_language or "").strip()
        if language:
            instruction = f"Always answer in {language}."
        else:
            instruction = "Answer in the same language as the question."
        return ConversationMessage(role=Role.SYSTEM, content=f"{SYSTEM_PROMPT}\n{instruction}")

    def ensure_system_message(
        self,
        conversation: Sequence[ConversationMessage],
        language: Optional[str] = None,
    ) -> List[ConversationMessage]:
        """Return a copy of ``conversation`` that starts with a system message if it had none."""
        messages = list(conversation)
        if not any(message.role == Role.SYSTEM for message in messages):
            self.logger.debug("Setting up system message", language=language or self.default_language)
            messages.insert(0, self.build_system_message(language))
        return messages

    def assemble(
        self,
        conversation: Sequence[ConversationMessage],
        matches: Sequence[RetrievedMatch],
        question: str,
        language: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ) -> List[ConversationMessage]:
        """Build the outgoing conversation: history, system message, new user message.

        The token estimate is logged only; nothing is truncated.
        """
        messages = self.ensure_system_message(conversation, language)
        user_message = self.build_user_message(self.build_context(matches), question)
        messages.append(user_message)

        estimated = estimate_tokens(
            "".join(m.content for m in messages if m.role in (Role.SYSTEM, Role.USER))
        )
        self.logger.info(
            "Prompt assembled",
            messages=len(messages),
            passages=len(matches),
            user_content_length=len(user_message.content),
            estimated_tokens=estimated,
            max_tokens=max_tokens,
        )
        if max_tokens is not None and estimated > max_tokens:
            self.logger.warning(
                "Estimated prompt size exceeds the token budget",
                estimated_tokens=estimated,
                max_tokens=max_tokens,
            )

        return messages
