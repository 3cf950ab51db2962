"""
Chat Base Module - Abstract interface for language-model backends.
==================================================================

A ChatModel turns an ordered dialogue history plus optional tool
definitions into one assistant turn. Calls are blocking and never retried;
any backend failure surfaces as ModelCallError.

The same backend also serves single-shot completions (a system
instruction and a user payload, no tools) for the evaluation harness.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import ConfigurationError, ModelCallError
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import (
    CompletionResult,
    DialogueTurn,
    ModelReply,
    ToolDefinition,
)

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Abstract Base Class
# ─────────────────────────────────────────────────────────────────────────────


class ChatModel(ABC):
    """
    Abstract base class for chat backends.

    Implementations must provide:
    - _generate(): One request/response round-trip
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name being used."""

    @abstractmethod
    def _generate(
        self,
        history: list[DialogueTurn],
        tools: list[ToolDefinition],
    ) -> ModelReply:
        """Submit the history and tools, return the assistant turn."""

    def generate(
        self,
        history: Sequence[DialogueTurn],
        tools: Optional[Sequence[ToolDefinition]] = None,
    ) -> ModelReply:
        """
        Run one model round-trip.

        Args:
            history: Full ordered dialogue history
            tools: Tool definitions the model may call

        Returns:
            ModelReply with the assistant turn and token usage

        Raises:
            ModelCallError: If the backend fails
        """
        try:
            reply = self._generate(list(history), list(tools or []))
        except ModelCallError:
            raise
        except Exception as e:
            raise ModelCallError(f"{self.provider_name} chat call failed: {e}") from e

        logger.info(f"Tokens: {reply.total_tokens}")
        return reply

    def complete_once(self, system_prompt: str, user_prompt: str) -> CompletionResult:
        """
        Single-shot completion outside any dialogue.

        Raises:
            ModelCallError: If the backend fails
        """
        reply = self.generate(
            [DialogueTurn.system(system_prompt), DialogueTurn.user(user_prompt)]
        )
        return CompletionResult(text=reply.turn.content, total_tokens=reply.total_tokens)


# ─────────────────────────────────────────────────────────────────────────────
# Model Factory
# ─────────────────────────────────────────────────────────────────────────────


CHAT_PROVIDERS = ("gemini", "openai")


def get_chat_model(provider_name: Optional[str] = None) -> ChatModel:
    """
    Get a chat model instance.

    Args:
        provider_name: "gemini" or "openai". If None, uses config.

    Raises:
        ConfigurationError: If the provider is unknown or lacks credentials
    """
    if provider_name is None:
        provider_name = get_settings().get_effective_chat_provider()

    provider_name = provider_name.lower().strip()

    model: ChatModel

    if provider_name == "gemini":
        from usf_coursechat.rag.chat_gemini import GeminiChatModel
        model = GeminiChatModel()

    elif provider_name == "openai":
        from usf_coursechat.rag.chat_openai import OpenAIChatModel
        model = OpenAIChatModel()

    else:
        raise ConfigurationError(
            f"Unknown chat provider: {provider_name}. "
            f"Valid options: {', '.join(CHAT_PROVIDERS)}"
        )

    logger.info(f"Initialized chat model: {model.provider_name} (model={model.model_name})")
    return model
