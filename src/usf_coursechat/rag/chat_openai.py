"""
OpenAI Chat Module - Chat completions with function tools.
==========================================================

Dialogue turns map one-to-one onto chat-completion messages; tool results
are ``tool`` messages carrying the invocation's ``tool_call_id``.
"""

from typing import Any, Optional

from openai import OpenAI

from usf_coursechat.rag.chat_base import ChatModel
from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import ConfigurationError, ModelCallError
from usf_coursechat.shared.schemas import (
    DialogueTurn,
    ModelReply,
    Role,
    ToolDefinition,
    ToolInvocation,
)


def to_openai_messages(history: list[DialogueTurn]) -> list[dict[str, Any]]:
    """Convert dialogue turns to chat-completion messages."""
    messages: list[dict[str, Any]] = []

    for turn in history:
        if turn.role == Role.ASSISTANT:
            message: dict[str, Any] = {"role": "assistant", "content": turn.content}
            if turn.tool_invocations:
                # Null content is only accepted alongside tool_calls
                message["content"] = turn.content or None
                message["tool_calls"] = [
                    {
                        "id": invocation.id,
                        "type": "function",
                        "function": {
                            "name": invocation.name,
                            "arguments": invocation.arguments,
                        },
                    }
                    for invocation in turn.tool_invocations
                ]
            messages.append(message)
        elif turn.role == Role.TOOL:
            messages.append(
                {
                    "role": "tool",
                    "tool_call_id": turn.tool_call_id,
                    "content": turn.content,
                }
            )
        else:
            messages.append({"role": turn.role.value, "content": turn.content})

    return messages


def to_openai_tools(tools: list[ToolDefinition]) -> list[dict[str, Any]]:
    """Convert tool definitions to function tools."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.parameters,
            },
        }
        for tool in tools
    ]


class OpenAIChatModel(ChatModel):
    """
    Chat backend using the OpenAI chat completions API.

    Example:
        >>> model = OpenAIChatModel()
        >>> result = model.complete_once("Reply with 3.", "Score this.")
        >>> print(result.text)
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        settings = get_settings()

        self._model_name = model_name or settings.chat.openai_model
        self._api_key = api_key or settings.openai_api_key
        self.temperature = (
            temperature if temperature is not None else settings.chat.temperature
        )

        if not self._api_key:
            raise ConfigurationError(
                "OpenAI API key is required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: Optional[OpenAI] = None

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def client(self) -> OpenAI:
        """Lazy load and return the OpenAI client."""
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def _generate(
        self,
        history: list[DialogueTurn],
        tools: list[ToolDefinition],
    ) -> ModelReply:
        kwargs: dict[str, Any] = {
            "model": self._model_name,
            "messages": to_openai_messages(history),
            "temperature": self.temperature,
        }
        if tools:
            kwargs["tools"] = to_openai_tools(tools)

        response = self.client.chat.completions.create(**kwargs)

        if not response.choices:
            raise ModelCallError("OpenAI returned no choices")

        message = response.choices[0].message
        invocations = [
            ToolInvocation(
                id=call.id,
                name=call.function.name,
                arguments=call.function.arguments or "",
            )
            for call in (message.tool_calls or [])
        ]

        return ModelReply(
            turn=DialogueTurn.assistant(message.content or "", invocations),
            total_tokens=response.usage.total_tokens if response.usage else 0,
        )
