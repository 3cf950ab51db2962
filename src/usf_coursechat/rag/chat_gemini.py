"""
Gemini Chat Module - Gemini generate_content with function calling.
===================================================================

Maps the provider-neutral dialogue onto the Gemini content format:

- system turns become the system instruction
- user turns are ``user`` contents, assistant turns ``model`` contents
- assistant tool invocations become function_call parts
- consecutive tool results are grouped into one ``user`` content of
  function_response parts

Function-call arguments come back as JSON text so the dialogue engine's
argument extraction is the same for every backend.
"""

import json
import uuid
from typing import Any, Optional

from google import genai
from google.genai import types

from usf_coursechat.rag.chat_base import ChatModel
from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import ConfigurationError, ModelCallError
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import (
    DialogueTurn,
    ModelReply,
    Role,
    ToolDefinition,
    ToolInvocation,
)

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Conversion Helpers
# ─────────────────────────────────────────────────────────────────────────────


def to_gemini_schema(schema: dict[str, Any]) -> types.Schema:
    """Convert a JSON-schema fragment into a Gemini Schema."""
    kwargs: dict[str, Any] = {}

    if "type" in schema:
        kwargs["type"] = types.Type(str(schema["type"]).upper())
    if "description" in schema:
        kwargs["description"] = schema["description"]
    if "enum" in schema:
        kwargs["enum"] = list(schema["enum"])
    if "required" in schema:
        kwargs["required"] = list(schema["required"])
    if "properties" in schema:
        kwargs["properties"] = {
            name: to_gemini_schema(prop) for name, prop in schema["properties"].items()
        }
    if "items" in schema:
        kwargs["items"] = to_gemini_schema(schema["items"])

    return types.Schema(**kwargs)


def to_gemini_tools(tools: list[ToolDefinition]) -> list[types.Tool]:
    """Convert tool definitions into one Gemini tool of function declarations."""
    if not tools:
        return []

    declarations = [
        types.FunctionDeclaration(
            name=tool.name,
            description=tool.description,
            parameters=to_gemini_schema(tool.parameters),
        )
        for tool in tools
    ]
    return [types.Tool(function_declarations=declarations)]


def _arguments_to_dict(arguments: str) -> dict[str, Any]:
    try:
        args = json.loads(arguments) if arguments else {}
    except ValueError:
        return {}
    return args if isinstance(args, dict) else {}


def to_gemini_contents(
    history: list[DialogueTurn],
) -> tuple[Optional[str], list[types.Content]]:
    """
    Convert dialogue turns to a system instruction and Gemini contents.

    Returns:
        Tuple of (system instruction or None, contents)
    """
    system_parts: list[str] = []
    contents: list[types.Content] = []

    for turn in history:
        if turn.role == Role.SYSTEM:
            system_parts.append(turn.content)

        elif turn.role == Role.USER:
            contents.append(types.Content(role="user", parts=[types.Part(text=turn.content)]))

        elif turn.role == Role.ASSISTANT:
            parts: list[types.Part] = []
            if turn.content:
                parts.append(types.Part(text=turn.content))
            for invocation in turn.tool_invocations:
                parts.append(
                    types.Part(
                        function_call=types.FunctionCall(
                            id=invocation.id,
                            name=invocation.name,
                            args=_arguments_to_dict(invocation.arguments),
                        )
                    )
                )
            # Gemini rejects contents without parts
            if parts:
                contents.append(types.Content(role="model", parts=parts))

        elif turn.role == Role.TOOL:
            part = types.Part(
                function_response=types.FunctionResponse(
                    id=turn.tool_call_id,
                    name=turn.name,
                    response={"result": turn.content},
                )
            )
            previous = contents[-1] if contents else None
            if (
                previous is not None
                and previous.role == "user"
                and previous.parts
                and previous.parts[0].function_response is not None
            ):
                previous.parts.append(part)
            else:
                contents.append(types.Content(role="user", parts=[part]))

    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


# ─────────────────────────────────────────────────────────────────────────────
# Gemini Chat Model
# ─────────────────────────────────────────────────────────────────────────────


class GeminiChatModel(ChatModel):
    """
    Chat backend using the Google GenAI SDK.

    Example:
        >>> model = GeminiChatModel()
        >>> reply = model.generate(history, tools=[search_courses_tool()])
        >>> print(reply.turn.tool_invocations)
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        """
        Initialize the Gemini chat model.

        Raises:
            ConfigurationError: If no API key is available
        """
        settings = get_settings()

        self._model_name = model_name or settings.chat.gemini_model
        self._api_key = api_key or settings.gemini_api_key
        self.temperature = (
            temperature if temperature is not None else settings.chat.temperature
        )

        if not self._api_key:
            raise ConfigurationError(
                "Gemini API key not found. Set GEMINI_API_KEY environment variable."
            )

        self._client: Optional[genai.Client] = None

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def client(self) -> genai.Client:
        """Lazy-load Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
            logger.debug("Gemini client initialized")
        return self._client

    def _generate(
        self,
        history: list[DialogueTurn],
        tools: list[ToolDefinition],
    ) -> ModelReply:
        system_instruction, contents = to_gemini_contents(history)

        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            tools=to_gemini_tools(tools) or None,
            temperature=self.temperature,
        )

        response = self.client.models.generate_content(
            model=self._model_name,
            contents=contents,
            config=config,
        )

        if not response.candidates:
            raise ModelCallError("Gemini returned no candidates")

        content = response.candidates[0].content
        texts: list[str] = []
        invocations: list[ToolInvocation] = []

        for part in (content.parts if content and content.parts else []):
            if part.function_call is not None:
                call = part.function_call
                invocations.append(
                    ToolInvocation(
                        id=call.id or f"call_{uuid.uuid4().hex[:12]}",
                        name=call.name or "",
                        arguments=json.dumps(dict(call.args or {})),
                    )
                )
            elif part.text:
                texts.append(part.text)

        usage = response.usage_metadata
        total_tokens = (usage.total_token_count or 0) if usage else 0

        return ModelReply(
            turn=DialogueTurn.assistant("".join(texts), invocations),
            total_tokens=total_tokens,
        )
