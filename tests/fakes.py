"""
Test Fakes - Deterministic stand-ins for the external model services.
======================================================================
"""

import math
import re
import zlib
from typing import Callable, Optional, Union

from usf_coursechat.indexing.embeddings_base import EmbeddingProvider
from usf_coursechat.rag.chat_base import ChatModel
from usf_coursechat.shared.schemas import (
    DialogueTurn,
    ModelReply,
    ToolDefinition,
    ToolInvocation,
)


class HashingEmbedder(EmbeddingProvider):
    """
    Bag-of-words embedder: each lowercase token hashes into one bucket.

    Texts sharing words land close together under cosine distance. The last
    component is a constant so no vector is all zeros.
    """

    def __init__(self, buckets: int = 256):
        self.buckets = buckets
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    @property
    def provider_name(self) -> str:
        return "hashing"

    @property
    def model_name(self) -> str:
        return f"crc32-{self.buckets}"

    @property
    def dimensions(self) -> int:
        return self.buckets + 1

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self.dimensions
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            vector[zlib.crc32(token.encode("utf-8")) % self.buckets] += 1.0
        vector[-1] = 0.1
        norm = math.sqrt(sum(v * v for v in vector))
        return [v / norm for v in vector]

    def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def _embed_query(self, query: str) -> list[float]:
        self.query_calls.append(query)
        return self._vector(query)


ScriptStep = Union[ModelReply, Exception, Callable[[list[DialogueTurn]], ModelReply]]


class ScriptedChatModel(ChatModel):
    """
    Chat model that replays a fixed list of replies.

    Each step is a ModelReply, an exception to raise, or a callable that
    builds the reply from the submitted history. Every call's history and
    tools are recorded.
    """

    def __init__(self, steps: Optional[list[ScriptStep]] = None):
        self.steps = list(steps or [])
        self.calls: list[tuple[list[DialogueTurn], list[ToolDefinition]]] = []

    @property
    def provider_name(self) -> str:
        return "scripted"

    @property
    def model_name(self) -> str:
        return "scripted-1"

    def _generate(
        self,
        history: list[DialogueTurn],
        tools: list[ToolDefinition],
    ) -> ModelReply:
        self.calls.append((list(history), list(tools)))
        if not self.steps:
            raise AssertionError("ScriptedChatModel ran out of replies")

        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(history)
        return step


def text_reply(text: str, tokens: int = 10) -> ModelReply:
    """An assistant reply with no tool calls."""
    return ModelReply(turn=DialogueTurn.assistant(text), total_tokens=tokens)


def tool_reply(*arguments: str, name: str = "search_courses", tokens: int = 20) -> ModelReply:
    """An assistant reply requesting one tool call per raw argument string."""
    invocations = [
        ToolInvocation(id=f"call_{i}", name=name, arguments=raw)
        for i, raw in enumerate(arguments)
    ]
    return ModelReply(
        turn=DialogueTurn.assistant("", tool_invocations=invocations),
        total_tokens=tokens,
    )

