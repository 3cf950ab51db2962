"""
Dialogue Module - Tool-calling chat session over the course index.
==================================================================

One ChatSession owns one append-only dialogue history and answers one
question at a time:

    IDLE → AWAITING_MODEL → (no tool calls) → IDLE
    IDLE → AWAITING_MODEL → EXECUTING_TOOLS → AWAITING_FINAL → IDLE

A question costs exactly one model round-trip when the model answers
directly and exactly two when it asks for tools: every requested
search_courses call runs once, in order, and the model is asked once more
with the results. Tool definitions stay attached to that second request,
but tool calls it asks for are not executed.
"""

from typing import Optional

from usf_coursechat.rag.chat_base import ChatModel, get_chat_model
from usf_coursechat.rag.prompts import FALLBACK_ANSWER, SYSTEM_PROMPT
from usf_coursechat.rag.retriever import Retriever, create_retriever
from usf_coursechat.rag.tools import (
    PARSE_ERROR_TEXT,
    SEARCH_ERROR_TEXT,
    SEARCH_TOOL_NAME,
    parse_search_arguments,
    search_courses_tool,
)
from usf_coursechat.shared.errors import EmbeddingError, StorageError, ToolArgumentError
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import (
    ChatAnswer,
    DialogueTurn,
    ModelReply,
    SessionState,
    ToolInvocation,
)

logger = get_logger(__name__)


class ChatSession:
    """
    A single linear conversation about courses.

    Example:
        >>> session = ChatSession(get_chat_model(), retriever)
        >>> print(session.ask("Who is teaching CS 272?").answer)
        >>> print(session.ask("What's his email address?").answer)
    """

    def __init__(
        self,
        chat_model: ChatModel,
        retriever: Retriever,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.chat_model = chat_model
        self.retriever = retriever
        self.system_prompt = system_prompt
        self.tools = [search_courses_tool()]
        self.state = SessionState.IDLE

        self._history: list[DialogueTurn] = [DialogueTurn.system(system_prompt)]
        self._queries: list[str] = []

    @property
    def history(self) -> list[DialogueTurn]:
        """A copy of the dialogue so far, system turn first."""
        return list(self._history)

    def reset(self) -> None:
        """Drop every turn except the system prompt."""
        if self.state != SessionState.IDLE:
            raise RuntimeError("Cannot reset a session while a question is in flight")
        self._history = [DialogueTurn.system(self.system_prompt)]

    def ask(self, question: str) -> ChatAnswer:
        """
        Answer one user question, calling search_courses if the model asks.

        Raises:
            ModelCallError: If either model round-trip fails
            RuntimeError: If another question is still being answered
        """
        if self.state != SessionState.IDLE:
            raise RuntimeError("A question is already being answered in this session")

        try:
            return self._answer(question)
        finally:
            self.state = SessionState.IDLE

    def _answer(self, question: str) -> ChatAnswer:
        self._queries = []
        self._history.append(DialogueTurn.user(question))

        self.state = SessionState.AWAITING_MODEL
        reply = self._call_model()
        self._history.append(reply.turn)

        answer = ChatAnswer(
            question=question,
            answer=reply.turn.content,
            model_calls=1,
            total_tokens=reply.total_tokens,
        )

        if not reply.turn.tool_invocations:
            return answer

        self.state = SessionState.EXECUTING_TOOLS
        for invocation in reply.turn.tool_invocations:
            result = self.execute_tool(invocation)
            self._history.append(DialogueTurn.tool_result(invocation, result))

        self.state = SessionState.AWAITING_FINAL
        final = self._call_model()

        final_turn = final.turn
        if final_turn.tool_invocations:
            logger.warning(
                f"Ignoring {len(final_turn.tool_invocations)} tool call(s) requested "
                f"after the tool round"
            )
            final_turn = DialogueTurn.assistant(final_turn.content)
        self._history.append(final_turn)

        answer.model_calls += 1
        answer.total_tokens += final.total_tokens
        answer.tool_queries = list(self._queries)

        if final_turn.content.strip():
            answer.answer = final_turn.content
        else:
            answer.answer = FALLBACK_ANSWER
            answer.used_fallback = True

        return answer

    def _call_model(self) -> ModelReply:
        return self.chat_model.generate(self._history, tools=self.tools)

    def execute_tool(self, invocation: ToolInvocation) -> str:
        """
        Run one tool invocation and return its result text.

        Argument and retrieval problems become fixed result texts; they
        never abort the question.
        """
        if invocation.name != SEARCH_TOOL_NAME:
            logger.warning(f"Model requested unknown tool: {invocation.name}")
            return f"Unknown tool: {invocation.name}"

        try:
            arguments = parse_search_arguments(invocation.arguments)
        except ToolArgumentError as e:
            logger.warning(f"Tool call {invocation.id}: {e}")
            return PARSE_ERROR_TEXT

        self._queries.append(arguments.query)
        logger.info(f"search_courses(query={arguments.query!r})")

        try:
            lines = self.retriever.search(arguments.query)
        except (EmbeddingError, StorageError) as e:
            logger.error(f"Course search failed: {e}")
            return SEARCH_ERROR_TEXT

        return "\n".join(lines)


def create_session(
    chat_model: Optional[ChatModel] = None,
    retriever: Optional[Retriever] = None,
) -> ChatSession:
    """
    Create a chat session over the configured backends.

    Convenience function.
    """
    return ChatSession(
        chat_model=chat_model or get_chat_model(),
        retriever=retriever or create_retriever(),
    )
