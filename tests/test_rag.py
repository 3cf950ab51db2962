"""
Tests for RAG Module.
=====================

Tests for:
- Tools: search_courses definition and argument extraction
- Retriever: Nearest course lines
- Chat backends: Message conversion (clients mocked)
- ChatSession: The tool-calling dialogue
"""

import json

import pytest
from unittest.mock import Mock

from tests.fakes import ScriptedChatModel, text_reply, tool_reply


# ─────────────────────────────────────────────────────────────────────────────
# Prompt Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestPrompts:
    """Tests for fixed prompt texts."""

    def test_build_judge_prompt(self):
        """Test the judge payload layout."""
        from usf_coursechat.rag.prompts import build_judge_prompt

        assert build_judge_prompt("PHIL 240", "Ethics") == (
            "Expected answer:\nPHIL 240\n\nChat answer:\nEthics"
        )

    def test_system_prompt_mentions_tool(self):
        """Test that the system prompt points the model at search_courses."""
        from usf_coursechat.rag.prompts import SYSTEM_PROMPT

        assert "search_courses" in SYSTEM_PROMPT


# ─────────────────────────────────────────────────────────────────────────────
# Tool Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestSearchTool:
    """Tests for the search_courses tool."""

    def test_definition(self):
        """Test the tool's name and parameter schema."""
        from usf_coursechat.rag.tools import search_courses_tool

        tool = search_courses_tool()

        assert tool.name == "search_courses"
        assert tool.parameters["required"] == ["query"]
        assert tool.parameters["properties"]["query"]["type"] == "string"

    def test_parse_valid(self):
        """Test extracting the query."""
        from usf_coursechat.rag.tools import parse_search_arguments

        assert parse_search_arguments('{"query": "Phil Peterson"}').query == "Phil Peterson"

    @pytest.mark.parametrize("raw", [
        "{not json",
        "",
        "[\"Phil Peterson\"]",
        "{}",
        '{"query": 42}',
        '{"query": null}',
    ])
    def test_parse_invalid(self, raw):
        """Test that malformed payloads raise ToolArgumentError."""
        from usf_coursechat.rag.tools import parse_search_arguments
        from usf_coursechat.shared.errors import ToolArgumentError

        with pytest.raises(ToolArgumentError):
            parse_search_arguments(raw)


# ─────────────────────────────────────────────────────────────────────────────
# Retriever Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestRetriever:
    """Tests for the Retriever class."""

    def test_instructor_search(self, retriever):
        """Test that an instructor's course is among the top results."""
        lines = retriever.search("Phil Peterson")

        assert len(lines) == 3
        assert any("Instructor:Phil Peterson" in line for line in lines)

    def test_results_nearest_first(self, retriever):
        """Test that hits are ordered by distance."""
        hits = retriever.search_hits("Bioinformatics LM 365")

        assert "Title:Bioinformatics" in hits[0].text
        distances = [h.distance for h in hits]
        assert distances == sorted(distances)

    def test_one_embedding_call_per_query(self, retriever, embedder):
        """Test that each search embeds the query once."""
        retriever.search("Ethics")

        assert embedder.query_calls == ["Ethics"]

    def test_empty_query(self, retriever, embedder):
        """Test that a blank query returns nothing without embedding."""
        assert retriever.search("   ") == []
        assert embedder.query_calls == []

    def test_small_store_returns_all(self, make_store, embedder):
        """Test that fewer than three rows are all returned."""
        from usf_coursechat.rag.retriever import Retriever

        store = make_store(embedder.dimensions)
        store.put(1, "SUBJ:CS Number:272", embedder.embed_text("SUBJ:CS Number:272"))

        assert Retriever(store, embedder).search("CS 272") == ["SUBJ:CS Number:272"]

    def test_empty_store(self, record_store, embedder):
        """Test that an empty store yields no lines."""
        from usf_coursechat.rag.retriever import Retriever

        assert Retriever(record_store, embedder).search("CS 272") == []


# ─────────────────────────────────────────────────────────────────────────────
# Chat Backend Tests
# ─────────────────────────────────────────────────────────────────────────────


def _tool_history():
    from usf_coursechat.shared.schemas import DialogueTurn, ToolInvocation

    invocation = ToolInvocation(
        id="call_1", name="search_courses", arguments='{"query": "CS 272"}'
    )
    return [
        DialogueTurn.system("Be brief."),
        DialogueTurn.user("Who teaches CS 272?"),
        DialogueTurn.assistant("", [invocation]),
        DialogueTurn.tool_result(invocation, "SUBJ:CS Number:272"),
    ]


class TestChatModelFactory:
    """Tests for get_chat_model."""

    def test_unknown_provider(self):
        """Test that unknown backends are configuration errors."""
        from usf_coursechat.rag.chat_base import get_chat_model
        from usf_coursechat.shared.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            get_chat_model("llama")

    def test_backend_errors_wrapped(self):
        """Test that backend exceptions surface as ModelCallError."""
        from usf_coursechat.shared.errors import ModelCallError

        model = ScriptedChatModel([RuntimeError("timeout")])

        with pytest.raises(ModelCallError, match="timeout"):
            model.complete_once("system", "user")

    def test_complete_once_sends_two_turns_without_tools(self):
        """Test the single-shot completion request shape."""
        model = ScriptedChatModel([text_reply("3", tokens=7)])

        result = model.complete_once("Judge.", "Expected answer:\nA")

        history, tools = model.calls[0]
        assert [t.role.value for t in history] == ["system", "user"]
        assert tools == []
        assert result.text == "3"
        assert result.total_tokens == 7


class TestOpenAIChat:
    """Tests for the OpenAI chat backend."""

    def test_to_openai_messages(self):
        """Test role mapping and tool call correlation."""
        from usf_coursechat.rag.chat_openai import to_openai_messages

        messages = to_openai_messages(_tool_history())

        assert [m["role"] for m in messages] == ["system", "user", "assistant", "tool"]
        assert messages[2]["tool_calls"][0]["id"] == "call_1"
        assert messages[2]["tool_calls"][0]["function"]["arguments"] == '{"query": "CS 272"}'
        assert messages[3]["tool_call_id"] == "call_1"
        assert messages[2]["content"] is None

    def test_blank_assistant_turn_keeps_empty_content(self):
        """Test that a blank answer without tool calls is sent as an empty string."""
        from usf_coursechat.rag.chat_openai import to_openai_messages
        from usf_coursechat.shared.schemas import DialogueTurn

        messages = to_openai_messages([DialogueTurn.user("hi"), DialogueTurn.assistant("")])

        assert messages[1] == {"role": "assistant", "content": ""}

    def test_generate_parses_tool_calls(self):
        """Test that tool calls and usage come back from the response."""
        from usf_coursechat.rag.chat_openai import OpenAIChatModel
        from usf_coursechat.rag.tools import search_courses_tool

        call = Mock(id="call_9")
        call.function.name = "search_courses"
        call.function.arguments = '{"query": "Ethics"}'
        response = Mock()
        response.choices = [Mock(message=Mock(content=None, tool_calls=[call]))]
        response.usage.total_tokens = 55

        model = OpenAIChatModel(model_name="gpt-4o-mini", api_key="sk-test")
        model._client = Mock()
        model._client.chat.completions.create.return_value = response

        reply = model.generate(_tool_history()[:2], tools=[search_courses_tool()])

        assert reply.total_tokens == 55
        assert reply.turn.content == ""
        assert reply.turn.tool_invocations[0].id == "call_9"
        assert reply.turn.tool_invocations[0].arguments == '{"query": "Ethics"}'

        kwargs = model._client.chat.completions.create.call_args.kwargs
        assert kwargs["tools"][0]["function"]["name"] == "search_courses"

    def test_no_tools_omits_tools_field(self):
        """Test that requests without tools do not send an empty list."""
        from usf_coursechat.rag.chat_openai import OpenAIChatModel

        response = Mock()
        response.choices = [Mock(message=Mock(content="2", tool_calls=None))]
        response.usage.total_tokens = 3

        model = OpenAIChatModel(model_name="gpt-4o-mini", api_key="sk-test")
        model._client = Mock()
        model._client.chat.completions.create.return_value = response

        assert model.complete_once("Judge.", "payload").text == "2"
        assert "tools" not in model._client.chat.completions.create.call_args.kwargs


class TestGeminiChat:
    """Tests for the Gemini chat backend."""

    def test_to_gemini_contents(self):
        """Test system extraction and function parts."""
        from usf_coursechat.rag.chat_gemini import to_gemini_contents

        system, contents = to_gemini_contents(_tool_history())

        assert system == "Be brief."
        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[1].parts[0].function_call.args == {"query": "CS 272"}
        response = contents[2].parts[0].function_response
        assert response.name == "search_courses"
        assert response.response == {"result": "SUBJ:CS Number:272"}

    def test_consecutive_tool_results_grouped(self):
        """Test that parallel tool results share one content."""
        from usf_coursechat.rag.chat_gemini import to_gemini_contents
        from usf_coursechat.shared.schemas import DialogueTurn, ToolInvocation

        first = ToolInvocation(id="a", name="search_courses", arguments='{"query": "x"}')
        second = ToolInvocation(id="b", name="search_courses", arguments='{"query": "y"}')
        history = [
            DialogueTurn.user("q"),
            DialogueTurn.assistant("", [first, second]),
            DialogueTurn.tool_result(first, "1"),
            DialogueTurn.tool_result(second, "2"),
        ]

        _, contents = to_gemini_contents(history)

        assert len(contents) == 3
        assert len(contents[2].parts) == 2

    def test_tool_schema(self):
        """Test the function declaration built from the tool definition."""
        from google.genai import types

        from usf_coursechat.rag.chat_gemini import to_gemini_tools
        from usf_coursechat.rag.tools import search_courses_tool

        tools = to_gemini_tools([search_courses_tool()])

        declaration = tools[0].function_declarations[0]
        assert declaration.name == "search_courses"
        assert declaration.parameters.type == types.Type.OBJECT
        assert declaration.parameters.properties["query"].type == types.Type.STRING

    def test_generate_parses_function_call(self):
        """Test that function calls become invocations with JSON arguments."""
        from google.genai import types

        from usf_coursechat.rag.chat_gemini import GeminiChatModel

        content = types.Content(
            role="model",
            parts=[types.Part(function_call=types.FunctionCall(
                name="search_courses", args={"query": "Greg Benson"},
            ))],
        )
        response = Mock()
        response.candidates = [Mock(content=content)]
        response.usage_metadata = Mock(total_token_count=42)

        model = GeminiChatModel(model_name="gemini-2.0-flash", api_key="test-key")
        model._client = Mock()
        model._client.models.generate_content.return_value = response

        reply = model.generate(_tool_history()[:2])

        invocation = reply.turn.tool_invocations[0]
        assert invocation.name == "search_courses"
        assert json.loads(invocation.arguments) == {"query": "Greg Benson"}
        assert invocation.id.startswith("call_")
        assert reply.total_tokens == 42


# ─────────────────────────────────────────────────────────────────────────────
# Dialogue Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestChatSession:
    """Tests for the tool-calling ChatSession."""

    def _session(self, retriever, steps):
        from usf_coursechat.rag.dialogue import ChatSession

        model = ScriptedChatModel(steps)
        return ChatSession(model, retriever), model

    def test_direct_answer(self, retriever):
        """Test that an answer without tool calls takes one round-trip, verbatim."""
        session, model = self._session(retriever, [text_reply("Hello! Ask me about courses.")])

        answer = session.ask("hi")

        assert answer.answer == "Hello! Ask me about courses."
        assert answer.model_calls == 1
        assert len(model.calls) == 1
        assert [t.role.value for t in session.history] == ["system", "user", "assistant"]

    def test_empty_direct_answer_not_replaced(self, retriever):
        """Test that the fallback only applies after a tool round."""
        session, _ = self._session(retriever, [text_reply("")])

        answer = session.ask("hi")

        assert answer.answer == ""
        assert answer.used_fallback is False

    def test_tool_round(self, retriever):
        """Test search, tool result, and final answer."""
        session, model = self._session(retriever, [
            tool_reply('{"query": "Phil Peterson"}'),
            text_reply("Phil Peterson teaches Software Development (CS 272)."),
        ])

        answer = session.ask("What is Phil Peterson teaching?")

        assert answer.answer == "Phil Peterson teaches Software Development (CS 272)."
        assert answer.model_calls == 2
        assert answer.tool_queries == ["Phil Peterson"]
        assert answer.total_tokens == 30

        second_history, second_tools = model.calls[1]
        tool_turn = second_history[-1]
        assert tool_turn.role.value == "tool"
        assert tool_turn.tool_call_id == "call_0"
        assert "Instructor:Phil Peterson" in tool_turn.content
        assert len(tool_turn.content.split("\n")) == 3
        assert [t.name for t in second_tools] == ["search_courses"]
        assert [t.name for t in model.calls[0][1]] == ["search_courses"]

    def test_invalid_arguments(self, retriever):
        """Test that unparseable arguments yield the parse error text."""
        session, model = self._session(retriever, [
            tool_reply("{query: Phil"),
            text_reply("Sorry, I could not search."),
        ])

        answer = session.ask("Who teaches CS 272?")

        tool_turn = model.calls[1][0][-1]
        assert tool_turn.content == "Error parsing arguments"
        assert answer.answer == "Sorry, I could not search."
        assert answer.tool_queries == []

    def test_unknown_tool(self, retriever):
        """Test that calls to other tools are answered, not executed."""
        session, model = self._session(retriever, [
            tool_reply('{"query": "x"}', name="drop_course"),
            text_reply("Done."),
        ])

        session.ask("Drop CS 272")

        assert model.calls[1][0][-1].content == "Unknown tool: drop_course"

    def test_multiple_invocations_in_order(self, retriever):
        """Test that every requested call runs once, in order."""
        session, model = self._session(retriever, [
            tool_reply('{"query": "Phil Peterson"}', '{"query": "Greg Benson"}'),
            text_reply("Both found."),
        ])

        answer = session.ask("What are Phil Peterson and Greg Benson teaching?")

        assert answer.tool_queries == ["Phil Peterson", "Greg Benson"]
        tool_turns = model.calls[1][0][-2:]
        assert [t.tool_call_id for t in tool_turns] == ["call_0", "call_1"]
        assert "Greg Benson" in tool_turns[1].content

    def test_blank_final_answer_uses_fallback(self, retriever):
        """Test the fallback after a tool round with an empty answer."""
        from usf_coursechat.rag.prompts import FALLBACK_ANSWER

        session, _ = self._session(retriever, [
            tool_reply('{"query": "guitar"}'),
            text_reply("   "),
        ])

        answer = session.ask("Can I learn guitar this semester?")

        assert answer.answer == FALLBACK_ANSWER
        assert answer.used_fallback is True

    def test_second_round_tool_calls_not_executed(self, retriever, embedder):
        """Test that at most two round-trips happen per question."""
        session, model = self._session(retriever, [
            tool_reply('{"query": "Ethics"}'),
            tool_reply('{"query": "PHIL 110"}'),
        ])

        answer = session.ask("Which philosophy courses are offered?")

        assert len(model.calls) == 2
        assert embedder.query_calls == ["Ethics"]
        assert answer.used_fallback is True
        assert session.history[-1].tool_invocations == []

    def test_history_carries_over(self, retriever):
        """Test that a follow-up question sees the previous exchange."""
        session, model = self._session(retriever, [
            tool_reply('{"query": "CS 272"}'),
            text_reply("Phil Peterson teaches CS 272."),
            text_reply("phpeterson@usfca.edu"),
        ])

        session.ask("Who is teaching CS 272?")
        answer = session.ask("What's his email address?")

        third_history = model.calls[2][0]
        roles = [t.role.value for t in third_history]
        assert roles == ["system", "user", "assistant", "tool", "assistant", "user"]
        assert third_history[1].content == "Who is teaching CS 272?"
        assert "phpeterson@usfca.edu" in third_history[3].content
        assert answer.answer == "phpeterson@usfca.edu"

    def test_retrieval_failure_becomes_tool_result(self, retriever):
        """Test that a failing search does not abort the question."""
        from usf_coursechat.rag.dialogue import ChatSession
        from usf_coursechat.shared.errors import StorageError

        broken = Mock()
        broken.search.side_effect = StorageError("index unavailable")
        model = ScriptedChatModel([tool_reply('{"query": "x"}'), text_reply("Try later.")])

        answer = ChatSession(model, broken).ask("Anything?")

        assert model.calls[1][0][-1].content == "Error searching courses"
        assert answer.answer == "Try later."

    def test_model_error_propagates(self, retriever):
        """Test that a failed model call surfaces and the session stays usable."""
        from usf_coursechat.shared.errors import ModelCallError
        from usf_coursechat.shared.schemas import SessionState

        session, _ = self._session(retriever, [
            RuntimeError("503 from backend"),
            text_reply("Back again."),
        ])

        with pytest.raises(ModelCallError):
            session.ask("first")

        assert session.state == SessionState.IDLE
        assert session.ask("second").answer == "Back again."

    def test_ask_while_busy(self, retriever):
        """Test that one session answers one question at a time."""
        from usf_coursechat.shared.schemas import SessionState

        session, model = self._session(retriever, [text_reply("ok")])
        session.state = SessionState.AWAITING_MODEL

        with pytest.raises(RuntimeError):
            session.ask("hi")

        assert model.calls == []

    def test_reset(self, retriever):
        """Test that reset keeps only the system prompt."""
        from usf_coursechat.rag.prompts import SYSTEM_PROMPT

        session, _ = self._session(retriever, [text_reply("ok")])
        session.ask("hi")

        session.reset()

        assert len(session.history) == 1
        assert session.history[0].content == SYSTEM_PROMPT

    def test_history_is_a_copy(self, retriever):
        """Test that callers cannot mutate the session's history."""
        session, _ = self._session(retriever, [])

        session.history.clear()

        assert len(session.history) == 1
