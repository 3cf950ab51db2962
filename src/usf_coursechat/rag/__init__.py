"""
RAG Module - Retrieval and the tool-calling dialogue.
=====================================================

This module implements the question-answering loop:

- retriever: Query embedding and nearest course lookup (k = 3)
- tools: The search_courses tool definition and argument extraction
- prompts: System prompt, fallback text and judge rubric
- chat_base: Language-model backend contract and factory
- chat_gemini / chat_openai: Gemini and OpenAI backends
- dialogue: ChatSession, the one-pass tool-calling state machine

RAG Flow:
    Question → Model → search_courses → Retriever → Model → Answer
"""

from usf_coursechat.rag.retriever import SEARCH_TOP_K, Retriever, create_retriever
from usf_coursechat.rag.tools import (
    PARSE_ERROR_TEXT,
    SEARCH_TOOL_NAME,
    parse_search_arguments,
    search_courses_tool,
)
from usf_coursechat.rag.prompts import FALLBACK_ANSWER, SYSTEM_PROMPT
from usf_coursechat.rag.chat_base import ChatModel, get_chat_model
from usf_coursechat.rag.dialogue import ChatSession, create_session

__all__ = [
    # Retriever
    "SEARCH_TOP_K",
    "Retriever",
    "create_retriever",
    # Tools
    "PARSE_ERROR_TEXT",
    "SEARCH_TOOL_NAME",
    "parse_search_arguments",
    "search_courses_tool",
    # Prompts
    "FALLBACK_ANSWER",
    "SYSTEM_PROMPT",
    # Chat models
    "ChatModel",
    "get_chat_model",
    # Dialogue
    "ChatSession",
    "create_session",
]
