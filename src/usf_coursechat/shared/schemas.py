"""
Schemas Module - Pydantic data models for the application.
==========================================================

Defines all data contracts used across the application:
- Course records and their indexed form
- Retrieval hits
- Dialogue turns, tool invocations and tool definitions
- Model replies and chat answers
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictStr


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class Role(str, Enum):
    """Dialogue turn roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class SessionState(str, Enum):
    """States of a chat session while it answers one question."""

    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    AWAITING_FINAL = "awaiting_final"


# ─────────────────────────────────────────────────────────────────────────────
# Course Data Models
# ─────────────────────────────────────────────────────────────────────────────


class CourseRecord(BaseModel):
    """
    One row of the course catalog.

    Immutable once ingested. The instructor name is already normalized to
    ``first + " " + last`` (trimmed); every other field is kept verbatim.
    """

    subject: str = Field(..., description="Subject code (e.g., 'CS')")
    number: str = Field(..., description="Course number (e.g., '272')")
    section: str = Field(..., description="Section (e.g., '01')")
    title: str = Field(..., description="Short title")
    instructor: str = Field(..., description="Instructor full name")
    email: str = Field(..., description="Instructor email")
    days: str = Field(..., description="Meeting days (e.g., 'MWF')")
    start_time: str = Field(..., description="Begin time")
    end_time: str = Field(..., description="End time")
    building: str = Field(..., description="Building code")
    room: str = Field(..., description="Room number")

    model_config = {"frozen": True}

    def render(self) -> str:
        """
        Render the labeled plain-text line that gets embedded and stored.

        The output is a pure function of the field values.
        """
        return (
            f"SUBJ:{self.subject} Number:{self.number} Section:{self.section} "
            f"Title:{self.title} Instructor:{self.instructor} Email:{self.email} "
            f"Days:{self.days} Time:{self.start_time}-{self.end_time} "
            f"Building:{self.building} Room:{self.room}"
        )


class IndexedEntry(BaseModel):
    """A persisted unit of the record store."""

    serial_id: int = Field(..., ge=1, description="Serial id assigned at build time")
    text: str = Field(..., description="Rendered course line")
    embedding: list[float] = Field(..., description="Embedding vector")


class NearestHit(BaseModel):
    """A stored entry returned by a nearest-neighbor query."""

    serial_id: int = Field(..., description="Serial id of the stored entry")
    text: str = Field(..., description="Rendered course line")
    distance: float = Field(..., description="Vector distance to the query (lower is closer)")


# ─────────────────────────────────────────────────────────────────────────────
# Dialogue Models
# ─────────────────────────────────────────────────────────────────────────────


class ToolInvocation(BaseModel):
    """
    A tool call requested by the model.

    ``arguments`` is the raw JSON text the model produced. It is parsed and
    validated only when the tool is executed.
    """

    id: str = Field(..., description="Correlation id for the tool result")
    name: str = Field(..., description="Tool name")
    arguments: str = Field(default="", description="Raw JSON argument object")


class DialogueTurn(BaseModel):
    """One role-tagged message in a conversation."""

    role: Role
    content: str = ""
    tool_invocations: list[ToolInvocation] = Field(default_factory=list)
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "DialogueTurn":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "DialogueTurn":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls,
        content: str,
        tool_invocations: Optional[list[ToolInvocation]] = None,
    ) -> "DialogueTurn":
        return cls(
            role=Role.ASSISTANT,
            content=content,
            tool_invocations=list(tool_invocations or []),
        )

    @classmethod
    def tool_result(cls, invocation: ToolInvocation, content: str) -> "DialogueTurn":
        return cls(
            role=Role.TOOL,
            content=content,
            tool_call_id=invocation.id,
            name=invocation.name,
        )


class ToolDefinition(BaseModel):
    """A tool offered to the model, with a JSON-schema parameter spec."""

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class SearchArguments(BaseModel):
    """Validated arguments of the ``search_courses`` tool."""

    query: StrictStr


# ─────────────────────────────────────────────────────────────────────────────
# Model Responses
# ─────────────────────────────────────────────────────────────────────────────


class ModelReply(BaseModel):
    """An assistant turn produced by one model round-trip."""

    turn: DialogueTurn
    total_tokens: int = 0


class CompletionResult(BaseModel):
    """Result of a single-shot completion (no dialogue, no tools)."""

    text: str
    total_tokens: int = 0


class ChatAnswer(BaseModel):
    """
    Answer to one user question.

    This is the main response model returned by a chat session.
    """

    question: str = Field(..., description="Original question")
    answer: str = Field(..., description="Final answer text")
    model_calls: int = Field(default=0, description="Model round-trips performed")
    tool_queries: list[str] = Field(
        default_factory=list, description="Queries passed to search_courses"
    )
    total_tokens: int = Field(default=0, description="Tokens used across round-trips")
    used_fallback: bool = Field(
        default=False, description="Whether the blank-answer fallback was substituted"
    )
