"""
Tools Module - The search_courses tool offered to the model.
============================================================

Defines the single tool definition attached to every model request and the
extraction step that turns a model's raw argument text into validated
SearchArguments.
"""

import json

from pydantic import ValidationError

from usf_coursechat.shared.errors import ToolArgumentError
from usf_coursechat.shared.schemas import SearchArguments, ToolDefinition

SEARCH_TOOL_NAME = "search_courses"

# Tool result when the arguments cannot be parsed
PARSE_ERROR_TEXT = "Error parsing arguments"

# Tool result when retrieval itself fails
SEARCH_ERROR_TEXT = "Error searching courses"


def search_courses_tool() -> ToolDefinition:
    """Build the search_courses tool definition."""
    return ToolDefinition(
        name=SEARCH_TOOL_NAME,
        description=(
            "Search the course database for courses matching the query. Use this "
            "to find courses by instructor, subject, location, topic, or any other "
            "course attribute."
        ),
        parameters={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": (
                        "Search key information for course. Can be an instructor "
                        "name, course subject/department, building/location or any "
                        "relevant keyword."
                    ),
                },
            },
            "required": ["query"],
        },
    )


def parse_search_arguments(raw: str) -> SearchArguments:
    """
    Extract the ``query`` argument from a tool invocation's JSON text.

    Raises:
        ToolArgumentError: If the text is not a JSON object with a string
            ``query`` field
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ToolArgumentError(f"Arguments are not valid JSON: {e}") from e

    try:
        return SearchArguments.model_validate(payload)
    except ValidationError as e:
        raise ToolArgumentError(f"Invalid search_courses arguments: {e}") from e
