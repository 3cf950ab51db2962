"""
Errors Module - Exception taxonomy.
===================================

Every failure the core can surface is one of these. Adapters around
chromadb, google-genai, openai and sentence-transformers re-raise backend
exceptions as the matching class here (chained with ``from``).

Fatal at startup: ConfigurationError, StorageError.
Fatal during index build, returned during retrieval: EmbeddingError.
Recovered locally: IngestionRowError (row skipped), ToolArgumentError
(fixed tool result text).
Surfaced to the caller: ModelCallError.
"""


class CourseChatError(Exception):
    """Base class for all application errors."""


class ConfigurationError(CourseChatError):
    """A required credential or configuration value is missing or invalid."""


class StorageError(CourseChatError):
    """The record store cannot be opened, written, or queried."""


class DimensionMismatchError(StorageError):
    """An embedding's length differs from the store's fixed dimensionality."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimension mismatch: store expects {expected}, got {actual}"
        )


class IngestionRowError(CourseChatError):
    """A tabular row is missing a required column."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Row {line_number}: {reason}")


class EmbeddingError(CourseChatError):
    """The embedding backend failed or was called with empty input."""


class ToolArgumentError(CourseChatError):
    """A tool invocation carried malformed arguments."""


class ModelCallError(CourseChatError):
    """The language-model backend failed."""


class EvaluationError(CourseChatError):
    """The judge model returned something other than a score."""
