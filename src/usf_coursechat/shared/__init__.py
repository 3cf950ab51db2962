"""
Shared Module - Common configuration, schemas, errors, and logging.
===================================================================

This module provides foundational components used across all other modules:

- config: Configuration loading and management
- logging: Rich console logging setup
- schemas: Pydantic data models
- errors: Exception taxonomy
- utils: Small helpers (batching, JSON output)
"""

from usf_coursechat.shared.config import get_settings, reload_settings, Settings
from usf_coursechat.shared.errors import (
    CourseChatError,
    ConfigurationError,
    StorageError,
    DimensionMismatchError,
    IngestionRowError,
    EmbeddingError,
    ToolArgumentError,
    ModelCallError,
    EvaluationError,
)
from usf_coursechat.shared.logging import get_console, get_logger, setup_logging
from usf_coursechat.shared.schemas import (
    CourseRecord,
    IndexedEntry,
    NearestHit,
    DialogueTurn,
    ToolInvocation,
    ToolDefinition,
    Role,
)
from usf_coursechat.shared.utils import batched, save_json

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    "Settings",
    # Errors
    "CourseChatError",
    "ConfigurationError",
    "StorageError",
    "DimensionMismatchError",
    "IngestionRowError",
    "EmbeddingError",
    "ToolArgumentError",
    "ModelCallError",
    "EvaluationError",
    # Logging
    "get_console",
    "get_logger",
    "setup_logging",
    # Schemas
    "CourseRecord",
    "IndexedEntry",
    "NearestHit",
    "DialogueTurn",
    "ToolInvocation",
    "ToolDefinition",
    "Role",
    # Utils
    "batched",
    "save_json",
]
