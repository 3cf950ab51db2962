"""
Utilities Module - Common helper functions.
"""

import json
from pathlib import Path
from typing import Any, Iterator, Sequence, TypeVar

from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """
    Yield consecutive slices of ``items`` of at most ``size`` elements.

    Example:
        >>> [list(b) for b in batched([1, 2, 3, 4, 5], 2)]
        [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")

    for start in range(0, len(items), size):
        yield items[start : start + size]


def save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    Save data to a JSON file, creating parent directories.

    Args:
        file_path: Path to JSON file
        data: Data to save (must be JSON serializable)
        indent: Indentation level (default: 2)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False, default=str)

    logger.debug(f"Saved JSON to {file_path}")
