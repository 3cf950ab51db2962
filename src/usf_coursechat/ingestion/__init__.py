"""
Ingestion Module - Course CSV reading and row validation.
=========================================================

This module turns the registrar's course export into CourseRecords:

- csv_loader: Header-indexed CSV reader, required-column checks and
  instructor-name normalization

Rows that fail validation are skipped, never fatal.
"""

from usf_coursechat.ingestion.csv_loader import (
    REQUIRED_COLUMNS,
    CourseCSVReader,
    LoadResult,
    load_courses,
)

__all__ = [
    "REQUIRED_COLUMNS",
    "CourseCSVReader",
    "LoadResult",
    "load_courses",
]
