"""
CSV Loader Module - Read course rows from a header-bearing CSV export.
======================================================================

Columns are located by exact header name, so column order in the export
does not matter. A row is kept only if every required column exists in the
header and the row is long enough to contain it.
"""

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from usf_coursechat.shared.errors import ConfigurationError, IngestionRowError
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import CourseRecord

logger = get_logger(__name__)


# Header names in the registrar export
COL_SUBJECT = "SUBJ"
COL_NUMBER = "CRSE NUM"
COL_SECTION = "SEC"
COL_TITLE = "Title Short Desc"
COL_FIRST_NAME = "Primary Instructor First Name"
COL_LAST_NAME = "Primary Instructor Last Name"
COL_EMAIL = "Primary Instructor Email"
COL_DAYS = "Meet Days"
COL_BEGIN = "Begin Time"
COL_END = "End Time"
COL_BUILDING = "BLDG"
COL_ROOM = "RM"

REQUIRED_COLUMNS: tuple[str, ...] = (
    COL_SUBJECT,
    COL_NUMBER,
    COL_SECTION,
    COL_TITLE,
    COL_FIRST_NAME,
    COL_LAST_NAME,
    COL_EMAIL,
    COL_DAYS,
    COL_BEGIN,
    COL_END,
    COL_BUILDING,
    COL_ROOM,
)


def normalize_instructor(first: str, last: str) -> str:
    """
    Join first and last name into a single trimmed display name.

    Example:
        >>> normalize_instructor(" Phil ", "Peterson ")
        'Phil Peterson'
        >>> normalize_instructor("", "Staff")
        'Staff'
    """
    return f"{first.strip()} {last.strip()}".strip()


@dataclass
class LoadResult:
    """Outcome of reading a course CSV."""

    records: list[CourseRecord] = field(default_factory=list)
    skipped: int = 0

    @property
    def total_rows(self) -> int:
        return len(self.records) + self.skipped


class CourseCSVReader:
    """
    Reads CourseRecords from CSV text.

    Example:
        >>> reader = CourseCSVReader()
        >>> result = reader.read_file(Path("data/courses.csv"))
        >>> print(len(result.records), result.skipped)
    """

    def __init__(self, required_columns: Sequence[str] = REQUIRED_COLUMNS):
        self.required_columns = tuple(required_columns)

    def read_file(self, path: Path) -> LoadResult:
        """
        Read a CSV file from disk.

        Raises:
            ConfigurationError: If the file does not exist or is unreadable
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Course CSV not found: {path}")

        try:
            # Undecodable bytes become U+FFFD so one stray Latin-1 row cannot abort the load
            with open(path, encoding="utf-8-sig", errors="replace", newline="") as f:
                result = self.read_lines(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read course CSV {path}: {e}") from e

        logger.info(
            f"Read {len(result.records)} courses from {path.name} "
            f"({result.skipped} rows skipped)"
        )
        return result

    def read_lines(self, lines: Iterable[str]) -> LoadResult:
        """Read CSV content from an iterable of lines (header first)."""
        reader = csv.reader(lines)
        result = LoadResult()

        try:
            header = next(reader)
        except StopIteration:
            logger.warning("Course CSV is empty")
            return result

        index = {name: i for i, name in enumerate(header)}

        missing = [col for col in self.required_columns if col not in index]
        if missing:
            logger.warning(f"Course CSV header lacks required columns: {', '.join(missing)}")

        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                result.skipped += 1
                logger.debug(f"Skipping unparseable row near line {reader.line_num}: {e}")
                continue

            if not row:
                continue

            try:
                record = self.parse_row(row, index, reader.line_num)
            except IngestionRowError as e:
                result.skipped += 1
                logger.debug(f"Skipping row: {e}")
                continue

            result.records.append(record)

        return result

    def parse_row(
        self,
        row: Sequence[str],
        index: dict[str, int],
        line_number: int = 0,
    ) -> CourseRecord:
        """
        Build a CourseRecord from one CSV row.

        Raises:
            IngestionRowError: If a required column is absent from the header
                or beyond the end of the row
        """
        for col in self.required_columns:
            pos: Optional[int] = index.get(col)
            if pos is None:
                raise IngestionRowError(line_number, f"missing column '{col}'")
            if pos >= len(row):
                raise IngestionRowError(line_number, f"row too short for column '{col}'")

        def value(col: str) -> str:
            return row[index[col]]

        return CourseRecord(
            subject=value(COL_SUBJECT),
            number=value(COL_NUMBER),
            section=value(COL_SECTION),
            title=value(COL_TITLE),
            instructor=normalize_instructor(value(COL_FIRST_NAME), value(COL_LAST_NAME)),
            email=value(COL_EMAIL),
            days=value(COL_DAYS),
            start_time=value(COL_BEGIN),
            end_time=value(COL_END),
            building=value(COL_BUILDING),
            room=value(COL_ROOM),
        )


def load_courses(path: Path) -> LoadResult:
    """
    Read CourseRecords from a CSV file.

    Convenience function.
    """
    return CourseCSVReader().read_file(path)
