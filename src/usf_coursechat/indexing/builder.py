"""
Index Builder Module - Bulk-load course lines into the record store.
====================================================================

Turns CourseRecords into IndexedEntries:
1. Render each record as its labeled text line
2. Partition the lines into batches of 100
3. Embed each batch with one gateway call
4. Insert the batch with serial ids counting up from 1

The builder assumes an empty store and never deduplicates; ``ensure_index``
is the guard that only builds when the store has no rows. Batches run
sequentially and any EmbeddingError aborts the build.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from tqdm import tqdm

from usf_coursechat.indexing.embeddings_base import EmbeddingProvider
from usf_coursechat.indexing.record_store import RecordStore
from usf_coursechat.ingestion.csv_loader import CourseCSVReader
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import CourseRecord, IndexedEntry
from usf_coursechat.shared.utils import batched

logger = get_logger(__name__)

# Lines per embedding call
INDEX_BATCH_SIZE = 100


# ─────────────────────────────────────────────────────────────────────────────
# Derived Catalog
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class CourseCatalog:
    """Structured lookups built alongside the semantic index."""

    by_instructor: dict[str, list[CourseRecord]] = field(default_factory=dict)
    by_subject: dict[str, list[CourseRecord]] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Sequence[CourseRecord]) -> "CourseCatalog":
        by_instructor: dict[str, list[CourseRecord]] = defaultdict(list)
        by_subject: dict[str, list[CourseRecord]] = defaultdict(list)

        for record in records:
            by_instructor[record.instructor].append(record)
            by_subject[record.subject].append(record)

        return cls(by_instructor=dict(by_instructor), by_subject=dict(by_subject))

    def subject_counts(self) -> dict[str, int]:
        """Number of sections per subject, largest first."""
        counts = {subject: len(courses) for subject, courses in self.by_subject.items()}
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


@dataclass
class IndexBuildResult:
    """Outcome of one index build."""

    inserted: int = 0
    batches: int = 0
    skipped_rows: int = 0
    catalog: CourseCatalog = field(default_factory=CourseCatalog)


# ─────────────────────────────────────────────────────────────────────────────
# Builder
# ─────────────────────────────────────────────────────────────────────────────


class IndexBuilder:
    """
    Embeds and stores course records.

    Example:
        >>> builder = IndexBuilder(store, provider)
        >>> result = builder.build_from_csv(Path("data/courses.csv"))
        >>> print(result.inserted)
    """

    def __init__(self, store: RecordStore, embedder: EmbeddingProvider):
        self.store = store
        self.embedder = embedder

    def build(
        self,
        records: Sequence[CourseRecord],
        show_progress: bool = False,
    ) -> IndexBuildResult:
        """
        Embed and insert records.

        Raises:
            EmbeddingError: If any batch fails to embed
            StorageError: If any insert fails
        """
        lines = [record.render() for record in records]
        total = len(lines)
        result = IndexBuildResult(catalog=CourseCatalog.from_records(records))

        logger.info(f"Loading {total} courses into the record store...")

        batches = batched(lines, INDEX_BATCH_SIZE)
        if show_progress:
            batches = tqdm(
                batches,
                total=-(-total // INDEX_BATCH_SIZE),
                desc="Embedding courses",
            )

        serial_id = 1
        for batch in batches:
            vectors = self.embedder.embed(list(batch))

            entries = []
            for line, vector in zip(batch, vectors):
                entries.append(IndexedEntry(serial_id=serial_id, text=line, embedding=vector))
                serial_id += 1

            result.inserted += self.store.put_many(entries)
            result.batches += 1
            logger.info(f"Progress: {result.inserted}/{total} courses loaded")

        logger.info(f"Record store loaded with {result.inserted} courses")
        return result

    def build_from_csv(self, csv_path: Path, show_progress: bool = False) -> IndexBuildResult:
        """Read a course CSV and build the index from its valid rows."""
        loaded = CourseCSVReader().read_file(csv_path)
        result = self.build(loaded.records, show_progress=show_progress)
        result.skipped_rows = loaded.skipped
        return result


def ensure_index(
    store: RecordStore,
    embedder: EmbeddingProvider,
    csv_path: Path,
    show_progress: bool = False,
) -> Optional[IndexBuildResult]:
    """
    Build the index only if the store is empty.

    Returns:
        The build result, or None if the store already had rows
    """
    existing = store.count()
    if existing > 0:
        logger.info(f"Record store already loaded with {existing} courses")
        return None

    logger.info("Record store is empty, loading courses...")
    return IndexBuilder(store, embedder).build_from_csv(csv_path, show_progress=show_progress)
