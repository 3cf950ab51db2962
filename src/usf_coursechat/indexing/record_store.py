"""
Record Store Module - ChromaDB-backed storage for indexed course lines.
=======================================================================

A single collection keyed by serial id, holding the rendered course line
and its embedding, queryable by vector distance:

- put / put_many: insert IndexedEntries
- nearest: top-k entries by ascending distance
- count / clear: row count and wholesale rebuild

The collection records its embedding dimensionality in its metadata when
it is created; every later open and insert is checked against it.
"""

from pathlib import Path
from typing import Any, Optional, Sequence

import chromadb
from chromadb.config import Settings as ChromaSettings

from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import DimensionMismatchError, StorageError
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import IndexedEntry, NearestHit

logger = get_logger(__name__)

DIMENSIONS_KEY = "dimensions"
DISTANCE_SPACES = ("cosine", "l2", "ip")


# ─────────────────────────────────────────────────────────────────────────────
# Record Store Class
# ─────────────────────────────────────────────────────────────────────────────


class RecordStore:
    """
    ChromaDB wrapper holding (serial id, text, embedding) rows.

    Example:
        >>> store = RecordStore(dimensions=384)
        >>> store.put(1, "SUBJ:CS Number:272 ...", vector)
        >>> for hit in store.nearest(query_vector, k=3):
        ...     print(hit.distance, hit.text)
    """

    def __init__(
        self,
        dimensions: int,
        collection_name: Optional[str] = None,
        persist_directory: Optional[Path] = None,
        distance_space: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        """
        Open (or create) the course collection.

        Args:
            dimensions: Embedding length every row must have
            collection_name: ChromaDB collection name (default from config)
            persist_directory: Directory for persistent storage (default from config)
            distance_space: "cosine", "l2" or "ip" (default from config)
            client: Pre-built ChromaDB client (persist_directory is then unused)

        Raises:
            StorageError: If the store cannot be opened
            DimensionMismatchError: If the existing collection was built with
                a different dimensionality
        """
        settings = get_settings()

        self.dimensions = dimensions
        self.collection_name = collection_name or settings.store.collection_name
        self.persist_directory = Path(persist_directory or settings.resolved_paths.index_dir)
        self.distance_space = (distance_space or settings.store.distance_space).lower()

        if self.distance_space not in DISTANCE_SPACES:
            raise StorageError(
                f"Unknown distance space: {self.distance_space}. "
                f"Valid options: {', '.join(DISTANCE_SPACES)}"
            )

        try:
            if client is None:
                self.persist_directory.mkdir(parents=True, exist_ok=True)
                client = chromadb.PersistentClient(
                    path=str(self.persist_directory),
                    settings=ChromaSettings(
                        anonymized_telemetry=False,
                        allow_reset=True,
                    ),
                )
            self._client = client
            self._collection = self._open_collection()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Cannot open record store {self.collection_name}: {e}") from e

        metadata = self._collection.metadata or {}
        self.distance_space = str(metadata.get("hnsw:space", self.distance_space)).lower()

        stored_dimensions = metadata.get(DIMENSIONS_KEY)
        if stored_dimensions is not None and int(stored_dimensions) != dimensions:
            raise DimensionMismatchError(int(stored_dimensions), dimensions)

        logger.info(
            f"Record store opened: collection={self.collection_name}, "
            f"dims={self.dimensions}, space={self.distance_space}, "
            f"existing_count={self.count()}"
        )

    def _open_collection(self):
        # Older clients list Collection objects, newer ones list names
        existing = {getattr(c, "name", c) for c in self._client.list_collections()}
        if self.collection_name in existing:
            return self._client.get_collection(name=self.collection_name)

        return self._client.create_collection(
            name=self.collection_name,
            metadata={
                "hnsw:space": self.distance_space,
                DIMENSIONS_KEY: self.dimensions,
            },
        )

    def count(self) -> int:
        """Get the number of rows in the collection."""
        try:
            return self._collection.count()
        except Exception as e:
            raise StorageError(f"Cannot count rows in {self.collection_name}: {e}") from e

    def put(self, serial_id: int, text: str, embedding: Sequence[float]) -> None:
        """
        Insert one row.

        Raises:
            DimensionMismatchError: If the embedding has the wrong length
            StorageError: If the insert fails
        """
        self.put_many([IndexedEntry(serial_id=serial_id, text=text, embedding=list(embedding))])

    def put_many(self, entries: Sequence[IndexedEntry]) -> int:
        """
        Insert rows in one call.

        All embeddings are checked before anything is written.

        Returns:
            Number of rows inserted
        """
        if not entries:
            return 0

        for entry in entries:
            if len(entry.embedding) != self.dimensions:
                raise DimensionMismatchError(self.dimensions, len(entry.embedding))

        try:
            self._collection.add(
                ids=[str(entry.serial_id) for entry in entries],
                embeddings=[entry.embedding for entry in entries],
                documents=[entry.text for entry in entries],
                metadatas=[{"serial_id": entry.serial_id} for entry in entries],
            )
        except Exception as e:
            raise StorageError(f"Insert into {self.collection_name} failed: {e}") from e

        logger.debug(
            f"Inserted rows {entries[0].serial_id}..{entries[-1].serial_id} "
            f"into {self.collection_name}"
        )
        return len(entries)

    def nearest(self, query_embedding: Sequence[float], k: int) -> list[NearestHit]:
        """
        Find the k rows closest to a query embedding.

        Args:
            query_embedding: Query vector (store dimensionality)
            k: Maximum number of rows; capped by the row count

        Returns:
            Hits ordered by ascending distance, ties by serial id
        """
        if len(query_embedding) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(query_embedding))

        n_results = min(k, self.count())
        if n_results <= 0:
            return []

        try:
            results = self._collection.query(
                query_embeddings=[list(query_embedding)],
                n_results=n_results,
                include=["documents", "metadatas", "distances"],
            )
        except Exception as e:
            raise StorageError(f"Query on {self.collection_name} failed: {e}") from e

        return self._results_to_hits(results)

    def clear(self) -> None:
        """Drop every row by recreating the collection."""
        try:
            self._client.delete_collection(self.collection_name)
            self._collection = self._open_collection()
        except Exception as e:
            raise StorageError(f"Cannot clear {self.collection_name}: {e}") from e
        logger.info(f"Cleared collection: {self.collection_name}")

    def _results_to_hits(self, results: dict) -> list[NearestHit]:
        """Convert ChromaDB query results to NearestHits."""
        if not results or not results.get("ids") or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = (results.get("documents") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits = []
        for i, row_id in enumerate(ids):
            metadata = metadatas[i] if metadatas else None
            serial_id = int((metadata or {}).get("serial_id", row_id))

            hits.append(
                NearestHit(
                    serial_id=serial_id,
                    text=documents[i] if documents else "",
                    distance=float(distances[i]) if distances else 0.0,
                )
            )

        hits.sort(key=lambda h: (h.distance, h.serial_id))
        return hits

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the record store."""
        return {
            "collection_name": self.collection_name,
            "total_rows": self.count(),
            "dimensions": self.dimensions,
            "distance_space": self.distance_space,
            "persist_directory": str(self.persist_directory),
        }


# ─────────────────────────────────────────────────────────────────────────────
# Factory Function
# ─────────────────────────────────────────────────────────────────────────────


def open_record_store(
    dimensions: int,
    collection_name: Optional[str] = None,
    persist_directory: Optional[Path] = None,
) -> RecordStore:
    """
    Open the configured record store for embeddings of a given length.

    Convenience function.
    """
    return RecordStore(
        dimensions=dimensions,
        collection_name=collection_name,
        persist_directory=persist_directory,
    )
