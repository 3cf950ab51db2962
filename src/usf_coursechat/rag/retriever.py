"""
Retriever Module - Semantic lookup of course lines.
===================================================

Embeds a free-text query with one gateway call and returns the rendered
course lines of the three nearest stored entries, nearest first.
"""

from typing import Optional

from usf_coursechat.indexing.embeddings_base import EmbeddingProvider, get_embedding_provider
from usf_coursechat.indexing.record_store import RecordStore, open_record_store
from usf_coursechat.shared.logging import get_logger
from usf_coursechat.shared.schemas import NearestHit

logger = get_logger(__name__)

# Results per search
SEARCH_TOP_K = 3


class Retriever:
    """
    Retrieves the stored course lines closest to a query.

    Example:
        >>> retriever = Retriever(store, provider)
        >>> for line in retriever.search("Phil Peterson"):
        ...     print(line)
    """

    def __init__(self, store: RecordStore, embedder: EmbeddingProvider):
        self.store = store
        self.embedder = embedder

    def search_hits(self, query: str) -> list[NearestHit]:
        """
        Retrieve the nearest entries with their distances.

        Raises:
            EmbeddingError: If the query cannot be embedded
            StorageError: If the store query fails
        """
        if not query or not query.strip():
            logger.warning("Empty query provided")
            return []

        embedding = self.embedder.embed_query(query)
        hits = self.store.nearest(embedding, k=SEARCH_TOP_K)

        logger.info(f"Retrieved {len(hits)} courses for query: '{query[:50]}'")
        return hits

    def search(self, query: str) -> list[str]:
        """Retrieve the rendered lines of the nearest entries, nearest first."""
        return [hit.text for hit in self.search_hits(query)]


def create_retriever(
    store: Optional[RecordStore] = None,
    embedder: Optional[EmbeddingProvider] = None,
) -> Retriever:
    """
    Create a retriever over the configured store and embedding provider.

    Convenience function.
    """
    embedder = embedder or get_embedding_provider()
    store = store or open_record_store(dimensions=embedder.dimensions)
    return Retriever(store, embedder)
