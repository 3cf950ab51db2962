"""
Indexing Module - Embeddings, record storage and bulk index building.
=====================================================================

This module handles embedding generation and vector storage:

- embeddings_base: Embedding gateway contract and provider factory
- embeddings_sbert: SBERT (sentence-transformers) local embeddings
- embeddings_gemini: Gemini API embeddings
- embeddings_openai: OpenAI API embeddings
- record_store: ChromaDB wrapper with nearest-neighbor queries
- builder: Batch embedding and insertion of course lines

Provider abstraction allows switching embedding backends without changing
retrieval logic.
"""

from usf_coursechat.indexing.embeddings_base import (
    EmbeddingProvider,
    get_embedding_provider,
)
from usf_coursechat.indexing.record_store import RecordStore, open_record_store
from usf_coursechat.indexing.builder import (
    INDEX_BATCH_SIZE,
    CourseCatalog,
    IndexBuilder,
    IndexBuildResult,
    ensure_index,
)

__all__ = [
    # Base
    "EmbeddingProvider",
    "get_embedding_provider",
    # Record Store
    "RecordStore",
    "open_record_store",
    # Builder
    "INDEX_BATCH_SIZE",
    "CourseCatalog",
    "IndexBuilder",
    "IndexBuildResult",
    "ensure_index",
]
