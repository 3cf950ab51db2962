"""
Embeddings Base Module - Abstract interface for embedding providers.
===================================================================

Defines the embedding gateway contract shared by all providers:
``embed()`` accepts one string or an ordered batch and returns one vector
per input, in input order, every vector of the provider's fixed length.
Any backend failure, and empty input, raises EmbeddingError.

Nothing is cached: every call is a fresh backend computation, so callers
should batch.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import ConfigurationError, EmbeddingError
from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Abstract Base Class
# ─────────────────────────────────────────────────────────────────────────────


class EmbeddingProvider(ABC):
    """
    Abstract base class for embedding providers.

    Implementations must provide:
    - _embed_documents(): Embed a non-empty batch, preserving order

    and may override:
    - _embed_query(): Embed a search query (defaults to a one-item batch)

    Properties:
    - model_name: Name of the embedding model
    - dimensions: Embedding vector dimensions
    - provider_name: Provider identifier (sbert, gemini, openai)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name being used."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding vector dimensions."""

    @abstractmethod
    def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a non-empty batch of texts, one vector per text, in order."""

    def _embed_query(self, query: str) -> list[float]:
        """Embed a search query. Providers with query-specific modes override this."""
        return self._embed_documents([query])[0]

    def embed(self, texts: Union[str, Sequence[str]]) -> list[list[float]]:
        """
        Embed one text or an ordered batch of texts.

        Args:
            texts: A single string or a sequence of strings

        Returns:
            One vector per input, positionally aligned with the input

        Raises:
            EmbeddingError: On empty input, backend failure, or a response
                that does not line up with the input
        """
        batch = [texts] if isinstance(texts, str) else list(texts)
        if not batch:
            raise EmbeddingError("Cannot embed empty input")

        try:
            vectors = self._embed_documents(batch)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"{self.provider_name} embedding failed: {e}") from e

        self._check_vectors(vectors, expected_count=len(batch))
        return vectors

    def embed_text(self, text: str) -> list[float]:
        """Embed a single text string."""
        return self.embed(text)[0]

    def embed_query(self, query: str) -> list[float]:
        """
        Embed a query text with a single backend call.

        Raises:
            EmbeddingError: On empty query or backend failure
        """
        if not query:
            raise EmbeddingError("Cannot embed empty query")

        try:
            vector = self._embed_query(query)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"{self.provider_name} query embedding failed: {e}") from e

        self._check_vectors([vector], expected_count=1)
        return vector

    def _check_vectors(self, vectors: list[list[float]], expected_count: int) -> None:
        if len(vectors) != expected_count:
            raise EmbeddingError(
                f"{self.provider_name} returned {len(vectors)} vectors "
                f"for {expected_count} inputs"
            )
        for vector in vectors:
            if len(vector) != self.dimensions:
                raise EmbeddingError(
                    f"{self.provider_name} returned a {len(vector)}-dimensional vector, "
                    f"expected {self.dimensions}"
                )

    def get_info(self) -> dict:
        """
        Get provider information.

        Returns:
            Dictionary with provider details
        """
        return {
            "provider": self.provider_name,
            "model": self.model_name,
            "dimensions": self.dimensions,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Provider Factory
# ─────────────────────────────────────────────────────────────────────────────


_provider_cache: dict[str, EmbeddingProvider] = {}

EMBEDDING_PROVIDERS = ("sbert", "gemini", "openai")


def get_embedding_provider(
    provider_name: Optional[str] = None,
    use_cache: bool = True,
) -> EmbeddingProvider:
    """
    Get an embedding provider instance.

    Args:
        provider_name: "sbert", "gemini" or "openai". If None, uses config.
        use_cache: Whether to cache and reuse provider instances

    Returns:
        EmbeddingProvider instance

    Raises:
        ConfigurationError: If the provider name is unknown or the provider
            is missing its credentials

    Example:
        >>> provider = get_embedding_provider("sbert")
        >>> vectors = provider.embed(["CS 272", "PHIL 240"])
    """
    if provider_name is None:
        provider_name = get_settings().get_effective_embedding_provider()

    provider_name = provider_name.lower().strip()

    if use_cache and provider_name in _provider_cache:
        return _provider_cache[provider_name]

    provider: EmbeddingProvider

    if provider_name == "sbert":
        from usf_coursechat.indexing.embeddings_sbert import SBERTEmbeddingProvider
        provider = SBERTEmbeddingProvider()

    elif provider_name == "gemini":
        from usf_coursechat.indexing.embeddings_gemini import GeminiEmbeddingProvider
        provider = GeminiEmbeddingProvider()

    elif provider_name == "openai":
        from usf_coursechat.indexing.embeddings_openai import OpenAIEmbeddingProvider
        provider = OpenAIEmbeddingProvider()

    else:
        raise ConfigurationError(
            f"Unknown embedding provider: {provider_name}. "
            f"Valid options: {', '.join(EMBEDDING_PROVIDERS)}"
        )

    if use_cache:
        _provider_cache[provider_name] = provider

    logger.info(
        f"Initialized embedding provider: {provider.provider_name} "
        f"(model={provider.model_name}, dims={provider.dimensions})"
    )

    return provider


def clear_provider_cache() -> None:
    """Clear the provider cache."""
    _provider_cache.clear()
