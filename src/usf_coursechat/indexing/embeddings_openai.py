"""
OpenAI Embeddings Module - OpenAI embeddings API.
================================================

Embeddings via the OpenAI API (text-embedding-3-large, 3072 dimensions by
default). Requires OPENAI_API_KEY (OPENAI_PROJECT_KEY is accepted too).
"""

from typing import Optional

from openai import OpenAI

from usf_coursechat.indexing.embeddings_base import EmbeddingProvider
from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import ConfigurationError
from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)


OPENAI_MODEL_DIMENSIONS = {
    "text-embedding-3-large": 3072,
    "text-embedding-3-small": 1536,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """
    OpenAI embedding provider.

    Example:
        >>> provider = OpenAIEmbeddingProvider()
        >>> vector = provider.embed_query("Phil Peterson")
        >>> print(len(vector))  # 3072
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        dimensions: Optional[int] = None,
    ):
        settings = get_settings()
        openai_config = settings.embeddings.openai

        self._model_name = model_name or openai_config.model_name
        self._api_key = api_key or settings.openai_api_key
        self._dimensions = dimensions or OPENAI_MODEL_DIMENSIONS.get(
            self._model_name,
            openai_config.dimensions,
        )

        if not self._api_key:
            raise ConfigurationError(
                "OpenAI API key is required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: Optional[OpenAI] = None

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def client(self) -> OpenAI:
        """Lazy load and return the OpenAI client."""
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        kwargs = {}
        # Only the v3 models accept a custom output size
        if self._model_name.startswith("text-embedding-3"):
            kwargs["dimensions"] = self._dimensions

        response = self.client.embeddings.create(
            model=self._model_name,
            input=texts,
            **kwargs,
        )

        data = sorted(response.data, key=lambda item: item.index)
        logger.debug(
            f"Generated {len(data)} embeddings ({self._model_name}), "
            f"usage: {response.usage.total_tokens} tokens"
        )
        return [list(item.embedding) for item in data]
