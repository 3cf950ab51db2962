"""
Gemini Embeddings Module - Google GenAI embeddings API.
=======================================================

Embeddings via Google's Gemini API. Requires a GEMINI_API_KEY from
Google AI Studio.

Available models:
- text-embedding-004: 768 dimensions (default)
- gemini-embedding-001: 3072 dimensions
"""

from typing import Optional

from google import genai

from usf_coursechat.indexing.embeddings_base import EmbeddingProvider
from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.errors import ConfigurationError, EmbeddingError
from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)


# Model dimension mapping
GEMINI_MODEL_DIMENSIONS = {
    "text-embedding-004": 768,
    "gemini-embedding-001": 3072,
}


class GeminiEmbeddingProvider(EmbeddingProvider):
    """
    Gemini embedding provider using the Google GenAI SDK.

    Documents are embedded with the configured task type
    (RETRIEVAL_DOCUMENT); queries with RETRIEVAL_QUERY.

    Example:
        >>> provider = GeminiEmbeddingProvider()
        >>> vectors = provider.embed(["SUBJ:CS Number:272 ..."])
        >>> print(len(vectors[0]))  # 768
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        task_type: Optional[str] = None,
    ):
        """
        Initialize the Gemini provider.

        Args:
            model_name: Embedding model name
            api_key: Gemini API key (defaults to GEMINI_API_KEY env var)
            task_type: Task type for document embeddings

        Raises:
            ConfigurationError: If no API key is available
        """
        settings = get_settings()
        gemini_config = settings.embeddings.gemini

        self._model_name = model_name or gemini_config.model_name
        self._api_key = api_key or settings.gemini_api_key
        self._task_type = task_type or gemini_config.task_type
        self._dimensions = GEMINI_MODEL_DIMENSIONS.get(
            self._model_name,
            gemini_config.dimensions,
        )

        if not self._api_key:
            raise ConfigurationError(
                "Gemini API key is required. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        # Initialize client lazily
        self._client: Optional[genai.Client] = None

        logger.debug(
            f"Gemini provider configured: model={self._model_name}, "
            f"task_type={self._task_type}"
        )

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def client(self) -> genai.Client:
        """Lazy load and return the Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
            logger.info(f"Gemini client initialized for model: {self._model_name}")
        return self._client

    def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        return self._embed_content(texts, self._task_type)

    def _embed_query(self, query: str) -> list[float]:
        return self._embed_content([query], "RETRIEVAL_QUERY")[0]

    def _embed_content(self, texts: list[str], task_type: str) -> list[list[float]]:
        response = self.client.models.embed_content(
            model=self._model_name,
            contents=texts,
            config={"task_type": task_type},
        )

        if not response.embeddings:
            raise EmbeddingError("Gemini returned no embeddings")

        return [list(embedding.values or []) for embedding in response.embeddings]

    def get_info(self) -> dict:
        info = super().get_info()
        info["task_type"] = self._task_type
        info["api_key_set"] = bool(self._api_key)
        return info
