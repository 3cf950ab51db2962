"""
SBERT Embeddings Module - Local embeddings via sentence-transformers.
====================================================================

Free, local embeddings using pre-trained SBERT models.
No API key required - runs entirely on local hardware.

Recommended models:
- all-MiniLM-L6-v2: Fast, 384 dimensions (default)
- all-mpnet-base-v2: Better quality, 768 dimensions
- multi-qa-MiniLM-L6-cos-v1: Optimized for Q&A
"""

from typing import Optional

from usf_coursechat.indexing.embeddings_base import EmbeddingProvider
from usf_coursechat.shared.config import get_settings
from usf_coursechat.shared.logging import get_logger

logger = get_logger(__name__)


# Model dimension mapping for common models
MODEL_DIMENSIONS = {
    "all-MiniLM-L6-v2": 384,
    "all-MiniLM-L12-v2": 384,
    "all-mpnet-base-v2": 768,
    "multi-qa-MiniLM-L6-cos-v1": 384,
    "multi-qa-mpnet-base-cos-v1": 768,
}


class SBERTEmbeddingProvider(EmbeddingProvider):
    """
    SBERT embedding provider using sentence-transformers.

    The model is loaded on first use. Vectors are L2-normalized.

    Example:
        >>> provider = SBERTEmbeddingProvider()
        >>> vectors = provider.embed(["Software Development", "Ethics"])
        >>> print(len(vectors[0]))  # 384 for default model
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        device: Optional[str] = None,
        batch_size: int = 32,
    ):
        """
        Initialize the SBERT provider.

        Args:
            model_name: Model name from Hugging Face (default from config)
            device: Device to use ("cpu", "cuda", "auto")
            batch_size: Encoder batch size
        """
        settings = get_settings()
        sbert_config = settings.embeddings.sbert

        self._model_name = model_name or sbert_config.model_name
        self._device = device or sbert_config.device
        self._batch_size = batch_size

        self._dimensions = MODEL_DIMENSIONS.get(
            self._model_name,
            sbert_config.dimensions,
        )

        self._model = None

        logger.debug(
            f"SBERT provider configured: model={self._model_name}, "
            f"device={self._device}"
        )

    @property
    def provider_name(self) -> str:
        return "sbert"

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model(self):
        """Lazy load and return the sentence transformer model."""
        if self._model is None:
            self._load_model()
        return self._model

    def _load_model(self) -> None:
        from sentence_transformers import SentenceTransformer

        logger.info(f"Loading SBERT model: {self._model_name}")

        device = self._device
        if device == "auto":
            import torch
            device = "cuda" if torch.cuda.is_available() else "cpu"

        self._model = SentenceTransformer(self._model_name, device=device)
        self._dimensions = self._model.get_sentence_embedding_dimension()

        logger.info(
            f"SBERT model loaded: {self._model_name} "
            f"(dims={self._dimensions}, device={device})"
        )

    def _embed_documents(self, texts: list[str]) -> list[list[float]]:
        embeddings = self.model.encode(
            texts,
            batch_size=self._batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return [emb.tolist() for emb in embeddings]

    def get_info(self) -> dict:
        info = super().get_info()
        info["device"] = self._device
        if self._model is not None:
            info["device_actual"] = str(self._model.device)
        return info
