# infrastructure/embedding_services.py
"""Query embedding providers"""
import asyncio
import logging
import random
from typing import List, Optional

import numpy as np
import openai
from openai import AsyncOpenAI
from sentence_transformers import SentenceTransformer

from core.domain import ProviderTransientError, ProviderUnavailableError
from core.interfaces import IEmbeddingProvider
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)

# Errors worth another attempt; anything else propagates immediately
RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """
    OpenAI embeddings endpoint with bounded exponential backoff.

    After max_retries failed attempts the last error is surfaced as
    ProviderTransientError; rate limits never loop forever.
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = settings.OPENAI_API_KEY,
        model: str = settings.EMBEDDING_MODEL_NAME,
        dimensions: Optional[int] = settings.EMBEDDING_DIMENSIONS,
        timeout: float = settings.EMBEDDING_TIMEOUT_SEC,
        max_retries: int = settings.EMBEDDING_MAX_RETRIES,
        base_delay: float = settings.EMBEDDING_RETRY_BASE_DELAY_SEC,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.dimensions = dimensions
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self._api_key = api_key
        # SDK-level retries are disabled; backoff is handled here
        self._client = client
        if self._client is None and api_key:
            self._client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def is_available(self) -> bool:
        return self._client is not None

    async def embed(self, text: str) -> List[float]:
        if not self.is_available():
            raise ProviderUnavailableError("OpenAI API key is not configured")

        kwargs = {"model": self.model, "input": text}
        if self.dimensions:
            kwargs["dimensions"] = self.dimensions

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.wait_for(
                    self._client.embeddings.create(**kwargs),
                    timeout=self.timeout
                )
                return list(response.data[0].embedding)
            except (asyncio.TimeoutError, *RETRYABLE_ERRORS) as e:
                if attempt >= self.max_retries - 1:
                    raise ProviderTransientError(
                        f"Embedding failed after {self.max_retries} attempts: {type(e).__name__}"
                    ) from e
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"Embedding attempt {attempt + 1}/{self.max_retries} failed "
                    f"({type(e).__name__}); retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
        raise RuntimeError("unreachable")

    def _backoff_delay(self, attempt: int) -> float:
        # Exponential backoff with jitter
        if self.base_delay <= 0:
            return 0.0
        return min(self.base_delay * (2 ** attempt), 30.0) + random.random() * self.base_delay


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """
    Local sentence-transformers model with L2 normalization (unit vectors).

    The model must match the one used to embed the stored pages, otherwise
    similarities are meaningless.
    """

    name = "sentence-transformers"
    _model: Optional[SentenceTransformer] = None  # Singleton cache

    def __init__(self, model_name: str = settings.LOCAL_EMBEDDING_MODEL_NAME):
        """Initializes the service, loading the heavy model only once."""
        self.model_name = model_name

        if SentenceTransformerEmbedding._model is None:
            try:
                logger.info(f"Attempting to load model {model_name} from local cache...")
                SentenceTransformerEmbedding._model = SentenceTransformer(
                    model_name,
                    local_files_only=True
                )
                logger.info(f"Successfully loaded {model_name} from local cache.")

            except OSError as e:
                logger.warning(
                    f"Model {model_name} not found in cache. Attempting online download. "
                    f"This may take a few minutes. Error: {e}"
                )
                SentenceTransformerEmbedding._model = SentenceTransformer(model_name)
                logger.info(f"Successfully downloaded and loaded {model_name}.")

        self.model = SentenceTransformerEmbedding._model

    def is_available(self) -> bool:
        return self.model is not None

    @staticmethod
    def _l2_normalize(arr: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(arr, axis=1, keepdims=True)
        norms[norms == 0] = 1e-12  # Avoid division by zero
        return arr / norms

    async def embed(self, text: str) -> List[float]:
        raw = await asyncio.to_thread(
            self.model.encode,
            text,
            convert_to_tensor=False
        )
        normalized = self._l2_normalize(
            np.array(raw, dtype="float32").reshape(1, -1)
        )
        return normalized[0].tolist()


class NullEmbeddingProvider(IEmbeddingProvider):
    """Placeholder when no provider is configured; topic search reports 503."""

    name = "none"

    def is_available(self) -> bool:
        return False

    async def embed(self, text: str) -> List[float]:
        raise ProviderUnavailableError("No embedding provider is configured")
