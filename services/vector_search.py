# services/vector_search.py
"""Backend-agnostic nearest-neighbour search"""
import asyncio
import logging
from typing import List

from config import settings
from core.domain import ProviderTransientError, ProviderUnavailableError, VectorCandidate
from core.interfaces import IVectorBackend

logger = logging.getLogger(settings.LOGGER_NAME)


class VectorSearchOrchestrator:
    """
    Wraps whichever backend was selected at startup.

    Adds the availability check, a timeout and the non-increasing score ordering
    so callers never depend on backend specifics.
    """

    def __init__(self, backend: IVectorBackend, timeout: float = settings.VECTOR_SEARCH_TIMEOUT_SEC):
        self.backend = backend
        self.timeout = timeout

    @property
    def backend_name(self) -> str:
        return self.backend.name

    def is_available(self) -> bool:
        return self.backend.is_available()

    async def search(self, embedding: List[float], limit: int) -> List[VectorCandidate]:
        if not self.backend.is_available():
            raise ProviderUnavailableError(f"Vector backend '{self.backend.name}' is not available")
        if limit <= 0 or not embedding:
            return []

        try:
            candidates = await asyncio.wait_for(self.backend.search(embedding, limit), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Vector backend '{self.backend.name}' timed out after {self.timeout}s")
            raise ProviderTransientError(f"Vector search timed out after {self.timeout}s") from e

        ordered = sorted(candidates, key=lambda c: c.similarity_score, reverse=True)
        return ordered[:limit]
