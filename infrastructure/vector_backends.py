# infrastructure/vector_backends.py
"""Nearest-neighbour backends that scan page embeddings from the page store"""
import asyncio
import logging
from typing import List, Sequence

import numpy as np

from core.domain import (
    PageEmbedding, ProviderTransientError, ProviderUnavailableError,
    VectorCandidate, VectorIndexNotReadyError
)
from core.interfaces import IPageStore, IVectorBackend
from config import settings
from utils.vector_math import cosine_similarities, top_k_indices

logger = logging.getLogger(settings.LOGGER_NAME)


def rank_embeddings(
    query: Sequence[float],
    rows: Sequence[PageEmbedding],
    limit: int
) -> List[VectorCandidate]:
    """Cosine-score rows against the query and keep the top `limit`, best first."""
    dim = len(query)
    usable = [row for row in rows if len(row.embedding) == dim]
    if len(usable) < len(rows):
        logger.warning(f"Skipped {len(rows) - len(usable)} embeddings with dimension != {dim}")
    if not usable:
        return []

    matrix = np.asarray([row.embedding for row in usable], dtype=np.float64)
    scores = cosine_similarities(query, matrix)
    return [
        VectorCandidate(page_id=usable[i].page_id, similarity_score=float(scores[i]))
        for i in top_k_indices(scores, limit)
    ]


class ExactLocalBackend(IVectorBackend):
    """
    Exhaustive cosine scan over a bounded working set of page embeddings.

    Exact within the working set; pages beyond it are never considered.
    """

    name = "exact-local"

    def __init__(self, page_store: IPageStore, working_set: int = settings.EXACT_LOCAL_WORKING_SET):
        self.page_store = page_store
        self.working_set = working_set

    def is_available(self) -> bool:
        return self.page_store is not None and self.working_set > 0

    async def search(self, embedding: List[float], limit: int) -> List[VectorCandidate]:
        if not self.is_available():
            raise ProviderUnavailableError("Exact-local backend has no page store")

        rows = await self.page_store.get_page_embeddings_batch(0, self.working_set)
        if not rows:
            raise VectorIndexNotReadyError("No page embeddings have been stored yet")

        logger.debug(f"Exact-local scan over {len(rows)} embeddings")
        return rank_embeddings(embedding, rows, limit)


class SampledRemoteBackend(IVectorBackend):
    """
    Approximate search: scores a few windows spread across the corpus.

    Fetches `window_count` windows of `window_size` rows in parallel, at offsets
    spaced evenly over the estimated corpus size. Pages outside the sampled windows
    are never scored, so recall is best-effort and depends on the window settings.
    A failed window is skipped; the search fails only when every window failed.
    """

    name = "sampled-remote"

    def __init__(
        self,
        page_store: IPageStore,
        window_count: int = settings.SAMPLED_WINDOW_COUNT,
        window_size: int = settings.SAMPLED_WINDOW_SIZE,
        estimated_total: int = settings.SAMPLED_ESTIMATED_TOTAL,
        window_timeout: float = settings.STORE_QUERY_TIMEOUT_SEC,
    ):
        self.page_store = page_store
        self.window_count = window_count
        self.window_size = window_size
        self.estimated_total = estimated_total
        self.window_timeout = window_timeout

    def is_available(self) -> bool:
        return self.page_store is not None and self.window_count > 0 and self.window_size > 0

    def window_offsets(self, total: int) -> List[int]:
        """Start offsets spread evenly so the windows span [0, total)."""
        if total <= self.window_size or self.window_count == 1:
            return [0]
        last_start = total - self.window_size
        step = last_start / (self.window_count - 1)
        offsets = sorted({int(round(i * step)) for i in range(self.window_count)})
        return offsets

    async def _estimate_total(self) -> int:
        if self.estimated_total > 0:
            return self.estimated_total
        return await asyncio.wait_for(self.page_store.count_embedded_pages(), timeout=self.window_timeout)

    async def _fetch_window(self, offset: int) -> List[PageEmbedding]:
        return await asyncio.wait_for(
            self.page_store.get_page_embeddings_batch(offset, self.window_size),
            timeout=self.window_timeout
        )

    async def search(self, embedding: List[float], limit: int) -> List[VectorCandidate]:
        if not self.is_available():
            raise ProviderUnavailableError("Sampled-remote backend is not configured")

        try:
            total = await self._estimate_total()
        except asyncio.TimeoutError as e:
            raise ProviderTransientError("Timed out estimating corpus size") from e
        if total <= 0:
            raise VectorIndexNotReadyError("No page embeddings have been stored yet")

        offsets = self.window_offsets(total)
        results = await asyncio.gather(
            *(self._fetch_window(offset) for offset in offsets),
            return_exceptions=True
        )

        rows: List[PageEmbedding] = []
        seen = set()
        failures = 0
        for offset, result in zip(offsets, results):
            if isinstance(result, BaseException):
                failures += 1
                logger.warning(f"Embedding window at offset {offset} failed: {result!r}")
                continue
            for row in result:
                if row.page_id not in seen:
                    seen.add(row.page_id)
                    rows.append(row)

        if failures == len(offsets):
            raise ProviderTransientError(f"All {failures} embedding windows failed")
        if not rows:
            raise VectorIndexNotReadyError("Sampled windows returned no embeddings")

        logger.debug(
            f"Sampled {len(rows)} embeddings from {len(offsets) - failures}/{len(offsets)} windows "
            f"(estimated total {total})"
        )
        return rank_embeddings(embedding, rows, limit)


class NullVectorBackend(IVectorBackend):
    """Selected with VECTOR_BACKEND=none"""

    name = "none"

    def is_available(self) -> bool:
        return False

    async def search(self, embedding: List[float], limit: int) -> List[VectorCandidate]:
        raise ProviderUnavailableError("Vector search is disabled")
