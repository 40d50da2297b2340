# infrastructure/chroma_index.py
"""Managed ANN backend on a ChromaDB collection"""
import asyncio
import logging
from typing import Any, List, Optional

import chromadb

from core.domain import ProviderUnavailableError, VectorCandidate, VectorIndexNotReadyError
from core.interfaces import IVectorBackend
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


class ChromaIndexBackend(IVectorBackend):
    """
    Delegates nearest-neighbour search to a Chroma collection.

    Collection ids are page ids as strings. Similarity is 1 - distance, which
    for a cosine-space collection is the cosine similarity.
    """

    name = "managed-index"

    def __init__(self, client: Optional[Any], collection_name: str = settings.CHROMA_COLLECTION):
        self._client = client
        self._collection_name = collection_name
        self._collection: Any = None

    def is_available(self) -> bool:
        return self._client is not None

    async def _ensure_collection(self):
        """Lazy initialization of collection"""
        if not self._collection:
            self._collection = await asyncio.to_thread(
                self._client.get_or_create_collection,
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"}
            )

    async def count(self) -> int:
        await self._ensure_collection()
        return await asyncio.to_thread(self._collection.count)

    async def search(self, embedding: List[float], limit: int) -> List[VectorCandidate]:
        if not self.is_available():
            raise ProviderUnavailableError("Managed index is not configured (set CHROMA_HOST or CHROMA_PATH)")

        total = await self.count()
        if total == 0:
            raise VectorIndexNotReadyError(f"Collection '{self._collection_name}' is empty")

        results = await asyncio.to_thread(
            self._collection.query,
            query_embeddings=[embedding],
            n_results=min(limit, total),
            include=['distances']
        )

        candidates = []
        if results['ids'] and results['ids'][0]:
            for page_id, distance in zip(results['ids'][0], results['distances'][0]):
                try:
                    candidates.append(VectorCandidate(page_id=int(page_id), similarity_score=1.0 - distance))
                except ValueError:
                    logger.warning(f"Skipping non-numeric id from collection: {page_id}")

        candidates.sort(key=lambda c: c.similarity_score, reverse=True)
        return candidates


def create_chroma_client(host: Optional[str], port: int, path: Optional[str]) -> Optional[Any]:
    """
    HTTP client when a host is set, persistent local client when a path is set, else None.

    Client construction contacts the server; when that fails the error is logged
    and None is returned, leaving the backend unavailable instead of failing
    every request that resolves it.
    """
    try:
        if host:
            return chromadb.HttpClient(host=host, port=port)
        if path:
            return chromadb.PersistentClient(path=path)
    except Exception as e:
        logger.error(f"Could not create Chroma client (host={host}, path={path}): {e}")
    return None
