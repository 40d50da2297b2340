# services/topic_search_service.py
"""Topic (semantic) search: raw query -> embedding -> nearest pages"""
import asyncio
import logging

from config import settings
from core.domain import ProviderTransientError, ProviderUnavailableError, TopicHit, TopicOutcome
from core.enums import SearchMode
from core.interfaces import IEmbeddingProvider, IPageStore
from services.search_service import SearchService
from services.vector_search import VectorSearchOrchestrator

logger = logging.getLogger(settings.LOGGER_NAME)


class TopicSearchService:
    """
    Bypasses token expansion entirely; the raw query text is embedded as typed.

    Raises ProviderUnavailableError when no embedding provider is configured.
    When only the vector backend is missing and fallback is enabled, runs a
    word-mode full-text search instead.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_search: VectorSearchOrchestrator,
        page_store: IPageStore,
        search_service: SearchService,
        fallback_to_fulltext: bool = settings.TOPIC_FALLBACK_TO_FULLTEXT,
        query_timeout: float = settings.STORE_QUERY_TIMEOUT_SEC,
    ):
        self.embedding_provider = embedding_provider
        self.vector_search = vector_search
        self.page_store = page_store
        self.search_service = search_service
        self.fallback_to_fulltext = fallback_to_fulltext
        self.query_timeout = query_timeout

    async def search(self, raw_query: str, limit: int = settings.TOPIC_DEFAULT_LIMIT) -> TopicOutcome:
        query = (raw_query or "").strip()
        outcome = TopicOutcome(query=query)
        if not query or limit <= 0:
            return outcome

        if not self.embedding_provider.is_available():
            raise ProviderUnavailableError(
                f"Embedding provider '{self.embedding_provider.name}' is not configured"
            )

        if not self.vector_search.is_available():
            if not self.fallback_to_fulltext:
                raise ProviderUnavailableError(
                    f"Vector backend '{self.vector_search.backend_name}' is not available"
                )
            logger.info(f"Vector backend unavailable; topic query '{query}' falls back to full-text")
            outcome.fallback = True
            outcome.fallback_outcome = await self.search_service.search(query, SearchMode.WORD, limit)
            return outcome

        embedding = await self.embedding_provider.embed(query)
        candidates = await self.vector_search.search(embedding, limit)
        if not candidates:
            return outcome

        try:
            records = await asyncio.wait_for(
                self.page_store.get_pages([c.page_id for c in candidates]),
                timeout=self.query_timeout
            )
        except asyncio.TimeoutError as e:
            raise ProviderTransientError(f"Loading {len(candidates)} pages timed out after {self.query_timeout}s") from e

        by_id = {record.id: record for record in records}
        outcome.hits = [
            TopicHit(page=by_id[c.page_id], score=c.similarity_score)
            for c in candidates if c.page_id in by_id
        ]
        missing = len(candidates) - len(outcome.hits)
        if missing:
            logger.warning(f"{missing} vector candidates have no matching page row")
        return outcome
