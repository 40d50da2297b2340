"""Core interfaces for the library search system"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from core.domain import PageEmbedding, PageRecord, SearchHit, VectorCandidate, WorkTitle

# ============= Page Store Interface =============
class IPageStore(ABC):
    """
    Page storage with a full-text-match primitive.

    Implementations: SQLPageStore (SQLite FTS5). The engine query string passed to
    full_text_match is produced by services.query_builder and is store-specific syntax.
    """

    @abstractmethod
    async def full_text_match(self, engine_query: str, limit: int) -> List[SearchHit]:
        """Run one engine query; snippets mark matches with <mark>...</mark>"""
        pass

    @abstractmethod
    async def get_page_embeddings_batch(self, offset: int, count: int) -> List[PageEmbedding]:
        """Pages with a non-null embedding, in stable id order"""
        pass

    @abstractmethod
    async def count_embedded_pages(self) -> int:
        """Number of pages carrying an embedding"""
        pass

    @abstractmethod
    async def get_pages(self, page_ids: Sequence[int]) -> List[PageRecord]:
        """Hydrate page ids (e.g. vector candidates) into records with book titles"""
        pass

# ============= Catalog Store Interface =============
class ICatalogStore(ABC):
    """Book/work metadata used to hydrate result display fields"""

    @abstractmethod
    async def resolve_work_title(self, work_id: str) -> Optional[WorkTitle]:
        """Arabic and English titles for a work, or None if unknown"""
        pass

# ============= Embedding Provider Interface =============
class IEmbeddingProvider(ABC):
    """Interface for query embedding generation"""

    name: str = "base"

    @abstractmethod
    def is_available(self) -> bool:
        """True when credentials/configuration allow calls to embed()"""
        pass

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Generate embedding for a search query"""
        pass

# ============= Vector Backend Interface =============
class IVectorBackend(ABC):
    """
    Nearest-neighbour search over page embeddings.
    Allows swapping backends (exact scan, sampled scan, managed ANN index).
    """

    name: str = "base"

    @abstractmethod
    def is_available(self) -> bool:
        """
        Cheap configuration check, distinct from search().

        Lets callers pick a fallback path without triggering a doomed call.
        """
        pass

    @abstractmethod
    async def search(self, embedding: List[float], limit: int) -> List[VectorCandidate]:
        """
        Return up to `limit` candidates ordered by non-increasing similarity.

        Raises:
            ProviderUnavailableError: backend is not configured
            VectorIndexNotReadyError: backend holds no vectors yet
            ProviderTransientError: backend timed out
        """
        pass
