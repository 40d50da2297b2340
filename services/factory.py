# services/factory.py
import logging
from functools import lru_cache

from fastapi import Depends

from config import settings
from core.enums import EmbeddingProviderType, VectorBackendType
from core.interfaces import ICatalogStore, IEmbeddingProvider, IPageStore, IVectorBackend
from database.session import get_session
from infrastructure.chroma_index import ChromaIndexBackend, create_chroma_client
from infrastructure.embedding_services import (
    NullEmbeddingProvider, OpenAIEmbeddingProvider, SentenceTransformerEmbedding
)
from infrastructure.repositories import SQLCatalogStore, SQLPageStore
from infrastructure.vector_backends import ExactLocalBackend, NullVectorBackend, SampledRemoteBackend
from services.search_service import SearchService
from services.topic_search_service import TopicSearchService
from services.vector_search import VectorSearchOrchestrator

logger = logging.getLogger(settings.LOGGER_NAME)

# Provider functions for each component.
# Backend and embedding provider are chosen once per process (lru_cache) and injected.

@lru_cache
def get_page_store() -> IPageStore:
    """Page store; each call opens its own short-lived session."""
    return SQLPageStore(session_factory=get_session)

@lru_cache
def get_catalog_store() -> ICatalogStore:
    return SQLCatalogStore(session_factory=get_session)

@lru_cache
def get_vector_backend() -> IVectorBackend:
    """Create vector backend based on configuration."""
    backend_type = VectorBackendType(settings.VECTOR_BACKEND)
    if backend_type == VectorBackendType.EXACT_LOCAL:
        backend = ExactLocalBackend(get_page_store())
    elif backend_type == VectorBackendType.SAMPLED_REMOTE:
        backend = SampledRemoteBackend(get_page_store())
    elif backend_type == VectorBackendType.MANAGED_INDEX:
        client = create_chroma_client(settings.CHROMA_HOST, settings.CHROMA_PORT, settings.CHROMA_PATH)
        backend = ChromaIndexBackend(client)
    elif backend_type == VectorBackendType.NONE:
        backend = NullVectorBackend()
    else:
        raise ValueError(f"Unknown vector backend: {settings.VECTOR_BACKEND}")

    logger.info(f"Vector backend: {backend.name} (available={backend.is_available()})")
    return backend

@lru_cache
def get_embedding_provider() -> IEmbeddingProvider:
    """Create embedding provider based on configuration."""
    provider_type = EmbeddingProviderType(settings.EMBEDDING_PROVIDER)
    if provider_type == EmbeddingProviderType.OPENAI:
        provider = OpenAIEmbeddingProvider()
    elif provider_type == EmbeddingProviderType.SENTENCE_TRANSFORMERS:
        provider = SentenceTransformerEmbedding(settings.LOCAL_EMBEDDING_MODEL_NAME)
    elif provider_type == EmbeddingProviderType.NONE:
        provider = NullEmbeddingProvider()
    else:
        raise ValueError(f"Unknown embedding provider: {settings.EMBEDDING_PROVIDER}")

    logger.info(f"Embedding provider: {provider.name} (available={provider.is_available()})")
    return provider

def get_vector_search(backend: IVectorBackend = Depends(get_vector_backend)) -> VectorSearchOrchestrator:
    return VectorSearchOrchestrator(backend)

# Main service providers using FastAPI DI
def get_search_service(
    page_store: IPageStore = Depends(get_page_store),
    catalog_store: ICatalogStore = Depends(get_catalog_store),
) -> SearchService:
    return SearchService(page_store=page_store, catalog_store=catalog_store)

def get_topic_search_service(
    embedding_provider: IEmbeddingProvider = Depends(get_embedding_provider),
    vector_search: VectorSearchOrchestrator = Depends(get_vector_search),
    page_store: IPageStore = Depends(get_page_store),
    search_service: SearchService = Depends(get_search_service),
) -> TopicSearchService:
    """
    Create topic search service with full dependency injection.

    Easy to override individual components for testing.
    """
    return TopicSearchService(
        embedding_provider=embedding_provider,
        vector_search=vector_search,
        page_store=page_store,
        search_service=search_service,
    )
