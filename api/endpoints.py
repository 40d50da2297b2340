import logging
import time
from typing import Dict, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from config import settings
from core.domain import (
    LibrarySearchError, ProviderTransientError, ProviderUnavailableError,
    SearchOutcome, VectorIndexNotReadyError, WorkTitle
)
from core.enums import SearchMode
from core.interfaces import IEmbeddingProvider
from services.factory import (
    get_embedding_provider, get_search_service, get_topic_search_service, get_vector_search
)
from services.search_service import SearchService
from services.topic_search_service import TopicSearchService
from services.vector_search import VectorSearchOrchestrator
from utils.footnotes import render_footnote
from api.schemas import (
    ComponentStatus, ErrorResponse, FootnoteRequest, FootnoteResponse, SearchResponse,
    SearchResultItem, StatusResponse, TopicSearchResponse
)

logger = logging.getLogger(settings.LOGGER_NAME)

router = APIRouter()

NO_PROVIDER_MESSAGE = "Topic search is unavailable: no embedding provider is configured"
INDEX_NOT_READY_MESSAGE = "Topic search is unavailable: the vector index has not been populated yet"
TIMEOUT_MESSAGE = "Topic search timed out, please try again"


# Utility functions
def clamp_limit(limit: Optional[int], default: int, maximum: int) -> int:
    if limit is None or limit < 1:
        return default
    return min(limit, maximum)

def share_url(book_id: str, volume: int, page: int, query: str) -> str:
    url = f"{settings.SHARE_URL_BASE.rstrip('/')}/{book_id}/{volume}/{page}"
    if query:
        url += f"?highlight={quote(query)}"
    return url

def truncate(text: str, length: int) -> str:
    return text[:length] + "..." if len(text) > length else text

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())

def build_search_items(outcome: SearchOutcome, titles: Dict[str, WorkTitle]) -> List[SearchResultItem]:
    items = []
    for hit in outcome.hits:
        title = titles.get(hit.book_id) or WorkTitle(title_ar="", title_en="")
        items.append(SearchResultItem(
            book_id=hit.book_id,
            book_title_ar=title.title_ar,
            book_title_en=title.title_en,
            volume=hit.volume,
            page=hit.page,
            snippet=hit.snippet,
            share_url=share_url(hit.book_id, hit.volume, hit.page, outcome.query),
        ))
    return items


# API Endpoints
@router.get("/search", response_model=SearchResponse)
async def search_endpoint(
    q: str = "",
    mode: str = SearchMode.WORD.value,
    limit: Optional[int] = None,
    search_service: SearchService = Depends(get_search_service)
):
    search_mode = SearchMode.from_string(mode)
    limit = clamp_limit(limit, settings.SEARCH_DEFAULT_LIMIT, settings.SEARCH_MAX_LIMIT)

    try:
        deadline = time.monotonic() + settings.SEARCH_DEADLINE_SEC
        outcome = await search_service.search(q, search_mode, limit, deadline=deadline)
        titles = await search_service.resolve_titles(outcome.hits)
    except LibrarySearchError as e:
        logger.error(f"Search failed for '{q}': {e}")
        return error_response(500, "Search failed")

    items = build_search_items(outcome, titles)
    return SearchResponse(
        query=outcome.query,
        total=len(items),
        results=items,
        mode=search_mode,
        transliterated=outcome.transliterated,
        search_terms=outcome.variants_tried,
    )


@router.get(
    "/topic-search",
    response_model=TopicSearchResponse,
    responses={503: {"model": ErrorResponse}, 504: {"model": ErrorResponse}}
)
async def topic_search_endpoint(
    q: str = "",
    limit: Optional[int] = None,
    topic_service: TopicSearchService = Depends(get_topic_search_service)
):
    limit = clamp_limit(limit, settings.TOPIC_DEFAULT_LIMIT, settings.TOPIC_MAX_LIMIT)

    try:
        outcome = await topic_service.search(q, limit)
    except VectorIndexNotReadyError as e:
        logger.warning(f"Topic search refused: {e}")
        return error_response(503, INDEX_NOT_READY_MESSAGE)
    except ProviderUnavailableError as e:
        logger.warning(f"Topic search refused: {e}")
        return error_response(503, NO_PROVIDER_MESSAGE)
    except ProviderTransientError as e:
        logger.error(f"Topic search failed for '{q}': {e}")
        return error_response(504, TIMEOUT_MESSAGE)
    except LibrarySearchError as e:
        logger.error(f"Topic search failed for '{q}': {e}")
        return error_response(500, "Search failed")

    if outcome.fallback and outcome.fallback_outcome is not None:
        fallback = outcome.fallback_outcome
        titles = await topic_service.search_service.resolve_titles(fallback.hits)
        items = build_search_items(fallback, titles)
        return TopicSearchResponse(
            query=outcome.query,
            total=len(items),
            results=items,
            fallback=True,
            transliterated=fallback.transliterated,
            search_terms=fallback.variants_tried,
        )

    items = [
        SearchResultItem(
            book_id=hit.page.book_id,
            book_title_ar=hit.page.title_ar,
            book_title_en=hit.page.title_en,
            volume=hit.page.volume,
            page=hit.page.page,
            snippet=truncate(hit.page.text, settings.TOPIC_SNIPPET_LENGTH),
            share_url=share_url(hit.page.book_id, hit.page.volume, hit.page.page, outcome.query),
            score=hit.score,
        )
        for hit in outcome.hits
    ]
    return TopicSearchResponse(query=outcome.query, total=len(items), results=items)


@router.get("/status", response_model=StatusResponse)
async def get_status(
    embedding_provider: IEmbeddingProvider = Depends(get_embedding_provider),
    vector_search: VectorSearchOrchestrator = Depends(get_vector_search)
) -> StatusResponse:
    backend_ok = vector_search.is_available()
    provider_ok = embedding_provider.is_available()
    return StatusResponse(
        vector_backend=ComponentStatus(name=vector_search.backend_name, available=backend_ok),
        embedding_provider=ComponentStatus(name=embedding_provider.name, available=provider_ok),
        ready_for_topic_search=backend_ok and provider_ok,
    )


@router.post("/footnotes/render", response_model=FootnoteResponse)
async def render_footnote_endpoint(request: FootnoteRequest) -> FootnoteResponse:
    return FootnoteResponse(html=render_footnote(request.text))
