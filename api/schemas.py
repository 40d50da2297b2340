from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional

from core.enums import SearchMode


class CamelModel(BaseModel):
    """Serialized with camelCase keys (bookId, shareUrl, ...)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchResultItem(CamelModel):
    book_id: str
    book_title_ar: str
    book_title_en: str
    volume: int
    page: int
    snippet: str
    share_url: str
    score: Optional[float] = None

class SearchResponse(CamelModel):
    query: str
    total: int
    results: List[SearchResultItem]
    mode: SearchMode
    transliterated: bool = False
    search_terms: List[str] = []

class TopicSearchResponse(CamelModel):
    query: str
    total: int
    results: List[SearchResultItem]
    mode: str = "topic"
    fallback: bool = False
    transliterated: bool = False
    search_terms: List[str] = []

class ErrorResponse(BaseModel):
    error: str

class ComponentStatus(CamelModel):
    name: str
    available: bool

class StatusResponse(CamelModel):
    vector_backend: ComponentStatus
    embedding_provider: ComponentStatus
    ready_for_topic_search: bool

class FootnoteRequest(BaseModel):
    text: str

class FootnoteResponse(BaseModel):
    html: str
