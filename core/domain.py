"""Domain models and errors for the library search core"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from core.enums import ErrorCode, ReferenceKind, SearchMode


# ============= Query Models =============

@dataclass(frozen=True)
class QueryVariant:
    """One candidate interpretation of the user's input: ordered, normalized tokens."""
    tokens: Tuple[str, ...]

    @property
    def text(self) -> str:
        return " ".join(self.tokens)

    def __bool__(self) -> bool:
        return any(self.tokens)


@dataclass(frozen=True)
class SearchHit:
    """One full-text match. Identity is (book_id, volume, page)."""
    book_id: str
    volume: int
    page: int
    snippet: str
    source_variant: str = ""

    @property
    def key(self) -> Tuple[str, int, int]:
        return (self.book_id, self.volume, self.page)


@dataclass
class SearchOutcome:
    """Merged hits plus what was actually searched"""
    query: str
    mode: SearchMode
    hits: List[SearchHit] = field(default_factory=list)
    variants_tried: List[str] = field(default_factory=list)
    transliterated: bool = False
    failed_variants: List[str] = field(default_factory=list)


# ============= Vector Models =============

@dataclass(frozen=True)
class VectorCandidate:
    """Nearest-neighbour result; joined against the page store by the caller"""
    page_id: int
    similarity_score: float


@dataclass
class PageEmbedding:
    page_id: int
    embedding: List[float]


@dataclass
class TopicHit:
    page: 'PageRecord'
    score: float


@dataclass
class TopicOutcome:
    """
    Semantic search result. When the vector backend was unavailable and the
    full-text fallback ran, `fallback` is set and `fallback_outcome` holds its hits.
    """
    query: str
    hits: List[TopicHit] = field(default_factory=list)
    fallback: bool = False
    fallback_outcome: Optional['SearchOutcome'] = None


# ============= Catalog Models =============

@dataclass
class WorkTitle:
    title_ar: str
    title_en: str


@dataclass
class PageRecord:
    """A stored page with its book's display titles"""
    id: int
    book_id: str
    volume: int
    page: int
    text: str
    title_ar: str = ""
    title_en: str = ""


# ============= Reference Models =============

@dataclass(frozen=True)
class Reference:
    """
    A cross-reference detected in free text.

    Scripture: unit_id = chapter number, unit = verse, unit_end = last verse of a range.
    Catalog: unit_id = work id, sub_unit = volume, unit = page, unit_end = last page.
    """
    kind: ReferenceKind
    unit_id: str
    unit: int
    display_text: str
    target_url: str
    sub_unit: Optional[int] = None
    unit_end: Optional[int] = None


@dataclass(frozen=True)
class ReferenceSpan:
    """Where a reference was found in the source text"""
    start: int
    end: int
    reference: Reference


# ============= Errors =============

class LibrarySearchError(Exception):
    """Raised when a search dependency fails with a specific error code"""

    def __init__(self, message: str, error_code: ErrorCode):
        self.message = message
        self.error_code = error_code
        super().__init__(message)

    def __str__(self):
        # Format used for logging
        return f"[{self.error_code.value}] {self.message}"


class ProviderUnavailableError(LibrarySearchError):
    """Embedding provider or vector backend is not configured"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PROVIDER_UNAVAILABLE)


class VectorIndexNotReadyError(LibrarySearchError):
    """Vector backend is configured but holds no vectors yet"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INDEX_NOT_READY)


class ProviderTransientError(LibrarySearchError):
    """Timeout or rate limit from an external provider, after bounded retries"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PROVIDER_TIMEOUT)


class StoreQueryError(LibrarySearchError):
    """A single engine query failed against the page store"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.STORE_QUERY_FAILED)
