"""Shared enumerations used across the application."""
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for user-facing error messages."""
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    INDEX_NOT_READY = "INDEX_NOT_READY"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    STORE_QUERY_FAILED = "STORE_QUERY_FAILED"


class SearchMode(str, Enum):
    """How query tokens become an engine query string."""
    EXACT = "exact"
    WORD = "word"
    ROOT = "root"

    @staticmethod
    def from_string(mode: str) -> 'SearchMode':
        """Convert string to SearchMode, defaulting to WORD."""
        try:
            return SearchMode((mode or "").strip().lower())
        except ValueError:
            return SearchMode.WORD


class VectorBackendType(str, Enum):
    """Nearest-neighbour backends selectable through VECTOR_BACKEND."""
    EXACT_LOCAL = "exact-local"
    SAMPLED_REMOTE = "sampled-remote"
    MANAGED_INDEX = "managed-index"
    NONE = "none"


class EmbeddingProviderType(str, Enum):
    """Query embedding providers selectable through EMBEDDING_PROVIDER."""
    OPENAI = "openai"
    SENTENCE_TRANSFORMERS = "sentence-transformers"
    NONE = "none"


class ReferenceKind(str, Enum):
    """Kinds of cross-references recognised in free text."""
    SCRIPTURE = "scripture"
    CATALOG = "catalog"
