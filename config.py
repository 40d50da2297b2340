"""Application configuration"""
from typing import Literal, Optional
from pydantic_settings import BaseSettings
from utils.common import get_log_file_path

class Settings(BaseSettings):
    """Application configuration"""

    # Logger configuration
    LOGGER_NAME: str = "hadith_search"
    LOG_FILE_PATH: str = get_log_file_path()
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 5

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./library.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Full-text search
    SEARCH_DEFAULT_LIMIT: int = 100
    SEARCH_MAX_LIMIT: int = 500
    STORE_QUERY_TIMEOUT_SEC: float = 5.0
    SEARCH_DEADLINE_SEC: float = 10.0  # per request; no variant starts after it
    SNIPPET_TOKENS: int = 32
    MAX_QUERY_VARIANTS: int = 20

    # Topic search
    TOPIC_DEFAULT_LIMIT: int = 50
    TOPIC_MAX_LIMIT: int = 100
    TOPIC_SNIPPET_LENGTH: int = 300
    TOPIC_FALLBACK_TO_FULLTEXT: bool = True

    # Vector backend: selected once at startup
    VECTOR_BACKEND: Literal["exact-local", "sampled-remote", "managed-index", "none"] = "exact-local"
    VECTOR_SEARCH_TIMEOUT_SEC: float = 8.0

    # exact-local
    EXACT_LOCAL_WORKING_SET: int = 20000

    # sampled-remote
    SAMPLED_WINDOW_COUNT: int = 3
    SAMPLED_WINDOW_SIZE: int = 2000
    SAMPLED_ESTIMATED_TOTAL: int = 0  # 0 = ask the page store

    # managed-index (ChromaDB)
    CHROMA_HOST: Optional[str] = None
    CHROMA_PORT: int = 8000
    CHROMA_PATH: Optional[str] = None
    CHROMA_COLLECTION: str = "page_embeddings"

    # Embedding provider
    EMBEDDING_PROVIDER: Literal["openai", "sentence-transformers", "none"] = "openai"
    OPENAI_API_KEY: Optional[str] = None
    EMBEDDING_MODEL_NAME: str = "text-embedding-3-small"
    EMBEDDING_DIMENSIONS: int = 1536
    EMBEDDING_TIMEOUT_SEC: float = 15.0
    EMBEDDING_MAX_RETRIES: int = 3
    EMBEDDING_RETRY_BASE_DELAY_SEC: float = 1.0
    LOCAL_EMBEDDING_MODEL_NAME: str = "paraphrase-multilingual-mpnet-base-v2"

    # Rendering
    SCRIPTURE_VIEWER_BASE_URL: str = "https://quran.com"
    SHARE_URL_BASE: str = "/book"

    # App metadata
    APP_TITLE: str = "Hadith Library Search"
    APP_VERSION: str = "1.0.0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
