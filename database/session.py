# database/session.py

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import Column, ForeignKey, Integer, LargeBinary, String, Text, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from config import settings


logger = logging.getLogger(settings.LOGGER_NAME)


def create_engine_for(url: str):
    """Async engine; pool sizing applies only to server databases."""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)
    return create_async_engine(
        url,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True  # Check connection health before using
    )


async_engine = create_engine_for(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)
Base = declarative_base()

# ============= Models =============

class BookEntity(Base):
    __tablename__ = "books"
    id = Column(String, primary_key=True)  # catalog work id, e.g. "01348"
    title_ar = Column(String, nullable=False)
    title_en = Column(String, nullable=False, default="")
    author_ar = Column(String, nullable=True)
    author_en = Column(String, nullable=True)
    volumes = Column(Integer, nullable=False, default=1)

class PageEntity(Base):
    __tablename__ = "pages"
    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(String, ForeignKey("books.id"), nullable=False, index=True)
    volume = Column(Integer, nullable=False)
    page = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
    text_normalized = Column(Text, nullable=False)
    # float32 little-endian bytes; NULL until the page has been embedded
    embedding = Column(LargeBinary, nullable=True)


# ============= Full-Text Index =============

FTS_TABLE = "pages_fts"
WORD_FTS_TABLE = "pages_fts_words"

# Trigram tokens give substring matching, so clitic-attached forms still match.
# Trigrams never match terms shorter than 3 characters; the unicode61 table
# indexes whole words and serves those terms.
CREATE_FTS_SQL = (
    f"CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} "
    f"USING fts5(text_normalized, tokenize='trigram')"
)
CREATE_WORD_FTS_SQL = (
    f"CREATE VIRTUAL TABLE IF NOT EXISTS {WORD_FTS_TABLE} "
    f"USING fts5(text_normalized, tokenize='unicode61')"
)

# Pages stored before the word index existed
BACKFILL_WORD_FTS_SQL = (
    f"INSERT INTO {WORD_FTS_TABLE}(rowid, text_normalized) "
    f"SELECT id, text_normalized FROM pages "
    f"WHERE id NOT IN (SELECT rowid FROM {WORD_FTS_TABLE})"
)


async def create_search_index(conn) -> None:
    """Create both FTS5 tables; rowid mirrors pages.id in each."""
    await conn.execute(text(CREATE_FTS_SQL))
    await conn.execute(text(CREATE_WORD_FTS_SQL))
    result = await conn.execute(text(BACKFILL_WORD_FTS_SQL))
    if result.rowcount and result.rowcount > 0:
        logger.info(f"Indexed {result.rowcount} existing pages into {WORD_FTS_TABLE}")


async def init_database(engine=None) -> None:
    """Create tables and the full-text indexes (no migrations)."""
    engine = engine or async_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await create_search_index(conn)


# ============= Session Factory =============

@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a new database session with proper cleanup.

    Used by stores that run several short queries concurrently, where one
    request-scoped session cannot be shared.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
