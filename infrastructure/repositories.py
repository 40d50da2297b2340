# infrastructure/repositories.py
"""Database repository implementations"""
import logging
import re
from typing import Callable, List, Optional, Sequence

import numpy as np
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain import PageEmbedding, PageRecord, SearchHit, StoreQueryError, WorkTitle
from core.interfaces import ICatalogStore, IPageStore
from database.session import FTS_TABLE, WORD_FTS_TABLE, BookEntity, PageEntity
from config import settings
from utils.arabic_text import normalize_arabic

logger = logging.getLogger(settings.LOGGER_NAME)

# Embeddings are stored as raw little-endian float32
EMBEDDING_DTYPE = np.dtype("<f4")

SessionFactory = Callable[[], AsyncSession]

# Shortest term the trigram tokenizer can match
TRIGRAM_MIN_TERM = 3

_QUOTED_LITERAL = re.compile(r'"((?:[^"]|"")*)"')


def _match_sql(table: str):
    return text(
        f"SELECT p.book_id, p.volume, p.page, "
        f"snippet({table}, 0, '<mark>', '</mark>', '...', :tokens) AS snippet "
        f"FROM {table} JOIN pages AS p ON p.id = {table}.rowid "
        f"WHERE {table} MATCH :query "
        f"ORDER BY rank LIMIT :limit"
    )


_MATCH_SQL = {table: _match_sql(table) for table in (FTS_TABLE, WORD_FTS_TABLE)}


def has_short_term(engine_query: str) -> bool:
    """True when any quoted word is too short for the trigram index."""
    for literal in _QUOTED_LITERAL.findall(engine_query):
        words = literal.replace('""', '"').split()
        if any(len(word) < TRIGRAM_MIN_TERM for word in words):
            return True
    return False


def encode_embedding(embedding: Sequence[float]) -> bytes:
    return np.asarray(embedding, dtype=EMBEDDING_DTYPE).tobytes()


def decode_embedding(blob: bytes) -> List[float]:
    return np.frombuffer(blob, dtype=EMBEDDING_DTYPE).tolist()


class SQLPageStore(IPageStore):
    """
    Pages in SQLite with an FTS5 index over the normalized text.

    Each call opens its own session so per-variant queries can run concurrently.
    """

    def __init__(self, session_factory: SessionFactory, snippet_tokens: int = settings.SNIPPET_TOKENS):
        self._session_factory = session_factory
        self._snippet_tokens = snippet_tokens

    async def full_text_match(self, engine_query: str, limit: int) -> List[SearchHit]:
        """
        Trigram index first; the whole-word index is added when the query holds
        a term shorter than three characters. Pages found by both keep the
        trigram snippet.
        """
        tables = [FTS_TABLE]
        if has_short_term(engine_query):
            tables.append(WORD_FTS_TABLE)

        params = {"query": engine_query, "limit": limit, "tokens": self._snippet_tokens}
        rows = []
        try:
            async with self._session_factory() as session:
                for table in tables:
                    result = await session.execute(_MATCH_SQL[table], params)
                    rows.extend(result.all())
        except SQLAlchemyError as e:
            raise StoreQueryError(f"Full-text query failed ({engine_query}): {e}") from e

        hits: List[SearchHit] = []
        seen = set()
        for row in rows:
            key = (row.book_id, row.volume, row.page)
            if key in seen:
                continue
            seen.add(key)
            hits.append(SearchHit(book_id=row.book_id, volume=row.volume, page=row.page, snippet=row.snippet or ""))
        return hits[:limit]

    async def get_page_embeddings_batch(self, offset: int, count: int) -> List[PageEmbedding]:
        if count <= 0:
            return []
        stmt = (
            select(PageEntity.id, PageEntity.embedding)
            .where(PageEntity.embedding.is_not(None))
            .order_by(PageEntity.id)
            .offset(max(0, offset))
            .limit(count)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()
        return [PageEmbedding(page_id=row.id, embedding=decode_embedding(row.embedding)) for row in rows]

    async def count_embedded_pages(self) -> int:
        stmt = select(func.count(PageEntity.id)).where(PageEntity.embedding.is_not(None))
        async with self._session_factory() as session:
            return (await session.execute(stmt)).scalar_one()

    async def get_pages(self, page_ids: Sequence[int]) -> List[PageRecord]:
        """Records in the order of page_ids; unknown ids are skipped."""
        if not page_ids:
            return []
        stmt = (
            select(PageEntity, BookEntity.title_ar, BookEntity.title_en)
            .join(BookEntity, BookEntity.id == PageEntity.book_id, isouter=True)
            .where(PageEntity.id.in_(list(page_ids)))
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()

        by_id = {
            page.id: PageRecord(
                id=page.id,
                book_id=page.book_id,
                volume=page.volume,
                page=page.page,
                text=page.text,
                title_ar=title_ar or "",
                title_en=title_en or "",
            )
            for page, title_ar, title_en in rows
        }
        return [by_id[pid] for pid in page_ids if pid in by_id]

    # ============= Seeding =============

    async def add_book(self, book_id: str, title_ar: str, title_en: str = "",
                       author_ar: Optional[str] = None, author_en: Optional[str] = None,
                       volumes: int = 1) -> None:
        async with self._session_factory() as session:
            session.add(BookEntity(
                id=book_id, title_ar=title_ar, title_en=title_en,
                author_ar=author_ar, author_en=author_en, volumes=volumes
            ))
            await session.commit()
        logger.info(f"Added book {book_id} ({title_ar})")

    async def add_page(self, book_id: str, volume: int, page: int, page_text: str,
                       embedding: Optional[Sequence[float]] = None) -> int:
        """Store a page and index its normalized text; returns the page id."""
        normalized = normalize_arabic(page_text)
        async with self._session_factory() as session:
            entity = PageEntity(
                book_id=book_id,
                volume=volume,
                page=page,
                text=page_text,
                text_normalized=normalized,
                embedding=encode_embedding(embedding) if embedding is not None else None,
            )
            session.add(entity)
            await session.flush()
            page_id = entity.id
            for table in (FTS_TABLE, WORD_FTS_TABLE):
                await session.execute(
                    text(f"INSERT INTO {table}(rowid, text_normalized) VALUES (:id, :body)"),
                    {"id": page_id, "body": normalized}
                )
            await session.commit()
        return page_id


class SQLCatalogStore(ICatalogStore):
    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def resolve_work_title(self, work_id: str) -> Optional[WorkTitle]:
        async with self._session_factory() as session:
            book = await session.get(BookEntity, work_id)
        if book is None:
            return None
        return WorkTitle(title_ar=book.title_ar, title_en=book.title_en or "")
