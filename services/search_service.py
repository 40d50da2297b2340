# services/search_service.py
"""Full-text search: query variant generation, per-variant execution and merging"""
import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence, Tuple

from config import settings
from core.domain import QueryVariant, SearchHit, SearchOutcome, StoreQueryError, WorkTitle
from core.enums import SearchMode
from core.interfaces import ICatalogStore, IPageStore
from services.query_builder import build_query
from utils.arabic_text import is_latin_text
from utils.root_expander import expand_direct_input
from utils.transliteration import transliterate

logger = logging.getLogger(settings.LOGGER_NAME)


def generate_variants(raw_query: str, mode: SearchMode = SearchMode.WORD) -> Tuple[List[QueryVariant], bool]:
    """
    Candidate token lists for a raw query.

    Returns (variants, transliterated). Latin input goes through the transliterator;
    anything else is treated as Arabic and normalized directly. Root mode relies on
    affix stripping alone, so the verb-ending alternation is skipped there.
    """
    if is_latin_text(raw_query):
        return transliterate(raw_query), True

    token_lists = expand_direct_input(raw_query, with_alternation=(mode != SearchMode.ROOT))
    variants = [QueryVariant(tokens=tuple(tokens)) for tokens in token_lists]
    return variants, False


class SearchService:
    """
    Runs every query variant against the page store and merges the hits.

    A failing variant is logged and skipped; it never fails the whole search.
    """

    def __init__(
        self,
        page_store: IPageStore,
        catalog_store: ICatalogStore,
        query_timeout: float = settings.STORE_QUERY_TIMEOUT_SEC,
        max_variants: int = settings.MAX_QUERY_VARIANTS,
    ):
        self.page_store = page_store
        self.catalog_store = catalog_store
        self.query_timeout = query_timeout
        self.max_variants = max_variants

    async def search(
        self,
        raw_query: str,
        mode: SearchMode = SearchMode.WORD,
        limit: int = settings.SEARCH_DEFAULT_LIMIT,
        deadline: Optional[float] = None,
    ) -> SearchOutcome:
        """
        Args:
            raw_query: user input, Arabic or Latin transliteration
            mode: exact / word / root
            limit: maximum merged hits returned
            deadline: optional time.monotonic() value; no store query starts after it,
                and running queries are cut off when it arrives
        """
        query = (raw_query or "").strip()
        outcome = SearchOutcome(query=query, mode=mode)
        if not query or limit <= 0:
            return outcome

        variants, transliterated = generate_variants(query, mode)
        variants = [v for v in variants if v][:self.max_variants]
        outcome.transliterated = transliterated
        if not variants:
            logger.info(f"No searchable variants for query '{query}'")
            return outcome

        if deadline is not None and time.monotonic() >= deadline:
            logger.warning(f"Search deadline passed before any variant ran for '{query}'")
            return outcome

        started = time.monotonic()
        outcome.variants_tried = [variant.text for variant in variants]
        results = await asyncio.gather(
            *(self._run_variant(variant, mode, limit, deadline) for variant in variants),
            return_exceptions=True
        )

        per_variant: List[Sequence[SearchHit]] = []
        for variant_text, result in zip(outcome.variants_tried, results):
            if isinstance(result, BaseException):
                logger.warning(f"Variant '{variant_text}' failed: {result}")
                outcome.failed_variants.append(variant_text)
                continue
            per_variant.append(result)

        outcome.hits = merge_hits(per_variant, limit)
        logger.debug(
            f"Search '{query}' mode={mode.value}: {len(outcome.variants_tried)} variants, "
            f"{len(outcome.failed_variants)} failed, {len(outcome.hits)} hits "
            f"in {time.monotonic() - started:.3f}s"
        )
        return outcome

    async def _run_variant(
        self,
        variant: QueryVariant,
        mode: SearchMode,
        limit: int,
        deadline: Optional[float] = None,
    ) -> List[SearchHit]:
        engine_query = build_query(variant.tokens, mode)
        timeout = self.query_timeout
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise StoreQueryError(f"Search deadline passed before running: {engine_query}")
            timeout = min(timeout, remaining)

        try:
            hits = await asyncio.wait_for(
                self.page_store.full_text_match(engine_query, limit),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise StoreQueryError(f"Timed out after {timeout:.2f}s: {engine_query}")
        return [
            hit if hit.source_variant else SearchHit(
                book_id=hit.book_id,
                volume=hit.volume,
                page=hit.page,
                snippet=hit.snippet,
                source_variant=variant.text,
            )
            for hit in hits
        ]

    async def resolve_titles(self, hits: Sequence[SearchHit]) -> Dict[str, WorkTitle]:
        """
        Display titles for every distinct book among the hits, looked up once each.

        A lookup that times out leaves that book with empty titles.
        """
        titles: Dict[str, WorkTitle] = {}
        for hit in hits:
            if hit.book_id in titles:
                continue
            try:
                title = await asyncio.wait_for(
                    self.catalog_store.resolve_work_title(hit.book_id),
                    timeout=self.query_timeout
                )
            except asyncio.TimeoutError:
                logger.warning(f"Title lookup for book {hit.book_id} timed out after {self.query_timeout}s")
                title = None
            titles[hit.book_id] = title or WorkTitle(title_ar="", title_en="")
        return titles


def merge_hits(per_variant: Sequence[Sequence[SearchHit]], limit: int) -> List[SearchHit]:
    """De-duplicate by (book, volume, page) keeping the first snippet seen, then truncate."""
    merged: Dict[Tuple[str, int, int], SearchHit] = {}
    for hits in per_variant:
        for hit in hits:
            if hit.key not in merged:
                merged[hit.key] = hit
    return list(merged.values())[:limit]
