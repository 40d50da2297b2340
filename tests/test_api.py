import time
import unittest
from typing import List
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from core.domain import (
    PageEmbedding, PageRecord, ProviderTransientError, SearchHit, SearchOutcome, WorkTitle
)
from core.enums import SearchMode
from core.interfaces import IEmbeddingProvider
from infrastructure.embedding_services import NullEmbeddingProvider
from infrastructure.vector_backends import ExactLocalBackend, NullVectorBackend
from main import app
from services.factory import (
    get_embedding_provider, get_search_service, get_topic_search_service, get_vector_search
)
from services.search_service import SearchService
from services.topic_search_service import TopicSearchService
from services.vector_search import VectorSearchOrchestrator


class FakeEmbeddingProvider(IEmbeddingProvider):
    name = "fake"

    def __init__(self, error=None):
        self.error = error

    def is_available(self) -> bool:
        return True

    async def embed(self, text: str) -> List[float]:
        if self.error:
            raise self.error
        return [1.0, 0.0]


def make_page_store(hits=None, embeddings=None, pages=None):
    store = MagicMock()
    store.full_text_match = AsyncMock(return_value=hits or [])
    store.get_page_embeddings_batch = AsyncMock(return_value=embeddings or [])
    store.count_embedded_pages = AsyncMock(return_value=len(embeddings or []))
    store.get_pages = AsyncMock(return_value=pages or [])
    return store


def make_catalog_store():
    catalog = MagicMock()
    catalog.resolve_work_title = AsyncMock(return_value=WorkTitle(title_ar="بحار الأنوار", title_en="Bihar al-Anwar"))
    return catalog


class APITestCase(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def use_search_service(self, page_store):
        service = SearchService(page_store, make_catalog_store())
        app.dependency_overrides[get_search_service] = lambda: service
        return service

    def use_topic_service(self, provider, backend, page_store, fallback=True):
        search_service = SearchService(page_store, make_catalog_store())
        service = TopicSearchService(
            embedding_provider=provider,
            vector_search=VectorSearchOrchestrator(backend),
            page_store=page_store,
            search_service=search_service,
            fallback_to_fulltext=fallback,
        )
        app.dependency_overrides[get_topic_search_service] = lambda: service
        return service


class TestSearchEndpoint(APITestCase):

    def test_blank_query_returns_empty(self):
        page_store = make_page_store()
        self.use_search_service(page_store)

        for mode in ["exact", "word", "root"]:
            response = self.client.get("/search", params={"q": "", "mode": mode})
            self.assertEqual(response.status_code, 200)
            body = response.json()
            self.assertEqual(body["results"], [])
            self.assertEqual(body["total"], 0)
        page_store.full_text_match.assert_not_awaited()

    def test_word_search_respects_limit(self):
        hits = [
            SearchHit(book_id="01407", volume=1, page=p, snippet=f"قال <mark>محمد</mark> {p}")
            for p in range(1, 8)
        ]
        self.use_search_service(make_page_store(hits=hits))

        response = self.client.get("/search", params={"q": "محمد", "mode": "word", "limit": 5})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["total"], 5)
        self.assertEqual(body["mode"], "word")
        self.assertFalse(body["transliterated"])
        self.assertEqual(body["searchTerms"], ["محمد"])
        first = body["results"][0]
        self.assertEqual(first["bookId"], "01407")
        self.assertEqual(first["bookTitleAr"], "بحار الأنوار")
        self.assertEqual(first["bookTitleEn"], "Bihar al-Anwar")
        self.assertTrue(first["shareUrl"].startswith("/book/01407/1/1?highlight="))
        for result in body["results"]:
            self.assertIn("<mark>", result["snippet"])

    def test_limit_is_clamped(self):
        page_store = make_page_store()
        self.use_search_service(page_store)

        self.client.get("/search", params={"q": "حديث", "limit": 10000})

        page_store.full_text_match.assert_awaited_once_with('"حديث"', 500)

    def test_unknown_mode_falls_back_to_word(self):
        self.use_search_service(make_page_store())
        response = self.client.get("/search", params={"q": "حديث", "mode": "fuzzy"})
        self.assertEqual(response.json()["mode"], "word")

    def test_request_carries_a_deadline(self):
        service = MagicMock()
        service.search = AsyncMock(return_value=SearchOutcome(query="حديث", mode=SearchMode.ROOT))
        service.resolve_titles = AsyncMock(return_value={})
        app.dependency_overrides[get_search_service] = lambda: service

        before = time.monotonic()
        response = self.client.get("/search", params={"q": "حديث", "mode": "root"})

        self.assertEqual(response.status_code, 200)
        args, kwargs = service.search.call_args
        self.assertEqual(args, ("حديث", SearchMode.ROOT, 100))
        self.assertGreater(kwargs["deadline"], before)

    def test_transliterated_query(self):
        self.use_search_service(make_page_store())
        body = self.client.get("/search", params={"q": "muhammad"}).json()
        self.assertTrue(body["transliterated"])
        self.assertIn("محمد", body["searchTerms"])


class TestTopicSearchEndpoint(APITestCase):

    def test_no_embedding_provider_is_503(self):
        self.use_topic_service(NullEmbeddingProvider(), NullVectorBackend(), make_page_store())

        response = self.client.get("/topic-search", params={"q": "الصبر"})

        self.assertEqual(response.status_code, 503)
        self.assertIn("embedding provider", response.json()["error"])

    def test_empty_index_is_503_with_distinct_message(self):
        page_store = make_page_store(embeddings=[])
        self.use_topic_service(FakeEmbeddingProvider(), ExactLocalBackend(page_store), page_store)

        response = self.client.get("/topic-search", params={"q": "الصبر"})

        self.assertEqual(response.status_code, 503)
        self.assertIn("not been populated", response.json()["error"])

    def test_ranked_results(self):
        page_store = make_page_store(
            embeddings=[PageEmbedding(1, [0.0, 1.0]), PageEmbedding(2, [1.0, 0.0])],
            pages=[
                PageRecord(id=2, book_id="01348", volume=2, page=7, text="الصبر " * 100,
                           title_ar="الكافي", title_en="Al-Kafi"),
                PageRecord(id=1, book_id="01348", volume=2, page=8, text="نص"),
            ],
        )
        self.use_topic_service(FakeEmbeddingProvider(), ExactLocalBackend(page_store), page_store)

        response = self.client.get("/topic-search", params={"q": "patience", "limit": 500})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["mode"], "topic")
        self.assertFalse(body["fallback"])
        self.assertEqual([r["page"] for r in body["results"]], [7, 8])
        self.assertGreaterEqual(body["results"][0]["score"], body["results"][1]["score"])
        self.assertEqual(body["results"][0]["bookTitleEn"], "Al-Kafi")
        self.assertTrue(body["results"][0]["snippet"].endswith("..."))
        page_store.get_page_embeddings_batch.assert_awaited_once()

    def test_falls_back_to_full_text_without_backend(self):
        hits = [SearchHit(book_id="01407", volume=1, page=3, snippet="<mark>الصبر</mark>")]
        self.use_topic_service(FakeEmbeddingProvider(), NullVectorBackend(), make_page_store(hits=hits))

        body = self.client.get("/topic-search", params={"q": "الصبر"}).json()

        self.assertTrue(body["fallback"])
        self.assertEqual(body["mode"], "topic")
        self.assertEqual(body["total"], 1)

    def test_backend_missing_without_fallback_is_503(self):
        self.use_topic_service(FakeEmbeddingProvider(), NullVectorBackend(), make_page_store(), fallback=False)
        response = self.client.get("/topic-search", params={"q": "الصبر"})
        self.assertEqual(response.status_code, 503)

    def test_provider_timeout_is_504(self):
        page_store = make_page_store(embeddings=[PageEmbedding(1, [1.0, 0.0])])
        provider = FakeEmbeddingProvider(error=ProviderTransientError("rate limited"))
        self.use_topic_service(provider, ExactLocalBackend(page_store), page_store)

        response = self.client.get("/topic-search", params={"q": "الصبر"})

        self.assertEqual(response.status_code, 504)
        self.assertIn("error", response.json())

    def test_blank_query(self):
        self.use_topic_service(NullEmbeddingProvider(), NullVectorBackend(), make_page_store())
        body = self.client.get("/topic-search", params={"q": " "}).json()
        self.assertEqual(body["results"], [])
        self.assertEqual(body["total"], 0)


class TestStatusAndFootnotes(APITestCase):

    def test_status_reports_components(self):
        app.dependency_overrides[get_embedding_provider] = lambda: NullEmbeddingProvider()
        app.dependency_overrides[get_vector_search] = lambda: VectorSearchOrchestrator(NullVectorBackend())

        body = self.client.get("/status").json()

        self.assertEqual(body["vectorBackend"], {"name": "none", "available": False})
        self.assertEqual(body["embeddingProvider"], {"name": "none", "available": False})
        self.assertFalse(body["readyForTopicSearch"])

    def test_render_footnote(self):
        response = self.client.post("/footnotes/render", json={"text": "(1) الكافي ج 8 ص 151"})
        self.assertEqual(response.status_code, 200)
        self.assertIn('href="/book/01348/8/151"', response.json()["html"])

    def test_render_footnote_escapes_markup(self):
        response = self.client.post("/footnotes/render", json={"text": "<img src=x onerror=alert('x')>"})
        self.assertNotIn("<img", response.json()["html"])
        self.assertTrue(response.json()["html"].startswith("&lt;img"))


if __name__ == "__main__":
    unittest.main()
