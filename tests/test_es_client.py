"""
검색 실행기 테스트 (Mock 기반)
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from elasticsearch.exceptions import BadRequestError, ConnectionError

from search.errors import InvalidQueryError, SearchExecutionError
from search.es_client import ESSearchClient, SearchPage
from search.es_document import to_document
from search.es_query import BookQueryBuilder, SearchCriteria

from conftest import make_api_error


def _response(sources, total=None):
    return {
        "hits": {
            "total": {"value": len(sources) if total is None else total, "relation": "eq"},
            "hits": [
                {"_index": "books_test", "_id": str(s["id"]), "_score": 1.0, "_source": s}
                for s in sources
            ],
        }
    }


@pytest.fixture
def search_client(es_client, settings):
    return ESSearchClient(client=es_client, settings=settings)


class TestSearch:
    """검색 실행"""

    def test_returns_documents_and_total(self, search_client, es_client, clean_code):
        # Given
        es_client.search.return_value = _response([to_document(clean_code).to_source()], total=37)

        # When
        page = search_client.search(BookQueryBuilder().keyword("Clean Code"), page=2, page_size=10)

        # Then
        assert page.documents == [to_document(clean_code)]
        assert page.total == 37
        assert page.total_pages == 4
        assert page.has_next
        assert page.has_previous

    def test_page_window_and_total_tracking(self, search_client, es_client):
        es_client.search.return_value = _response([])

        search_client.search(BookQueryBuilder(), page=3, page_size=20)

        kwargs = es_client.search.call_args.kwargs
        assert kwargs["index"] == "books_test"
        assert kwargs["from_"] == 60
        assert kwargs["size"] == 20
        assert kwargs["track_total_hits"] is True
        assert kwargs["query"] == {"match_all": {}}

    def test_zero_matches_is_empty_page(self, search_client, es_client):
        es_client.search.return_value = _response([])

        page = search_client.search(SearchCriteria(keyword="없는책"))

        assert page.is_empty
        assert page.total == 0
        assert page.total_pages == 0
        assert not page.has_next

    def test_accepts_criteria(self, search_client, es_client):
        es_client.search.return_value = _response([])

        search_client.search_books(SearchCriteria(category="IT", min_price=10000, max_price=20000))

        query = es_client.search.call_args.kwargs["query"]
        assert {"term": {"category": "IT"}} in query["bool"]["filter"]

    def test_accepts_raw_query(self, search_client, es_client):
        es_client.search.return_value = _response([])

        search_client.search({"term": {"isbn": "9780132350884"}})

        assert es_client.search.call_args.kwargs["query"] == {"term": {"isbn": "9780132350884"}}

    def test_builder_sort_used(self, search_client, es_client):
        es_client.search.return_value = _response([])

        search_client.search(BookQueryBuilder().keyword("코드"))

        assert es_client.search.call_args.kwargs["sort"][0] == "_score"

    def test_unsupported_query_type(self, search_client):
        with pytest.raises(InvalidQueryError):
            search_client.search("title:코드")


class TestPaging:
    """페이지 파라미터 검증"""

    @pytest.mark.parametrize("page,page_size", [(-1, 10), (0, 0), (0, 101)])
    def test_invalid_paging_rejected_before_io(self, search_client, es_client, page, page_size):
        with pytest.raises(InvalidQueryError):
            search_client.search(BookQueryBuilder(), page=page, page_size=page_size)

        es_client.search.assert_not_called()

    def test_total_pages_rounds_up(self):
        page = SearchPage(documents=[], total=21, page=0, page_size=10)

        assert page.total_pages == 3


class TestSearchErrors:
    """검색 경로 오류는 예외로 전달"""

    def test_missing_index_raises(self, search_client, es_client):
        es_client.search.side_effect = make_api_error(status=404, message="index_not_found_exception")

        with pytest.raises(SearchExecutionError) as exc_info:
            search_client.search(BookQueryBuilder())

        assert exc_info.value.index == "books_test"
        assert exc_info.value.to_dict()["operation"] == "search"

    def test_connection_error_raises(self, search_client, es_client):
        es_client.search.side_effect = ConnectionError("connection refused")

        with pytest.raises(SearchExecutionError):
            search_client.search(SearchCriteria(keyword="코드"))

    def test_bad_request_raises(self, search_client, es_client):
        es_client.search.side_effect = make_api_error(BadRequestError, 400, "parsing_exception")

        with pytest.raises(SearchExecutionError):
            search_client.search(BookQueryBuilder())


class TestAggregationAndHealth:
    """집계 및 상태 확인"""

    def test_category_counts(self, search_client, es_client):
        es_client.search.return_value = {
            "aggregations": {"by_category": {"buckets": [{"key": "IT", "doc_count": 4}, {"key": "문학", "doc_count": 2}]}}
        }

        counts = search_client.category_counts()

        assert [(c.key, c.doc_count) for c in counts] == [("IT", 4), ("문학", 2)]

    def test_category_counts_error_raises(self, search_client, es_client):
        es_client.search.side_effect = ConnectionError("down")

        with pytest.raises(SearchExecutionError):
            search_client.category_counts()

    def test_is_available_false_on_connection_error(self, search_client, es_client):
        es_client.ping.side_effect = ConnectionError("down")

        assert search_client.is_available() is False
