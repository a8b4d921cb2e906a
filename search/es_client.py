"""
Elasticsearch 클라이언트

books 인덱스 검색 실행기.
QueryBuilder가 만든 쿼리를 페이지 단위로 실행하고 전체 매칭 수를 함께 반환합니다.
검색 경로는 대체 데이터 소스가 없으므로 엔진 오류를 삼키지 않고
SearchExecutionError로 올립니다.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError, ConnectionError, NotFoundError, TransportError

from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, SearchSettings
from .errors import InvalidQueryError, SearchExecutionError
from .es_document import BookDocument
from .es_query import BookQueryBuilder, SearchCriteria

logger = logging.getLogger(__name__)

QueryLike = Union[BookQueryBuilder, SearchCriteria, Dict[str, Any]]


def create_es_client(settings: Optional[SearchSettings] = None) -> Elasticsearch:
    """설정 기반 동기 클라이언트 생성 (요청 타임아웃 필수)"""
    settings = settings or SearchSettings.from_env()
    return Elasticsearch(
        hosts=settings.hosts,
        basic_auth=settings.basic_auth,
        request_timeout=settings.timeout,
        retry_on_timeout=True,
        max_retries=settings.max_retries,
    )


@dataclass
class SearchPage:
    """검색 결과 한 페이지"""
    documents: List[BookDocument]
    total: int
    page: int
    page_size: int
    scores: List[Optional[float]] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return math.ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def is_empty(self) -> bool:
        return not self.documents


@dataclass
class AggregationResult:
    """집계 결과 데이터 클래스"""
    key: str
    doc_count: int


class ESSearchClient:
    """
    books 인덱스 검색 클라이언트

    사용 예:
        client = ESSearchClient()
        page = client.search_books(SearchCriteria(keyword="클린 코드"), page=0, page_size=10)
        print(page.total, [d.title for d in page.documents])
    """

    def __init__(
        self,
        client: Optional[Elasticsearch] = None,
        settings: Optional[SearchSettings] = None,
    ):
        """
        검색 클라이언트 초기화

        Args:
            client: 주입할 Elasticsearch 클라이언트 (없으면 settings로 생성)
            settings: 검색 엔진 설정 (기본값: 환경 변수)
        """
        self.settings = settings or SearchSettings.from_env()
        self.index_name = self.settings.index_name
        self._client = client

    @property
    def client(self) -> Elasticsearch:
        """동기 클라이언트 (lazy initialization)"""
        if self._client is None:
            self._client = create_es_client(self.settings)
        return self._client

    def is_available(self) -> bool:
        """ES 연결 상태 확인"""
        try:
            return bool(self.client.ping())
        except (ConnectionError, TransportError):
            logger.warning("Elasticsearch connection failed")
            return False

    def _resolve(self, query: QueryLike):
        """쿼리 입력을 (query 절, 기본 정렬)로 정규화"""
        if isinstance(query, SearchCriteria):
            query = query.to_builder()
        if isinstance(query, BookQueryBuilder):
            return query.build(), query.sort()
        if isinstance(query, dict):
            return query, ["_score", {"id": "asc"}]
        raise InvalidQueryError(f"Unsupported query type: {type(query).__name__}")

    def search(
        self,
        query: QueryLike,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort: Optional[List[Any]] = None,
    ) -> SearchPage:
        """
        검색 실행

        Args:
            query: BookQueryBuilder, SearchCriteria 또는 ES query 절(dict)
            page: 0부터 시작하는 페이지 번호
            page_size: 페이지 크기 (1 ~ MAX_PAGE_SIZE)
            sort: 정렬 기준 (기본값: 빌더가 정한 정렬)

        Returns:
            SearchPage (해당 페이지 문서 + 전체 매칭 수)

        Raises:
            InvalidQueryError: 페이지 파라미터가 잘못된 경우
            SearchExecutionError: 엔진 오류 (인덱스 없음, 연결 실패 등)
        """
        if page < 0:
            raise InvalidQueryError(f"page must be >= 0, got {page}")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise InvalidQueryError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")

        query_body, default_sort = self._resolve(query)

        try:
            response = self.client.search(
                index=self.index_name,
                query=query_body,
                from_=page * page_size,
                size=page_size,
                sort=sort or default_sort,
                track_total_hits=True,
            )
        except NotFoundError as e:
            logger.error(f"Index not found: {self.index_name}")
            raise SearchExecutionError(
                f"Index not found: {self.index_name}",
                index=self.index_name,
                details={"cause": str(e)},
            ) from e
        except (ApiError, TransportError) as e:
            logger.error(f"ES search error: {e}")
            raise SearchExecutionError(
                f"Search failed on {self.index_name}: {e}",
                index=self.index_name,
                details={"cause": str(e)},
            ) from e

        hits = response["hits"]["hits"]
        documents = [BookDocument.from_source(hit["_source"], hit.get("_id")) for hit in hits]
        scores = [hit.get("_score") for hit in hits]
        total = response["hits"]["total"]["value"]

        logger.info(f"ES search: index={self.index_name}, page={page}, hits={len(documents)}, total={total}")

        return SearchPage(
            documents=documents,
            total=total,
            page=page,
            page_size=page_size,
            scores=scores,
        )

    def search_books(
        self,
        criteria: SearchCriteria,
        page: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> SearchPage:
        """검색 조건으로 바로 검색"""
        return self.search(criteria, page=page, page_size=page_size)

    def category_counts(self, limit: int = 20) -> List[AggregationResult]:
        """카테고리별 문서 수 집계"""
        try:
            response = self.client.search(
                index=self.index_name,
                size=0,
                aggs={"by_category": {"terms": {"field": "category", "size": limit}}},
            )
        except (ApiError, TransportError) as e:
            logger.error(f"ES aggregation error: {e}")
            raise SearchExecutionError(
                f"Aggregation failed on {self.index_name}: {e}",
                index=self.index_name,
                details={"cause": str(e)},
            ) from e

        buckets = response["aggregations"]["by_category"]["buckets"]
        return [AggregationResult(key=b["key"], doc_count=b["doc_count"]) for b in buckets]

    def close(self):
        """클라이언트 연결 종료"""
        if self._client:
            self._client.close()
            self._client = None
