# Book Search Sync Module
"""
Elasticsearch 기반 도서 검색 동기화 모듈

PostgreSQL 도서 카탈로그(원본)를 Nori 한글 형태소 분석 인덱스로
미러링하고, 키워드/카테고리/가격 범위 검색을 제공합니다.

주요 컴포넌트:
- es_schema: 버전이 붙은 인덱스 스키마 (매핑, 분석기)
- es_document: CatalogRecord → 검색 문서 변환
- es_indices: 인덱스 생성/재생성/상태 관리
- es_sync: 단건 upsert/삭제 동기화 (실패 시 저하 모드)
- es_migrator: 청크 단위 벌크 인덱싱
- es_query: 검색 쿼리 빌더
- es_client: 검색 실행 (페이지 + 전체 건수)
"""

from .es_client import ESSearchClient, SearchPage
from .es_document import BookDocument
from .es_indices import ESIndexManager, IndexState
from .es_migrator import BulkIndexer, BulkSyncStats
from .es_query import BookQueryBuilder, SearchCriteria
from .es_sync import DocumentSyncer, SyncResult, SyncStatus

__all__ = [
    "ESSearchClient",
    "SearchPage",
    "BookDocument",
    "ESIndexManager",
    "IndexState",
    "BulkIndexer",
    "BulkSyncStats",
    "BookQueryBuilder",
    "SearchCriteria",
    "DocumentSyncer",
    "SyncResult",
    "SyncStatus",
]
