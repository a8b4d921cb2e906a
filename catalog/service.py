"""
도서 카탈로그 서비스

관계형 변경을 먼저 커밋한 뒤 검색 인덱스에 최선 노력(best-effort)으로 반영합니다.
두 저장소는 하나의 트랜잭션으로 묶이지 않으며(2PC 없음),
동기화 실패는 MutationResult.sync에 DEGRADED로 남고 다음 벌크 인덱싱에서 복구됩니다.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from search.es_sync import DocumentSyncer, SyncResult

from .models import BookInput, CatalogRecord
from .repository import CatalogRepository

logger = logging.getLogger(__name__)


class BookNotFoundError(LookupError):
    """해당 ID의 도서가 없음"""

    def __init__(self, book_id: int):
        self.book_id = book_id
        super().__init__(f"Book not found: id={book_id}")


@dataclass
class MutationResult:
    """관계형 변경 결과 + 검색 동기화 결과"""
    record: Optional[CatalogRecord]
    sync: SyncResult

    @property
    def search_degraded(self) -> bool:
        return self.sync.degraded


class CatalogService:
    """
    도서 CRUD + 검색 동기화

    사용 예:
        service = CatalogService(CatalogRepository(), DocumentSyncer())
        result = service.create_book(BookInput(title="클린 코드", author="로버트 C. 마틴"))
        if result.search_degraded:
            ...  # 카탈로그는 저장됨, 검색 반영만 지연
    """

    def __init__(self, repository: CatalogRepository, syncer: DocumentSyncer):
        self.repository = repository
        self.syncer = syncer

    def get_book(self, book_id: int) -> CatalogRecord:
        record = self.repository.find_by_id(book_id)
        if record is None:
            raise BookNotFoundError(book_id)
        return record

    def list_books(self) -> List[CatalogRecord]:
        return self.repository.find_all()

    def list_categories(self) -> List[str]:
        return self.repository.find_categories()

    def count(self) -> int:
        return self.repository.count()

    def create_book(self, data: BookInput) -> MutationResult:
        record = self.repository.insert(data)
        logger.info(f"Book created: id={record.id}, title={record.title}")
        return MutationResult(record=record, sync=self.syncer.upsert(record))

    def update_book(self, book_id: int, data: BookInput) -> MutationResult:
        record = self.repository.update(book_id, data)
        if record is None:
            raise BookNotFoundError(book_id)
        logger.info(f"Book updated: id={record.id}, title={record.title}")
        return MutationResult(record=record, sync=self.syncer.upsert(record))

    def delete_book(self, book_id: int) -> MutationResult:
        if not self.repository.delete(book_id):
            raise BookNotFoundError(book_id)
        logger.info(f"Book deleted: id={book_id}")
        return MutationResult(record=None, sync=self.syncer.remove(book_id))
