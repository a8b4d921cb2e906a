"""
도서 카탈로그 테스트
- 입력값 변환
- 저장소 SQL (psycopg2 연결 Mock)
- 서비스: 관계형 커밋 후 검색 동기화, 동기화 실패는 카탈로그 작업을 막지 않음
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date
from unittest.mock import MagicMock

import pytest

from catalog.models import BookInput, CatalogRecord
from catalog.repository import CatalogRepository
from catalog.service import BookNotFoundError, CatalogService
from search.es_sync import SyncResult, SyncStatus


class TestBookInput:
    """입력값 변환"""

    def test_from_camel_case_dict(self):
        data = BookInput.from_dict({
            "title": "클린 코드",
            "author": "로버트 C. 마틴",
            "publishedDate": "2013-12-24",
            "stockQuantity": 25,
            "coverImageUrl": "https://example.com/c.jpg",
        })

        assert data.published_date == date(2013, 12, 24)
        assert data.stock_quantity == 25
        assert data.cover_image_url == "https://example.com/c.jpg"
        assert data.publisher is None

    def test_title_and_author_required(self):
        with pytest.raises(ValueError):
            BookInput.from_dict({"title": "제목만"})

    def test_record_from_row_ignores_unknown_columns(self):
        record = CatalogRecord.from_row({"id": 1, "title": "t", "author": "a", "extra": "x"})

        assert record.id == 1
        assert not hasattr(record, "extra")


@pytest.fixture
def cursor():
    return MagicMock()


@pytest.fixture
def repository(cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return CatalogRepository(connection_factory=lambda: conn)


class TestCatalogRepository:
    """books 테이블 저장소"""

    def test_find_by_id(self, repository, cursor):
        cursor.fetchone.return_value = {"id": 3, "title": "t", "author": "a", "price": 1000}

        record = repository.find_by_id(3)

        assert record == CatalogRecord(id=3, title="t", author="a", price=1000)
        assert cursor.execute.call_args.args[1] == (3,)

    def test_find_by_id_missing(self, repository, cursor):
        cursor.fetchone.return_value = None

        assert repository.find_by_id(404) is None

    def test_find_all_ordered(self, repository, cursor):
        cursor.fetchall.return_value = [
            {"id": 1, "title": "a", "author": "x"},
            {"id": 2, "title": "b", "author": "y"},
        ]

        records = repository.find_all()

        assert [r.id for r in records] == [1, 2]
        assert "ORDER BY id" in cursor.execute.call_args.args[0]

    def test_insert_returns_created_row(self, repository, cursor):
        cursor.fetchone.return_value = {"id": 10, "title": "t", "author": "a"}

        record = repository.insert(BookInput(title="t", author="a"))

        sql, params = cursor.execute.call_args.args
        assert sql.startswith("INSERT INTO books")
        assert "RETURNING *" in sql
        assert params["title"] == "t"
        assert record.id == 10

    def test_update_missing_returns_none(self, repository, cursor):
        cursor.fetchone.return_value = None

        assert repository.update(5, BookInput(title="t", author="a")) is None
        assert cursor.execute.call_args.args[1]["id"] == 5

    def test_delete_reports_rowcount(self, repository, cursor):
        cursor.rowcount = 0

        assert repository.delete(5) is False

    def test_categories(self, repository, cursor):
        cursor.fetchall.return_value = [{"category": "IT"}, {"category": "문학"}]

        assert repository.find_categories() == ["IT", "문학"]


@pytest.fixture
def fake_repository():
    return MagicMock()


@pytest.fixture
def fake_syncer():
    syncer = MagicMock()
    syncer.upsert.side_effect = lambda record: SyncResult("upsert", str(record.id), SyncStatus.SYNCED)
    syncer.remove.side_effect = lambda key: SyncResult("remove", str(key), SyncStatus.SYNCED, found=True)
    return syncer


class TestCatalogService:
    """관계형 커밋 → 검색 동기화"""

    def test_create_then_upsert(self, fake_repository, fake_syncer):
        # Given
        created = CatalogRecord(id=1, title="t", author="a")
        fake_repository.insert.return_value = created
        service = CatalogService(fake_repository, fake_syncer)

        # When
        result = service.create_book(BookInput(title="t", author="a"))

        # Then
        fake_syncer.upsert.assert_called_once_with(created)
        assert result.record == created
        assert not result.search_degraded

    def test_sync_failure_does_not_fail_mutation(self, fake_repository, fake_syncer):
        created = CatalogRecord(id=1, title="t", author="a")
        fake_repository.insert.return_value = created
        fake_syncer.upsert.side_effect = None
        fake_syncer.upsert.return_value = SyncResult("upsert", "1", SyncStatus.DEGRADED, error="connection refused")
        service = CatalogService(fake_repository, fake_syncer)

        result = service.create_book(BookInput(title="t", author="a"))

        assert result.record == created
        assert result.search_degraded

    def test_update_then_upsert(self, fake_repository, fake_syncer):
        updated = CatalogRecord(id=2, title="new", author="a")
        fake_repository.update.return_value = updated
        service = CatalogService(fake_repository, fake_syncer)

        result = service.update_book(2, BookInput(title="new", author="a"))

        fake_syncer.upsert.assert_called_once_with(updated)
        assert result.record.title == "new"

    def test_update_missing_raises_without_sync(self, fake_repository, fake_syncer):
        fake_repository.update.return_value = None
        service = CatalogService(fake_repository, fake_syncer)

        with pytest.raises(BookNotFoundError):
            service.update_book(9, BookInput(title="t", author="a"))

        fake_syncer.upsert.assert_not_called()

    def test_delete_then_remove(self, fake_repository, fake_syncer):
        fake_repository.delete.return_value = True
        service = CatalogService(fake_repository, fake_syncer)

        result = service.delete_book(3)

        fake_syncer.remove.assert_called_once_with(3)
        assert result.record is None
        assert result.sync.ok

    def test_delete_missing_raises_without_sync(self, fake_repository, fake_syncer):
        fake_repository.delete.return_value = False
        service = CatalogService(fake_repository, fake_syncer)

        with pytest.raises(BookNotFoundError):
            service.delete_book(3)

        fake_syncer.remove.assert_not_called()

    def test_relational_error_propagates_before_sync(self, fake_repository, fake_syncer):
        fake_repository.insert.side_effect = RuntimeError("unique violation")
        service = CatalogService(fake_repository, fake_syncer)

        with pytest.raises(RuntimeError):
            service.create_book(BookInput(title="t", author="a"))

        fake_syncer.upsert.assert_not_called()

    def test_get_book_missing(self, fake_repository, fake_syncer):
        fake_repository.find_by_id.return_value = None

        with pytest.raises(BookNotFoundError):
            CatalogService(fake_repository, fake_syncer).get_book(1)
