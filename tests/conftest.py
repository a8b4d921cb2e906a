"""
pytest 공통 fixture 정의
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from elasticsearch.exceptions import NotFoundError

from catalog.models import CatalogRecord
from search.config import SearchSettings


def make_api_error(cls=NotFoundError, status: int = 404, message: str = "error"):
    """ES ApiError 계열 예외 생성 (meta는 Mock)"""
    return cls(message, meta=MagicMock(status=status), body={"error": message})


@pytest.fixture
def settings():
    """테스트용 검색 설정"""
    return SearchSettings(
        hosts=["http://localhost:9200"],
        index_name="books_test",
        timeout=5,
        max_retries=0,
        refresh="false",
        bulk_chunk_size=100,
        bulk_workers=1,
    )


@pytest.fixture
def es_client():
    """Elasticsearch 클라이언트 Mock"""
    return MagicMock()


@pytest.fixture
def clean_code():
    """테스트용 도서 레코드"""
    return CatalogRecord(
        id=1,
        title="Clean Code",
        author="Robert Martin",
        publisher="Prentice Hall",
        description="A handbook of agile software craftsmanship",
        isbn="9780132350884",
        price=30000,
        published_date=date(2008, 8, 1),
        category="IT",
        stock_quantity=12,
        cover_image_url="https://example.com/covers/clean-code.jpg",
        created_at=datetime(2024, 1, 1, 9, 0, 0),
        updated_at=datetime(2024, 1, 2, 10, 30, 0),
    )


@pytest.fixture
def make_records():
    """id 1..n 레코드 목록 생성기"""
    def _make(n: int, **overrides):
        return [
            CatalogRecord(
                id=i,
                title=f"도서 {i}",
                author=f"저자 {i}",
                price=10000 + i,
                category="IT",
                **overrides,
            )
            for i in range(1, n + 1)
        ]
    return _make
