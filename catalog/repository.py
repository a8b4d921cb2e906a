"""
도서 카탈로그 저장소 (PostgreSQL)

books 테이블 CRUD를 담당합니다. 검색 인덱스 동기화는 하지 않으며,
커밋이 끝난 뒤 호출 측(CatalogService)이 DocumentSyncer를 부릅니다.
"""

import logging
from contextlib import contextmanager
from typing import Callable, List, Optional

from psycopg2.extras import RealDictCursor

from .db_connector import get_db_connection
from .models import BookInput, CatalogRecord, EDITABLE_FIELDS

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS books (
    id              BIGSERIAL PRIMARY KEY,
    title           VARCHAR(255) NOT NULL,
    author          VARCHAR(255) NOT NULL,
    publisher       VARCHAR(255),
    description     TEXT,
    isbn            VARCHAR(20) UNIQUE,
    price           INTEGER,
    published_date  DATE,
    category        VARCHAR(100),
    stock_quantity  INTEGER,
    cover_image_url VARCHAR(1000),
    created_at      TIMESTAMP NOT NULL DEFAULT now(),
    updated_at      TIMESTAMP NOT NULL DEFAULT now()
)
"""

_COLUMNS = ", ".join(EDITABLE_FIELDS)
_PLACEHOLDERS = ", ".join(f"%({name})s" for name in EDITABLE_FIELDS)
_ASSIGNMENTS = ", ".join(f"{name} = %({name})s" for name in EDITABLE_FIELDS)


class CatalogRepository:
    """
    books 테이블 저장소

    사용 예:
        repo = CatalogRepository()
        book = repo.insert(BookInput(title="클린 코드", author="로버트 C. 마틴"))
        all_books = repo.find_all()
    """

    def __init__(self, connection_factory: Optional[Callable] = None):
        """
        Args:
            connection_factory: psycopg2 연결을 반환하는 함수 (기본값: get_db_connection)
        """
        self._connection_factory = connection_factory or get_db_connection

    @contextmanager
    def _cursor(self):
        """트랜잭션 단위 커서 (정상 종료 시 커밋, 예외 시 롤백)"""
        conn = self._connection_factory()
        try:
            with conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    yield cursor
        finally:
            conn.close()

    def ensure_table(self) -> None:
        with self._cursor() as cursor:
            cursor.execute(CREATE_TABLE_SQL)
        logger.info("books table ready")

    def find_by_id(self, book_id: int) -> Optional[CatalogRecord]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM books WHERE id = %s", (book_id,))
            row = cursor.fetchone()
        return CatalogRecord.from_row(row) if row else None

    def find_all(self) -> List[CatalogRecord]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM books ORDER BY id")
            rows = cursor.fetchall()
        return [CatalogRecord.from_row(row) for row in rows]

    def count(self) -> int:
        with self._cursor() as cursor:
            cursor.execute("SELECT COUNT(*) AS cnt FROM books")
            row = cursor.fetchone()
        return row["cnt"] if row else 0

    def find_categories(self) -> List[str]:
        """등록된 카테고리 목록 (중복 제거, 정렬)"""
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT DISTINCT category FROM books WHERE category IS NOT NULL ORDER BY category"
            )
            rows = cursor.fetchall()
        return [row["category"] for row in rows]

    def insert(self, data: BookInput) -> CatalogRecord:
        with self._cursor() as cursor:
            cursor.execute(
                f"INSERT INTO books ({_COLUMNS}) VALUES ({_PLACEHOLDERS}) RETURNING *",
                data.to_params(),
            )
            row = cursor.fetchone()
        return CatalogRecord.from_row(row)

    def update(self, book_id: int, data: BookInput) -> Optional[CatalogRecord]:
        """수정된 레코드 반환 (해당 ID가 없으면 None)"""
        params = data.to_params()
        params["id"] = book_id
        with self._cursor() as cursor:
            cursor.execute(
                f"UPDATE books SET {_ASSIGNMENTS}, updated_at = now() WHERE id = %(id)s RETURNING *",
                params,
            )
            row = cursor.fetchone()
        return CatalogRecord.from_row(row) if row else None

    def delete(self, book_id: int) -> bool:
        """삭제 여부 반환"""
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM books WHERE id = %s", (book_id,))
            deleted = cursor.rowcount
        return deleted > 0
