"""
CatalogRecord → 검색 문서 변환

레코드의 모든 속성을 1:1로 복사하며 None 값도 그대로 유지합니다.
문서 _id는 레코드 PK를 그대로 사용하여 두 저장소 간 조인 키로 씁니다.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Optional

from catalog.models import CatalogRecord


@dataclass(frozen=True)
class BookDocument:
    """books 인덱스 문서"""
    id: int
    title: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    description: Optional[str] = None
    isbn: Optional[str] = None
    price: Optional[int] = None
    published_date: Optional[date] = None
    category: Optional[str] = None
    stock_quantity: Optional[int] = None
    cover_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: CatalogRecord) -> "BookDocument":
        """CatalogRecord → BookDocument (입력 레코드는 변경하지 않음)"""
        return cls(
            id=record.id,
            title=record.title,
            author=record.author,
            publisher=record.publisher,
            description=record.description,
            isbn=record.isbn,
            price=record.price,
            published_date=record.published_date,
            category=record.category,
            stock_quantity=record.stock_quantity,
            cover_image_url=record.cover_image_url,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    @property
    def doc_id(self) -> str:
        return str(self.id)

    def to_source(self) -> Dict[str, Any]:
        """ES _source 본문 (날짜는 ISO-8601 문자열)"""
        source = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            source[f.name] = value
        return source

    @classmethod
    def from_source(cls, source: Dict[str, Any], doc_id: Optional[str] = None) -> "BookDocument":
        """검색 히트의 _source에서 문서 복원"""
        raw_id = source.get("id")
        if raw_id is None:
            raw_id = doc_id

        return cls(
            id=int(raw_id),
            title=source.get("title"),
            author=source.get("author"),
            publisher=source.get("publisher"),
            description=source.get("description"),
            isbn=source.get("isbn"),
            price=source.get("price"),
            published_date=_parse_date(source.get("published_date")),
            category=source.get("category"),
            stock_quantity=source.get("stock_quantity"),
            cover_image_url=source.get("cover_image_url"),
            created_at=_parse_datetime(source.get("created_at")),
            updated_at=_parse_datetime(source.get("updated_at")),
        )


def to_document(record: CatalogRecord) -> BookDocument:
    return BookDocument.from_record(record)


def _parse_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # ES가 돌려주는 'Z' 접미사 처리
    if isinstance(value, str) and value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
