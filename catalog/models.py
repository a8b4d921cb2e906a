"""
도서 카탈로그 레코드 모델

PostgreSQL books 테이블의 한 행에 대응합니다.
검색 인덱스는 이 레코드의 파생 사본이며, 원본은 항상 관계형 저장소입니다.
"""

from dataclasses import dataclass, fields, asdict
from datetime import date, datetime
from typing import Any, Dict, Optional


@dataclass
class CatalogRecord:
    """도서 원본 레코드"""
    title: str
    author: str
    id: Optional[int] = None
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
    def from_row(cls, row: Dict[str, Any]) -> "CatalogRecord":
        """DB 조회 결과(dict 형태 행)에서 레코드 생성"""
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in names})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# 관리자 입력으로 수정 가능한 컬럼 (id, 타임스탬프는 DB가 관리)
EDITABLE_FIELDS = (
    "title",
    "author",
    "publisher",
    "description",
    "isbn",
    "price",
    "published_date",
    "category",
    "stock_quantity",
    "cover_image_url",
)


@dataclass
class BookInput:
    """도서 등록/수정 입력값"""
    title: str
    author: str
    publisher: Optional[str] = None
    description: Optional[str] = None
    isbn: Optional[str] = None
    price: Optional[int] = None
    published_date: Optional[date] = None
    category: Optional[str] = None
    stock_quantity: Optional[int] = None
    cover_image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookInput":
        """
        JSON 유사 dict에서 입력값 생성

        camelCase 키(publishedDate 등)도 허용하며,
        published_date는 'yyyy-MM-dd' 문자열을 date로 변환합니다.
        """
        normalized = {_snake_case(k): v for k, v in data.items()}
        values = {k: normalized.get(k) for k in EDITABLE_FIELDS}

        if not values["title"] or not values["author"]:
            raise ValueError("title and author are required")

        published = values["published_date"]
        if isinstance(published, str):
            values["published_date"] = date.fromisoformat(published) if published else None

        return cls(**values)

    def to_params(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}


def _snake_case(name: str) -> str:
    chars = []
    for ch in name:
        if ch.isupper():
            chars.append("_")
            chars.append(ch.lower())
        else:
            chars.append(ch)
    return "".join(chars)
