"""
도서 검색 쿼리 빌더

키워드(multi_match), 카테고리/출판사(term), 가격 범위(range) 조건을
bool 쿼리로 조합합니다. 실행은 ESSearchClient가 담당합니다.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import InvalidQueryError
from .es_schema import KEYWORD_FIELDS


@dataclass
class SearchCriteria:
    """검색 조건 (모든 값은 선택)"""
    keyword: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    publisher: Optional[str] = None

    def to_builder(self) -> "BookQueryBuilder":
        return BookQueryBuilder.from_criteria(self)


class BookQueryBuilder:
    """
    books 인덱스 검색 쿼리 빌더

    조건은 모두 AND로 결합되며, 조건이 없으면 전체 문서(match_all)를 찾습니다.

    사용 예:
        query = (
            BookQueryBuilder()
            .keyword("클린 코드")
            .category("IT")
            .price_range(10000, 30000)
            .build()
        )
    """

    def __init__(self):
        self._keyword: Optional[str] = None
        self._filters: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def from_criteria(cls, criteria: SearchCriteria) -> "BookQueryBuilder":
        return (
            cls()
            .keyword(criteria.keyword)
            .category(criteria.category)
            .publisher(criteria.publisher)
            .price_range(criteria.min_price, criteria.max_price)
        )

    def keyword(self, text: Optional[str]) -> "BookQueryBuilder":
        """키워드 조건 (빈 문자열/공백만 있으면 조건 없음)"""
        if text is None or not text.strip():
            self._keyword = None
        else:
            self._keyword = text.strip()
        return self

    def category(self, value: Optional[str]) -> "BookQueryBuilder":
        return self._term("category", value)

    def publisher(self, value: Optional[str]) -> "BookQueryBuilder":
        return self._term("publisher", value)

    def price_range(
        self,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
    ) -> "BookQueryBuilder":
        """가격 범위 조건 (경계 포함, 한쪽 생략 가능)"""
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidQueryError(
                f"min_price ({min_price}) must not exceed max_price ({max_price})",
                details={"min_price": min_price, "max_price": max_price},
            )

        bounds = {}
        if min_price is not None:
            bounds["gte"] = min_price
        if max_price is not None:
            bounds["lte"] = max_price

        if bounds:
            self._filters["price"] = {"range": {"price": bounds}}
        else:
            self._filters.pop("price", None)
        return self

    def _term(self, field: str, value: Optional[str]) -> "BookQueryBuilder":
        if value is None or not str(value).strip():
            self._filters.pop(field, None)
        else:
            self._filters[field] = {"term": {field: str(value).strip()}}
        return self

    @property
    def has_keyword(self) -> bool:
        return self._keyword is not None

    @property
    def is_empty(self) -> bool:
        return self._keyword is None and not self._filters

    def build(self) -> Dict[str, Any]:
        """ES query 절 생성"""
        if self.is_empty:
            return {"match_all": {}}

        query_body: Dict[str, Any] = {"bool": {}}

        if self._keyword is not None:
            query_body["bool"]["must"] = [
                {
                    "multi_match": {
                        "query": self._keyword,
                        "fields": list(KEYWORD_FIELDS),
                        "type": "best_fields",
                    }
                }
            ]

        if self._filters:
            query_body["bool"]["filter"] = list(self._filters.values())

        return query_body

    def sort(self) -> List[Any]:
        """키워드가 있으면 관련성 순, 없으면 최근 수정 순"""
        if self.has_keyword:
            return ["_score", {"id": "asc"}]
        return [
            {"updated_at": {"order": "desc", "missing": "_last"}},
            {"id": "asc"},
        ]
