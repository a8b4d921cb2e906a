"""
books 인덱스 스키마 정의

필드명 → 타입 → 분석기 매핑을 코드로 명시하고 버전을 붙여 관리합니다.
스키마를 바꾸면 SCHEMA_VERSION을 올리고 ESIndexManager.recreate_index() 후
전체 벌크 인덱싱을 다시 수행해야 합니다.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

SCHEMA_VERSION = 1

# Nori 한글 형태소 분석 설정
# 색인/검색 분석기가 같은 토크나이저를 공유해야 질의와 문서 토큰이 일치한다
ANALYSIS_SETTINGS: Dict[str, Any] = {
    "analysis": {
        "tokenizer": {
            "nori_mixed": {
                "type": "nori_tokenizer",
                "decompound_mode": "mixed",
            }
        },
        "analyzer": {
            "korean": {
                "type": "custom",
                "tokenizer": "nori_mixed",
                "filter": ["nori_part_of_speech", "nori_readingform", "lowercase"],
            },
            "korean_search": {
                "type": "custom",
                "tokenizer": "nori_mixed",
                "filter": ["nori_part_of_speech", "nori_readingform", "lowercase"],
            },
        },
    }
}


@dataclass(frozen=True)
class FieldSpec:
    """단일 필드 매핑"""
    name: str
    type: str
    analyzer: Optional[str] = None
    search_analyzer: Optional[str] = None
    index: bool = True
    format: Optional[str] = None

    def mapping(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"type": self.type}
        if self.analyzer:
            body["analyzer"] = self.analyzer
        if self.search_analyzer:
            body["search_analyzer"] = self.search_analyzer
        if not self.index:
            body["index"] = False
        if self.format:
            body["format"] = self.format
        return body


@dataclass(frozen=True)
class IndexSchema:
    """버전이 붙은 인덱스 스키마"""
    version: int
    fields: Tuple[FieldSpec, ...]
    settings: Dict[str, Any] = field(default_factory=dict)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def text_fields(self) -> List[str]:
        return [f.name for f in self.fields if f.type == "text"]

    def mappings(self) -> Dict[str, Any]:
        return {
            "dynamic": "strict",
            "_meta": {"schema_version": self.version},
            "properties": {f.name: f.mapping() for f in self.fields},
        }

    def body(self) -> Dict[str, Any]:
        """indices.create 요청 본문"""
        return {
            "settings": self.settings,
            "mappings": self.mappings(),
        }


BOOK_SCHEMA = IndexSchema(
    version=SCHEMA_VERSION,
    fields=(
        FieldSpec("id", "long"),
        # Full-text 검색 대상 (Nori)
        FieldSpec("title", "text", analyzer="korean", search_analyzer="korean_search"),
        FieldSpec("author", "text", analyzer="korean"),
        FieldSpec("description", "text", analyzer="korean"),
        # 정확한 값 필터링
        FieldSpec("publisher", "keyword"),
        FieldSpec("isbn", "keyword"),
        FieldSpec("category", "keyword"),
        # 범위 검색
        FieldSpec("price", "integer"),
        FieldSpec("stock_quantity", "integer"),
        # 범위 검색 및 정렬
        FieldSpec("published_date", "date", format="yyyy-MM-dd"),
        FieldSpec("created_at", "date"),
        FieldSpec("updated_at", "date"),
        # 표시 전용
        FieldSpec("cover_image_url", "keyword", index=False),
    ),
    settings=ANALYSIS_SETTINGS,
)

# 키워드 검색 필드와 가중치 (title > author > description)
KEYWORD_FIELDS = ("title^3", "author^2", "description")
