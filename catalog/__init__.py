"""
도서 카탈로그 (PostgreSQL 원본 저장소)

- models: CatalogRecord, BookInput
- repository: books 테이블 CRUD
- service: 관계형 커밋 후 검색 인덱스 동기화
- bootstrap: 기동 시 인덱스 보장 + seed 로딩 + 벌크 인덱싱
"""

from .models import BookInput, CatalogRecord

__all__ = ["BookInput", "CatalogRecord"]
