"""
검색 문서 매퍼 테스트
- 모든 필드 1:1 복사 (None 포함)
- 입력 레코드 불변
- _source 직렬화/복원
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import copy
from dataclasses import fields
from datetime import date, datetime

from catalog.models import CatalogRecord
from search.es_document import BookDocument, to_document
from search.es_schema import BOOK_SCHEMA


class TestFromRecord:
    """CatalogRecord → BookDocument"""

    def test_copies_every_field(self, clean_code):
        doc = BookDocument.from_record(clean_code)

        for f in fields(CatalogRecord):
            assert getattr(doc, f.name) == getattr(clean_code, f.name), f"{f.name} 값이 같아야 함"

    def test_document_key_is_record_key(self, clean_code):
        doc = to_document(clean_code)

        assert doc.id == clean_code.id
        assert doc.doc_id == "1"

    def test_keeps_none_values(self):
        record = CatalogRecord(id=7, title="제목", author="저자")

        doc = BookDocument.from_record(record)

        assert doc.publisher is None
        assert doc.price is None
        assert doc.published_date is None
        assert doc.cover_image_url is None

    def test_does_not_mutate_input(self, clean_code):
        before = copy.deepcopy(clean_code)

        BookDocument.from_record(clean_code)

        assert clean_code == before


class TestSource:
    """_source 직렬화"""

    def test_dates_serialized_iso(self, clean_code):
        source = to_document(clean_code).to_source()

        assert source["published_date"] == "2008-08-01"
        assert source["created_at"] == "2024-01-01T09:00:00"
        assert source["updated_at"] == "2024-01-02T10:30:00"

    def test_source_keys_match_schema(self, clean_code):
        source = to_document(clean_code).to_source()

        assert set(source.keys()) == set(BOOK_SCHEMA.field_names())

    def test_null_fields_are_explicit(self):
        source = to_document(CatalogRecord(id=3, title="t", author="a")).to_source()

        assert "isbn" in source
        assert source["isbn"] is None

    def test_from_source_restores_document(self, clean_code):
        doc = to_document(clean_code)

        restored = BookDocument.from_source(doc.to_source())

        assert restored == doc

    def test_from_source_uses_hit_id_when_missing(self):
        restored = BookDocument.from_source({"title": "t", "author": "a"}, doc_id="42")

        assert restored.id == 42

    def test_from_source_accepts_utc_suffix(self):
        restored = BookDocument.from_source({"id": 1, "created_at": "2024-01-01T00:00:00Z"})

        assert restored.created_at.year == 2024
        assert restored.created_at.utcoffset().total_seconds() == 0

    def test_published_date_is_date(self):
        restored = BookDocument.from_source({"id": 1, "published_date": "2020-04-01"})

        assert restored.published_date == date(2020, 4, 1)
        assert not isinstance(restored.published_date, datetime)
