"""
검색 엔진 연결 및 동기화 설정

환경 변수(.env 포함)에서 Elasticsearch 접속 정보와
벌크 인덱싱 튜닝 값을 읽어옵니다.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# 환경 변수 설정
ES_HOST = os.getenv("ES_HOST", "localhost")
ES_PORT = int(os.getenv("ES_PORT", "9200"))
ES_SCHEME = os.getenv("ES_SCHEME", "http")
ES_USERNAME = os.getenv("ES_USERNAME")
ES_PASSWORD = os.getenv("ES_PASSWORD")
ES_TIMEOUT = int(os.getenv("ES_TIMEOUT", "10"))
ES_MAX_RETRIES = int(os.getenv("ES_MAX_RETRIES", "3"))
ES_INDEX = os.getenv("ES_INDEX", "books")
ES_REFRESH = os.getenv("ES_REFRESH", "false").lower()

# 벌크 인덱싱 청크 크기 (문서 크기/클러스터 용량에 맞게 조정)
ES_BULK_CHUNK_SIZE = int(os.getenv("ES_BULK_CHUNK_SIZE", "100"))
ES_BULK_WORKERS = int(os.getenv("ES_BULK_WORKERS", "1"))

# 검색 페이지 설정
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

REFRESH_POLICIES = ("false", "true", "wait_for")


@dataclass
class SearchSettings:
    """검색 엔진 설정 묶음"""
    hosts: List[str] = field(default_factory=lambda: [f"{ES_SCHEME}://{ES_HOST}:{ES_PORT}"])
    index_name: str = ES_INDEX
    timeout: int = ES_TIMEOUT
    max_retries: int = ES_MAX_RETRIES
    username: Optional[str] = ES_USERNAME
    password: Optional[str] = ES_PASSWORD
    refresh: str = ES_REFRESH
    bulk_chunk_size: int = ES_BULK_CHUNK_SIZE
    bulk_workers: int = ES_BULK_WORKERS

    def __post_init__(self):
        if self.refresh not in REFRESH_POLICIES:
            raise ValueError(f"Invalid refresh policy: {self.refresh}. Valid: {list(REFRESH_POLICIES)}")
        if self.bulk_chunk_size < 1:
            raise ValueError(f"bulk_chunk_size must be >= 1, got {self.bulk_chunk_size}")
        if self.bulk_workers < 1:
            raise ValueError(f"bulk_workers must be >= 1, got {self.bulk_workers}")

    @property
    def basic_auth(self) -> Optional[tuple]:
        if self.username and self.password:
            return (self.username, self.password)
        return None

    @property
    def refresh_param(self):
        """elasticsearch 클라이언트에 넘길 refresh 값"""
        if self.refresh == "wait_for":
            return "wait_for"
        return self.refresh == "true"

    @classmethod
    def from_env(cls) -> "SearchSettings":
        """현재 환경 변수 기준 설정 생성"""
        return cls(
            hosts=[f"{os.getenv('ES_SCHEME', ES_SCHEME)}://{os.getenv('ES_HOST', ES_HOST)}:{os.getenv('ES_PORT', ES_PORT)}"],
            index_name=os.getenv("ES_INDEX", ES_INDEX),
            timeout=int(os.getenv("ES_TIMEOUT", ES_TIMEOUT)),
            max_retries=int(os.getenv("ES_MAX_RETRIES", ES_MAX_RETRIES)),
            username=os.getenv("ES_USERNAME", ES_USERNAME),
            password=os.getenv("ES_PASSWORD", ES_PASSWORD),
            refresh=os.getenv("ES_REFRESH", ES_REFRESH).lower(),
            bulk_chunk_size=int(os.getenv("ES_BULK_CHUNK_SIZE", ES_BULK_CHUNK_SIZE)),
            bulk_workers=int(os.getenv("ES_BULK_WORKERS", ES_BULK_WORKERS)),
        )
