"""
기동 시 초기화 루틴

1) 검색 인덱스 존재 보장
2) DB에 도서가 없으면 seed JSON에서 초기 데이터 로딩
3) DB 전체 도서를 검색 인덱스에 벌크 인덱싱 (누락 데이터 동기화)

검색 엔진이 응답하지 않아도 기동은 계속됩니다 (검색만 저하 모드).
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from search.es_indices import ESIndexManager, IndexState
from search.es_migrator import BulkIndexer, BulkSyncStats

from .models import BookInput
from .repository import CatalogRepository

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).parent.parent / "data" / "books.json"
SEED_PATH = Path(os.getenv("CATALOG_SEED_PATH", str(DEFAULT_SEED_PATH)))


@dataclass
class BootstrapReport:
    """초기화 결과"""
    index_state: IndexState
    seeded: int
    stats: BulkSyncStats


def load_seed_books(path: Path = SEED_PATH) -> List[BookInput]:
    """seed JSON 파일 로드"""
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return [BookInput.from_dict(entry) for entry in raw]


def initialize(
    repository: CatalogRepository,
    index_manager: ESIndexManager,
    indexer: BulkIndexer,
    seed_path: Optional[Path] = SEED_PATH,
) -> BootstrapReport:
    """
    애플리케이션 기동 시 초기 데이터 로딩 및 검색 인덱스 동기화

    Args:
        repository: 도서 저장소
        index_manager: 인덱스 관리자
        indexer: 벌크 인덱서
        seed_path: seed JSON 경로 (None이면 seed 생략)

    Returns:
        BootstrapReport
    """
    # 1) 인덱스 생성 보장
    index_state = index_manager.ensure_index()
    if index_state == IndexState.UNAVAILABLE:
        logger.warning("Search engine unavailable at startup; catalog continues without search sync")

    # 2) DB가 비어 있으면 seed 로딩
    seeded = 0
    existing = repository.count()
    if existing == 0 and seed_path is not None:
        logger.info(f"Loading seed books from {seed_path}")
        for data in load_seed_books(seed_path):
            repository.insert(data)
            seeded += 1
        logger.info(f"Seed books loaded: {seeded}")
    else:
        logger.info(f"Catalog has {existing} books, skipping seed")

    # 3) 전체 벌크 인덱싱
    stats = indexer.sync_from_catalog(repository)

    return BootstrapReport(index_state=index_state, seeded=seeded, stats=stats)


def main(argv=None):
    """CLI 진입점"""
    import argparse

    from search.config import SearchSettings
    from search.es_client import create_es_client

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    parser = argparse.ArgumentParser(description="Book catalog startup routine")
    parser.add_argument("--seed", type=Path, default=SEED_PATH, help="Seed JSON path")
    parser.add_argument("--no-seed", action="store_true", help="Skip seed loading")

    args = parser.parse_args(argv)

    settings = SearchSettings.from_env()
    client = create_es_client(settings)
    repository = CatalogRepository()
    repository.ensure_table()

    try:
        report = initialize(
            repository,
            ESIndexManager(client=client, settings=settings),
            BulkIndexer(client=client, settings=settings),
            seed_path=None if args.no_seed else args.seed,
        )
        print(f"Index: {report.index_state.value}, seeded: {report.seeded}")
        print(f"Bulk sync: {report.stats}")
    finally:
        client.close()


if __name__ == "__main__":
    main()
