"""
PostgreSQL → Elasticsearch 벌크 인덱서

관계형 저장소의 도서 레코드 전체(또는 일부)를 청크 단위로 나눠
books 인덱스에 다시 인덱싱합니다. 기동 시 누락 데이터 동기화와
장애 복구에 사용합니다.

청크 하나가 실패해도 로그만 남기고 다음 청크를 계속 처리합니다.
문서는 전체 덮어쓰기이므로 몇 번을 다시 실행해도 결과가 같습니다.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError, TransportError
from elasticsearch.helpers import BulkIndexError, bulk

from catalog.models import CatalogRecord

from .config import SearchSettings
from .es_client import create_es_client
from .es_document import BookDocument

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class BulkSyncStats:
    """벌크 인덱싱 통계"""
    index: str
    total: int
    synced: int
    failed: int
    failed_chunks: int
    elapsed_seconds: float

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.synced / self.total) * 100

    def __str__(self) -> str:
        return (
            f"{self.index}: "
            f"{self.synced:,}/{self.total:,} "
            f"({self.success_rate:.1f}%) "
            f"failed_chunks={self.failed_chunks} "
            f"in {self.elapsed_seconds:.1f}s"
        )


@dataclass
class _ChunkResult:
    start: int
    end: int
    size: int
    ok: bool


class BulkIndexer:
    """
    도서 레코드 벌크 인덱서

    사용 예:
        indexer = BulkIndexer()
        stats = indexer.bulk_sync(repository.find_all())
        print(stats)
    """

    def __init__(
        self,
        client: Optional[Elasticsearch] = None,
        settings: Optional[SearchSettings] = None,
        chunk_size: Optional[int] = None,
        workers: Optional[int] = None,
    ):
        """
        벌크 인덱서 초기화

        Args:
            client: 주입할 Elasticsearch 클라이언트
            settings: 검색 엔진 설정
            chunk_size: 청크 크기 (기본값: ES_BULK_CHUNK_SIZE)
            workers: 동시 처리 청크 수 (기본값: ES_BULK_WORKERS, 1이면 순차)
        """
        self.settings = settings or SearchSettings.from_env()
        self.index_name = self.settings.index_name
        self.chunk_size = chunk_size if chunk_size is not None else self.settings.bulk_chunk_size
        self.workers = workers if workers is not None else self.settings.bulk_workers
        self._client = client

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    @property
    def client(self) -> Elasticsearch:
        if self._client is None:
            self._client = create_es_client(self.settings)
        return self._client

    def _build_actions(self, chunk: Sequence[CatalogRecord]) -> List[Dict[str, Any]]:
        actions = []
        for record in chunk:
            if record.id is None:
                raise ValueError(f"record has no id (title={record.title})")
            document = BookDocument.from_record(record)
            actions.append({
                "_op_type": "index",
                "_index": self.index_name,
                "_id": document.doc_id,
                "_source": document.to_source(),
            })
        return actions

    def _sync_chunk(
        self,
        client: Elasticsearch,
        chunk: Sequence[CatalogRecord],
        start: int,
        total: int,
    ) -> _ChunkResult:
        """청크 하나를 단일 bulk 요청으로 전송 (항목 하나라도 실패하면 청크 전체 실패로 집계)"""
        end = start + len(chunk)

        try:
            actions = self._build_actions(chunk)
            bulk(
                client,
                actions,
                chunk_size=len(actions),
                refresh=self.settings.refresh_param,
                require_alias=True,
            )
        except BulkIndexError as e:
            for err in e.errors[:3]:  # 처음 3개만 로깅
                logger.warning(f"Bulk item error: {err}")
            logger.warning(f"Bulk chunk failed: {start + 1}-{end}, errors={len(e.errors)}")
            return _ChunkResult(start, end, len(chunk), ok=False)
        except (ApiError, TransportError, ValueError, TypeError) as e:
            logger.warning(f"Bulk chunk failed: {start + 1}-{end}, error={e}")
            return _ChunkResult(start, end, len(chunk), ok=False)

        logger.debug(f"Bulk chunk done: {start + 1}-{end} / {total}")
        return _ChunkResult(start, end, len(chunk), ok=True)

    def bulk_sync(
        self,
        records: Sequence[CatalogRecord],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BulkSyncStats:
        """
        도서 레코드 벌크 인덱싱

        Args:
            records: 인덱싱할 도서 레코드 목록
            progress_callback: 청크 완료 시 호출 (synced, total)

        Returns:
            BulkSyncStats (성공/실패 건수)
        """
        records = list(records or [])
        total = len(records)
        start_time = time.monotonic()

        if total == 0:
            logger.info("No books to index")
            return BulkSyncStats(self.index_name, 0, 0, 0, 0, 0.0)

        logger.info(f"Bulk sync started: {total:,} books → {self.index_name} (chunk_size={self.chunk_size}, workers={self.workers})")

        chunks = [
            (records[i:i + self.chunk_size], i)
            for i in range(0, total, self.chunk_size)
        ]

        # 워커 스레드가 각자 클라이언트를 만들지 않도록 풀 시작 전에 생성
        client = self.client

        synced = 0
        failed_chunks = 0

        if self.workers == 1:
            results = (self._sync_chunk(client, chunk, start, total) for chunk, start in chunks)
            for result in results:
                synced, failed_chunks = self._account(result, synced, failed_chunks, total, progress_callback)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                futures = [executor.submit(self._sync_chunk, client, chunk, start, total) for chunk, start in chunks]
                for future in as_completed(futures):
                    synced, failed_chunks = self._account(future.result(), synced, failed_chunks, total, progress_callback)

        stats = BulkSyncStats(
            index=self.index_name,
            total=total,
            synced=synced,
            failed=total - synced,
            failed_chunks=failed_chunks,
            elapsed_seconds=time.monotonic() - start_time,
        )

        logger.info(f"Bulk sync completed: {stats}")
        return stats

    @staticmethod
    def _account(
        result: _ChunkResult,
        synced: int,
        failed_chunks: int,
        total: int,
        progress_callback: Optional[ProgressCallback],
    ):
        if result.ok:
            synced += result.size
        else:
            failed_chunks += 1

        if progress_callback:
            progress_callback(synced, total)

        return synced, failed_chunks

    def sync_from_catalog(
        self,
        repository,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BulkSyncStats:
        """
        관계형 저장소 전체 레코드 재인덱싱

        DB 조회 오류는 그대로 전파됩니다.
        """
        records = repository.find_all()
        return self.bulk_sync(records, progress_callback=progress_callback)

    def close(self):
        if self._client:
            self._client.close()
            self._client = None


# CLI 인터페이스
def main(argv=None):
    """CLI 진입점"""
    import argparse

    from catalog.repository import CatalogRepository

    from .es_indices import ESIndexManager

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    parser = argparse.ArgumentParser(description="Book search bulk indexer")
    parser.add_argument("action", choices=["sync"])
    parser.add_argument("--chunk-size", "-b", type=int, default=None, help="Chunk size (default: ES_BULK_CHUNK_SIZE)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Parallel chunks (default: ES_BULK_WORKERS)")
    parser.add_argument("--recreate", "-r", action="store_true", help="Recreate the index before syncing")

    args = parser.parse_args(argv)

    settings = SearchSettings.from_env()
    client = create_es_client(settings)
    manager = ESIndexManager(client=client, settings=settings)
    indexer = BulkIndexer(client=client, settings=settings, chunk_size=args.chunk_size, workers=args.workers)
    repository = CatalogRepository()

    try:
        if args.recreate:
            if not manager.recreate_index():
                print("Recreate failed, aborting sync")
                return
        else:
            manager.ensure_index()

        stats = indexer.sync_from_catalog(repository)
        print("\n=== Bulk Sync Summary ===")
        print(f"  {stats}")

    finally:
        client.close()


if __name__ == "__main__":
    main()
