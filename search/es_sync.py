"""
단건 문서 동기화

관계형 저장소에서 도서가 생성/수정/삭제된 직후 호출되어
검색 인덱스에 같은 변경을 반영합니다.

검색 엔진 장애는 관계형 트랜잭션에 영향을 주지 않아야 하므로
모든 엔진 오류는 경고 로그로 남기고 DEGRADED 결과로 반환합니다.
어긋난 상태는 다음 벌크 인덱싱에서 복구됩니다.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError, NotFoundError, TransportError

from catalog.models import CatalogRecord

from .config import SearchSettings
from .es_client import create_es_client
from .es_document import BookDocument

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    SYNCED = "synced"
    DEGRADED = "degraded"


@dataclass
class SyncResult:
    """단건 동기화 결과 (실패해도 예외 대신 값으로 전달)"""
    operation: str
    key: Optional[str]
    status: SyncStatus
    found: Optional[bool] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SyncStatus.SYNCED

    @property
    def degraded(self) -> bool:
        return self.status == SyncStatus.DEGRADED


class DocumentSyncer:
    """
    관계형 변경 → 검색 문서 반영

    사용 예:
        syncer = DocumentSyncer()
        book = repository.insert(...)   # 커밋 완료 후
        syncer.upsert(book)
    """

    def __init__(
        self,
        client: Optional[Elasticsearch] = None,
        settings: Optional[SearchSettings] = None,
    ):
        self.settings = settings or SearchSettings.from_env()
        self.index_name = self.settings.index_name
        self._client = client

    @property
    def client(self) -> Elasticsearch:
        if self._client is None:
            self._client = create_es_client(self.settings)
        return self._client

    def upsert(self, record: CatalogRecord) -> SyncResult:
        """
        단건 문서 인덱싱 (생성/수정 겸용)

        동일 ID의 문서가 있으면 덮어씁니다.

        Args:
            record: 커밋된 도서 레코드

        Returns:
            SyncResult (엔진 오류 시 DEGRADED)
        """
        if record.id is None:
            logger.warning(f"Book index skipped: record has no id (title={record.title})")
            return SyncResult(
                operation="upsert",
                key=None,
                status=SyncStatus.DEGRADED,
                error="record has no id",
            )

        document = BookDocument.from_record(record)

        try:
            self.client.index(
                index=self.index_name,
                id=document.doc_id,
                document=document.to_source(),
                refresh=self.settings.refresh_param,
                require_alias=True,
            )
        except (ApiError, TransportError) as e:
            logger.warning(f"Book index failed: id={record.id}, title={record.title}, error={e}")
            return SyncResult(
                operation="upsert",
                key=document.doc_id,
                status=SyncStatus.DEGRADED,
                error=str(e),
            )

        logger.debug(f"Book indexed: id={record.id}, title={record.title}")
        return SyncResult(operation="upsert", key=document.doc_id, status=SyncStatus.SYNCED)

    def remove(self, key: Union[int, str]) -> SyncResult:
        """
        단건 문서 삭제 (없는 문서를 지워도 오류 아님)

        Args:
            key: 도서 ID

        Returns:
            SyncResult (엔진 오류 시 DEGRADED)
        """
        doc_id = str(key)

        try:
            self.client.delete(
                index=self.index_name,
                id=doc_id,
                refresh=self.settings.refresh_param,
            )
        except NotFoundError:
            logger.debug(f"Book document already absent: id={doc_id}")
            return SyncResult(operation="remove", key=doc_id, status=SyncStatus.SYNCED, found=False)
        except (ApiError, TransportError) as e:
            logger.warning(f"Book index delete failed: id={doc_id}, error={e}")
            return SyncResult(
                operation="remove",
                key=doc_id,
                status=SyncStatus.DEGRADED,
                error=str(e),
            )

        logger.debug(f"Book document deleted: id={doc_id}")
        return SyncResult(operation="remove", key=doc_id, status=SyncStatus.SYNCED, found=True)
