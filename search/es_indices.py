"""
Elasticsearch 인덱스 관리

books 인덱스 생성 보장, 재생성, 삭제, 상태 확인 등을 담당합니다.
인덱스 스키마(매핑/Nori 분석기)는 es_schema.BOOK_SCHEMA에서 가져옵니다.

실제 인덱스는 스키마 버전이 붙은 이름(books_v1)으로 만들고
설정의 인덱스 이름(books)은 그 인덱스를 가리키는 alias로 둡니다.
문서 쓰기는 require_alias로 보내므로 인덱스가 없을 때
엔진이 동적 매핑 인덱스를 자동 생성하지 않고 실패로 보고됩니다.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError, BadRequestError, NotFoundError, TransportError

from .config import SearchSettings
from .errors import IndexLifecycleError
from .es_client import create_es_client
from .es_schema import BOOK_SCHEMA, IndexSchema

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "resource_already_exists_exception"


class IndexState(str, Enum):
    """ensure_index 결과"""
    CREATED = "created"
    EXISTS = "exists"
    UNAVAILABLE = "unavailable"


class ESIndexManager:
    """
    Elasticsearch 인덱스 관리자

    사용 예:
        manager = ESIndexManager()
        state = manager.ensure_index()      # 기동 시마다 호출해도 안전
        manager.recreate_index()            # 매핑 변경 시에만, 이후 전체 벌크 인덱싱 필요
    """

    def __init__(
        self,
        client: Optional[Elasticsearch] = None,
        settings: Optional[SearchSettings] = None,
        schema: IndexSchema = BOOK_SCHEMA,
    ):
        """
        인덱스 관리자 초기화

        Args:
            client: 주입할 Elasticsearch 클라이언트
            settings: 검색 엔진 설정
            schema: 인덱스 생성 시 사용할 스키마
        """
        self.settings = settings or SearchSettings.from_env()
        self.index_name = self.settings.index_name
        self.schema = schema
        self._client = client

    @property
    def client(self) -> Elasticsearch:
        """동기 클라이언트"""
        if self._client is None:
            self._client = create_es_client(self.settings)
        return self._client

    @property
    def concrete_index(self) -> str:
        """스키마 버전이 붙은 실제 인덱스 이름"""
        return f"{self.index_name}_v{self.schema.version}"

    def index_exists(self) -> bool:
        """인덱스(alias) 존재 여부 확인"""
        return bool(self.client.indices.exists(index=self.index_name))

    def _resolve_indices(self) -> List[str]:
        """alias가 가리키는 실제 인덱스 목록 (alias 없이 같은 이름의 인덱스만 있으면 그 인덱스)"""
        try:
            return list(self.client.indices.get(index=self.index_name).keys())
        except NotFoundError:
            return []

    def _create(self) -> None:
        body = self.schema.body()
        self.client.indices.create(
            index=self.concrete_index,
            aliases={self.index_name: {}},
            settings=body["settings"],
            mappings=body["mappings"],
        )

    def ensure_index(self) -> IndexState:
        """
        인덱스가 없으면 생성 (이미 있으면 아무것도 하지 않음)

        엔진 장애 시 예외를 던지지 않고 UNAVAILABLE을 반환합니다.
        이후 문서 작업은 각자 실패를 보고합니다.
        다른 프로세스가 동시에 생성한 경우는 EXISTS로 봅니다.

        Returns:
            CREATED / EXISTS / UNAVAILABLE
        """
        try:
            if self.index_exists():
                logger.info(f"Index already exists: {self.index_name}")
                self._check_schema_version()
                return IndexState.EXISTS

            try:
                self._create()
            except BadRequestError as e:
                if e.error != ALREADY_EXISTS:
                    raise
                logger.info(f"Index created concurrently by another process: {self.concrete_index}")
                return IndexState.EXISTS

            logger.info(
                f"Index created: {self.concrete_index} (alias {self.index_name}, "
                f"schema v{self.schema.version}, nori analyzer)"
            )
            return IndexState.CREATED

        except (ApiError, TransportError) as e:
            logger.error(f"Failed to ensure index {self.index_name}: {e}")
            return IndexState.UNAVAILABLE

    def _check_schema_version(self) -> None:
        try:
            version = self.get_schema_version()
        except (ApiError, TransportError) as e:
            logger.warning(f"Could not read schema version of {self.index_name}: {e}")
            return

        if version != self.schema.version:
            logger.warning(
                f"Index {self.index_name} has schema v{version}, expected v{self.schema.version}; "
                f"run recreate_index() followed by a full bulk sync"
            )

    def get_schema_version(self) -> Optional[int]:
        """인덱스 매핑 _meta에 기록된 스키마 버전"""
        mapping = self.client.indices.get_mapping(index=self.index_name)
        # alias로 조회하면 실제 인덱스 이름이 키
        for body in mapping.values():
            return body["mappings"].get("_meta", {}).get("schema_version")
        return None

    def recreate_index(self) -> bool:
        """
        인덱스 삭제 후 재생성

        기존 문서가 모두 삭제되므로 호출 측에서 전체 벌크 인덱싱을 다시 수행해야 합니다.
        alias 없이 같은 이름으로 존재하는 인덱스도 함께 삭제합니다.

        Returns:
            성공 여부
        """
        try:
            existing = self._resolve_indices()
            if existing:
                logger.info(f"Deleting existing index: {', '.join(existing)}")
                self.client.indices.delete(index=existing)

            self._create()
            logger.info(f"Index recreated: {self.concrete_index} (alias {self.index_name}, schema v{self.schema.version})")
            return True

        except (ApiError, TransportError) as e:
            logger.error(f"Failed to recreate index {self.index_name}: {e}")
            return False

    def delete_index(self) -> bool:
        """
        인덱스 삭제

        Returns:
            성공 여부 (인덱스가 없어도 True)
        """
        try:
            existing = self._resolve_indices()
            if not existing:
                logger.info(f"Index does not exist: {self.index_name}")
                return True
            self.client.indices.delete(index=existing)
            logger.info(f"Index deleted: {', '.join(existing)}")
            return True
        except NotFoundError:
            logger.info(f"Index does not exist: {self.index_name}")
            return True
        except (ApiError, TransportError) as e:
            logger.error(f"Failed to delete index {self.index_name}: {e}")
            return False

    def refresh_index(self) -> bool:
        """인덱싱된 문서를 검색 가능하게 만듭니다."""
        try:
            self.client.indices.refresh(index=self.index_name)
            logger.info(f"Index refreshed: {self.index_name}")
            return True
        except (ApiError, TransportError) as e:
            logger.error(f"Failed to refresh index {self.index_name}: {e}")
            return False

    def get_index_status(self) -> Dict[str, Any]:
        """인덱스 상태 조회"""
        try:
            if not self.index_exists():
                return {"index": self.index_name, "exists": False, "docs_count": 0, "schema_version": None}

            stats = self.client.indices.stats(index=self.index_name)
            primaries = stats["_all"]["primaries"]
            return {
                "index": self.index_name,
                "exists": True,
                "indices": sorted(stats.get("indices", {}).keys()),
                "docs_count": primaries["docs"]["count"],
                "size_bytes": primaries["store"]["size_in_bytes"],
                "schema_version": self.get_schema_version(),
            }
        except (ApiError, TransportError) as e:
            logger.error(f"Error getting status for {self.index_name}: {e}")
            return {"index": self.index_name, "exists": False, "docs_count": 0, "error": str(e)}

    def close(self):
        """클라이언트 종료"""
        if self._client:
            self._client.close()
            self._client = None


# CLI 인터페이스
def main(argv=None):
    """CLI 진입점"""
    import argparse

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    parser = argparse.ArgumentParser(description="Book search index manager")
    parser.add_argument("action", choices=["ensure", "recreate", "delete", "status", "refresh"])
    parser.add_argument("--index", "-i", help="Target index (default: ES_INDEX)")

    args = parser.parse_args(argv)

    settings = SearchSettings.from_env()
    if args.index:
        settings.index_name = args.index

    manager = ESIndexManager(settings=settings)

    try:
        if args.action == "ensure":
            state = manager.ensure_index()
            print(f"Ensure {manager.index_name}: {state.value}")
            if state == IndexState.UNAVAILABLE:
                raise IndexLifecycleError("Search engine unavailable", index=manager.index_name)

        elif args.action == "recreate":
            if not manager.recreate_index():
                raise IndexLifecycleError("Recreate failed", index=manager.index_name)
            print(f"Recreate {manager.index_name}: OK (run a bulk sync next)")

        elif args.action == "delete":
            if not manager.delete_index():
                raise IndexLifecycleError("Delete failed", index=manager.index_name)
            print(f"Delete {manager.index_name}: OK")

        elif args.action == "status":
            info = manager.get_index_status()
            print("\n=== ES Index Status ===")
            if info["exists"]:
                print(f"  {info['index']}: {info['docs_count']:,} docs, schema v{info['schema_version']}")
            else:
                print(f"  {info['index']}: NOT EXISTS")

        elif args.action == "refresh":
            result = manager.refresh_index()
            print(f"Refresh {manager.index_name}: {'OK' if result else 'FAILED'}")

    finally:
        manager.close()


if __name__ == "__main__":
    main()
