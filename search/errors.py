"""
검색 동기화 계층 예외 클래스
- 읽기 경로(검색)의 치명적 오류는 예외로 전달
- 쓰기 경로(동기화)의 오류는 SyncResult 값으로 흡수 (es_sync 참고)
"""


class SearchSyncError(Exception):
    """검색 계층 기본 예외"""

    def __init__(self, message: str, operation: str = None, details: dict = None):
        self.message = message
        self.operation = operation
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
            "details": self.details
        }


class SearchExecutionError(SearchSyncError):
    """검색 실행 실패 (엔진 미응답, 인덱스 없음, 잘못된 요청)"""

    def __init__(self, message: str, index: str = None, details: dict = None):
        super().__init__(message, operation="search", details=details)
        self.index = index


class InvalidQueryError(SearchSyncError):
    """검색 조건/페이지 파라미터 오류"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, operation="build_query", details=details)


class IndexLifecycleError(SearchSyncError):
    """인덱스 생성/삭제 실패"""

    def __init__(self, message: str, index: str = None, details: dict = None):
        super().__init__(message, operation="index_lifecycle", details=details)
        self.index = index
