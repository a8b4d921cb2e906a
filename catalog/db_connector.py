"""
데이터베이스 연결 모듈
- PostgreSQL 연결 (도서 카탈로그 원본 저장소)
- 환경 변수 기반 설정
"""

import logging
import os

import psycopg2
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# 환경 변수에서 DB 연결 정보 로드
DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": os.getenv("DB_PORT", "5432"),
    "database": os.getenv("DB_NAME", "booksearch"),
    "user": os.getenv("DB_USER", "postgres"),
    "password": os.getenv("DB_PASSWORD", "postgres"),
}


def get_db_connection():
    """DB 연결 생성"""
    try:
        return psycopg2.connect(
            host=DB_CONFIG["host"],
            port=DB_CONFIG["port"],
            database=DB_CONFIG["database"],
            user=DB_CONFIG["user"],
            password=DB_CONFIG["password"]
        )
    except psycopg2.Error as e:
        logger.error(f"DB connection error: {e}")
        raise


def test_connection() -> bool:
    """DB 연결 테스트"""
    try:
        conn = get_db_connection()
        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        finally:
            conn.close()
        logger.info("DB connection OK")
        return True
    except psycopg2.Error:
        return False


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    test_connection()
