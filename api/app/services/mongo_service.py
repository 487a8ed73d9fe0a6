"""
MongoDB Service for FastAPI.

Provides the shared MongoDB connection used by the schema store and the
record repositories, and a decorator that turns driver failures into the
service's own exception types.
"""

import os
import logging
from datetime import datetime
from typing import Optional, Dict, Any, Callable, TypeVar
from functools import wraps
from pymongo import MongoClient
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    DuplicateKeyError as MongoDuplicateKeyError,
    OperationFailure,
    AutoReconnect,
    NetworkTimeout,
    WriteError,
    WriteConcernError,
    ExecutionTimeout,
    PyMongoError,
)

from ..exceptions import (
    InternalServiceError,
    ResourceConflictError,
    SchemaServiceException,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


# ============================================
# DB 연산 데코레이터
# ============================================

def db_operation(collection_name: str, operation: str):
    """
    DB 연산 래퍼 데코레이터
    - pymongo 예외를 서비스 예외로 변환
    - 로깅

    재시도는 하지 않음 (호출자가 결정)

    Args:
        collection_name: 컬렉션 이름
        operation: 연산 유형 (read, write, delete 등)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(self, *args, **kwargs) -> T:
            try:
                return func(self, *args, **kwargs)

            except SchemaServiceException:
                # 서비스 예외는 그대로 전파
                raise

            except MongoDuplicateKeyError as e:
                # 중복 키 에러
                raise ResourceConflictError(
                    f"Duplicate key in {collection_name}",
                    details={"collection": collection_name, "operation": operation},
                    cause=e
                ) from e

            except NetworkTimeout as e:
                # NOTE: NetworkTimeout extends ConnectionFailure, so must be caught first
                logger.error(f"DB network timeout in {func.__name__}: {e}")
                raise InternalServiceError(
                    f"Database network timeout during {operation} on {collection_name}",
                    details={"collection": collection_name, "operation": operation},
                    cause=e
                ) from e

            except (ConnectionFailure, ServerSelectionTimeoutError, AutoReconnect) as e:
                logger.error(f"DB connection error in {func.__name__}: {e}")
                raise InternalServiceError(
                    "Database is unreachable",
                    details={"collection": collection_name, "operation": operation},
                    cause=e
                ) from e

            except ExecutionTimeout as e:
                logger.error(f"DB execution timeout in {func.__name__}: {e}")
                raise InternalServiceError(
                    f"Database execution timeout during {operation} on {collection_name}",
                    details={"collection": collection_name, "operation": operation},
                    cause=e
                ) from e

            except (WriteError, WriteConcernError) as e:
                logger.error(f"DB write error in {func.__name__}: {e}")
                raise InternalServiceError(
                    f"Database write failed on {collection_name}",
                    details={"collection": collection_name, "operation": operation},
                    cause=e
                ) from e

            except (OperationFailure, PyMongoError) as e:
                logger.error(f"DB operation failure in {func.__name__}: {e}")
                raise InternalServiceError(
                    f"Database {operation} failed on {collection_name}",
                    details={"collection": collection_name, "operation": operation},
                    cause=e
                ) from e

        return wrapper
    return decorator


# ============================================
# MongoDB 서비스 클래스
# ============================================

class MongoService:
    """
    MongoDB connection holder.

    Usage:
        with MongoService() as mongo:
            doc = mongo.db["finances"].find_one({"financeID": record_id})

    권장 인덱스:
    -----------------------------------------
    # schemas 컬렉션
    db.schemas.createIndex({"schemaName": 1}, {unique: true})

    # 레코드 컬렉션 (finances, k12)
    db.finances.createIndex({"financeID": 1}, {unique: true})
    db.k12.createIndex({"k12ID": 1}, {unique: true})
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database_name: Optional[str] = None,
        timeout_ms: Optional[int] = None
    ):
        """Initialize MongoDB connection settings (connects lazily)."""
        self.uri = uri or os.getenv('MONGODB_URI', 'mongodb://localhost:27017')
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'records_service')
        self._client: Optional[MongoClient] = None
        self._connection_timeout = timeout_ms or int(os.getenv("MONGODB_TIMEOUT", "5000"))

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        self.close()
        return False  # Don't suppress exceptions

    @property
    def client(self) -> MongoClient:
        """
        Get or create MongoDB client with connection validation.

        Raises:
            InternalServiceError: 연결 실패 시
        """
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.uri,
                    serverSelectionTimeoutMS=self._connection_timeout,
                    connectTimeoutMS=self._connection_timeout,
                    socketTimeoutMS=30000,
                    retryWrites=True,
                    retryReads=True
                )
                # 연결 테스트
                self._client.admin.command('ping')
                logger.debug("MongoDB connection established")

            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                self._client = None
                raise InternalServiceError(
                    "Database is unreachable",
                    details={"host": self.uri},
                    cause=e
                ) from e

        return self._client

    @property
    def db(self):
        """Get database instance."""
        return self.client[self.database_name]

    def close(self):
        """Close the MongoDB connection safely."""
        if self._client:
            try:
                self._client.close()
            except Exception as e:
                logger.warning(f"Error closing MongoDB connection: {e}")
            finally:
                self._client = None

    def health_check(self) -> Dict[str, Any]:
        """
        Perform health check on MongoDB connection.

        Returns:
            Health check result with connection status
        """
        try:
            start = datetime.utcnow()
            self.client.admin.command('ping')
            latency = (datetime.utcnow() - start).total_seconds() * 1000

            return {
                "status": "healthy",
                "latency_ms": round(latency, 2),
                "database": self.database_name
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "database": self.database_name
            }
