"""
커스텀 예외 클래스 체계
모든 스키마/레코드 서비스 예외는 이 계층을 따름

예외는 심볼릭 status 를 가지고 그대로 전파되며,
HTTP 상태 코드 변환은 경계 계층(to_http_status)에서만 수행한다.
"""
from typing import Optional, Dict, Any, Union
from datetime import datetime
from enum import Enum


class ErrorKind(str, Enum):
    """에러 종류 (닫힌 열거형)"""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BAD_INPUT = "bad_input"
    VALIDATION_FAILED = "validation_failed"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


# 심볼릭 status 상수
SCHEMA_ERROR_RESOURCE_NOT_FOUND = "SCHEMA_ERROR_RESOURCE_NOT_FOUND"
SCHEMA_ERROR_RESOURCE_CONFLICT = "SCHEMA_ERROR_RESOURCE_CONFLICT"
SCHEMA_ERROR_VALIDATION_CHECK_FAILED = "SCHEMA_ERROR_VALIDATION_CHECK_FAILED"
SCHEMA_ERROR_BAD_INPUT_REQUEST = "SCHEMA_ERROR_BAD_INPUT_REQUEST"
SCHEMA_ERROR_FORBIDDEN = "SCHEMA_ERROR_FORBIDDEN"
SCHEMA_ERROR_UNAUTHORIZED = "SCHEMA_ERROR_UNAUTHORIZED"
SCHEMA_ERROR_INTERNAL_ERROR = "SCHEMA_ERROR_INTERNAL_ERROR"
DB_ERROR_RESOURCE_NOT_FOUND = "DB_ERROR_RESOURCE_NOT_FOUND"
DB_ERROR_BAD_INPUT_REQUEST = "DB_ERROR_BAD_INPUT_REQUEST"


class SchemaServiceException(Exception):
    """서비스 최상위 예외 클래스"""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_status: str = SCHEMA_ERROR_INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.status = status or self.default_status
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.utcnow()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """예외를 딕셔너리로 변환"""
        return {
            "kind": self.kind.value,
            "status": self.status,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self):
        return f"[{self.status}] {self.message}"

    def __repr__(self):
        return f"{self.__class__.__name__}(status={self.status}, message={self.message})"


# ============================================
# 스키마 레지스트리 예외
# ============================================

class ResourceNotFoundError(SchemaServiceException):
    """요청한 리소스가 없음"""
    kind = ErrorKind.NOT_FOUND
    default_status = SCHEMA_ERROR_RESOURCE_NOT_FOUND

    def __init__(self, message: str = "The request resource is not found", **kwargs):
        super().__init__(message, **kwargs)


class ResourceConflictError(SchemaServiceException):
    """리소스 충돌 (중복 필드, 리비전 불일치)"""
    kind = ErrorKind.CONFLICT
    default_status = SCHEMA_ERROR_RESOURCE_CONFLICT


class BadInputError(SchemaServiceException):
    """잘못된 입력"""
    kind = ErrorKind.BAD_INPUT
    default_status = SCHEMA_ERROR_BAD_INPUT_REQUEST


class ValidationCheckError(SchemaServiceException):
    """검증 실패"""
    kind = ErrorKind.VALIDATION_FAILED
    default_status = SCHEMA_ERROR_VALIDATION_CHECK_FAILED


class ForbiddenError(SchemaServiceException):
    """권한 없음"""
    kind = ErrorKind.FORBIDDEN
    default_status = SCHEMA_ERROR_FORBIDDEN


class UnauthorizedError(SchemaServiceException):
    """인증 실패"""
    kind = ErrorKind.UNAUTHORIZED
    default_status = SCHEMA_ERROR_UNAUTHORIZED

    def __init__(self, message: str = "User is not authorized", **kwargs):
        super().__init__(message, **kwargs)


class InternalServiceError(SchemaServiceException):
    """내부 오류 (저장소 실패 등)"""
    kind = ErrorKind.INTERNAL
    default_status = SCHEMA_ERROR_INTERNAL_ERROR


# ============================================
# 레코드 예외
# ============================================

class RecordNotFoundError(ResourceNotFoundError):
    """레코드를 찾을 수 없음"""
    default_status = DB_ERROR_RESOURCE_NOT_FOUND

    def __init__(self, resource: str, record_id: str):
        super().__init__(
            message=f"The {resource} record {record_id} is not found",
            details={"resource": resource, "id": record_id}
        )


class RecordBadInputError(BadInputError):
    """레코드 입력값 오류"""
    default_status = DB_ERROR_BAD_INPUT_REQUEST


# ============================================
# 예외 매핑 및 유틸리티
# ============================================

STATUS_CODE_MAPPING: Dict[str, int] = {
    SCHEMA_ERROR_RESOURCE_NOT_FOUND: 404,
    SCHEMA_ERROR_INTERNAL_ERROR: 500,
    SCHEMA_ERROR_RESOURCE_CONFLICT: 409,
    SCHEMA_ERROR_UNAUTHORIZED: 401,
    SCHEMA_ERROR_VALIDATION_CHECK_FAILED: 400,
    SCHEMA_ERROR_BAD_INPUT_REQUEST: 400,
    SCHEMA_ERROR_FORBIDDEN: 403,
    DB_ERROR_RESOURCE_NOT_FOUND: 404,
    DB_ERROR_BAD_INPUT_REQUEST: 400,
}


def to_http_status(status: Union[str, int, None]) -> int:
    """
    심볼릭 status 를 HTTP 상태 코드로 변환

    숫자 status 는 그대로 통과, 알 수 없는 값은 500
    """
    if isinstance(status, bool):
        return 500
    if isinstance(status, int):
        return status
    if isinstance(status, str) and status.strip().isdigit():
        return int(status)
    return STATUS_CODE_MAPPING.get(status, 500)


__all__ = [
    # Base
    "ErrorKind",
    "SchemaServiceException",
    # Schema
    "ResourceNotFoundError",
    "ResourceConflictError",
    "BadInputError",
    "ValidationCheckError",
    "ForbiddenError",
    "UnauthorizedError",
    "InternalServiceError",
    # Records
    "RecordNotFoundError",
    "RecordBadInputError",
    # Statuses
    "SCHEMA_ERROR_RESOURCE_NOT_FOUND",
    "SCHEMA_ERROR_RESOURCE_CONFLICT",
    "SCHEMA_ERROR_VALIDATION_CHECK_FAILED",
    "SCHEMA_ERROR_BAD_INPUT_REQUEST",
    "SCHEMA_ERROR_FORBIDDEN",
    "SCHEMA_ERROR_UNAUTHORIZED",
    "SCHEMA_ERROR_INTERNAL_ERROR",
    "DB_ERROR_RESOURCE_NOT_FOUND",
    "DB_ERROR_BAD_INPUT_REQUEST",
    # Utilities
    "STATUS_CODE_MAPPING",
    "to_http_status",
]
