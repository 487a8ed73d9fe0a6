"""
Exception Tests
예외 계층 및 상태 코드 변환 테스트
"""

import pytest

from app.exceptions import (
    BadInputError,
    ErrorKind,
    ForbiddenError,
    InternalServiceError,
    RecordBadInputError,
    RecordNotFoundError,
    ResourceConflictError,
    ResourceNotFoundError,
    SchemaServiceException,
    UnauthorizedError,
    ValidationCheckError,
    to_http_status,
)


class TestToHttpStatus:
    """심볼릭 status -> HTTP 코드"""

    @pytest.mark.parametrize("status,expected", [
        ("SCHEMA_ERROR_RESOURCE_NOT_FOUND", 404),
        ("SCHEMA_ERROR_RESOURCE_CONFLICT", 409),
        ("SCHEMA_ERROR_VALIDATION_CHECK_FAILED", 400),
        ("SCHEMA_ERROR_BAD_INPUT_REQUEST", 400),
        ("SCHEMA_ERROR_FORBIDDEN", 403),
        ("SCHEMA_ERROR_UNAUTHORIZED", 401),
        ("SCHEMA_ERROR_INTERNAL_ERROR", 500),
        ("DB_ERROR_RESOURCE_NOT_FOUND", 404),
        ("DB_ERROR_BAD_INPUT_REQUEST", 400),
    ])
    def test_known_statuses(self, status, expected):
        """알려진 심볼"""
        assert to_http_status(status) == expected

    def test_numeric_passthrough(self):
        """숫자 status 는 그대로"""
        assert to_http_status(418) == 418
        assert to_http_status("422") == 422

    @pytest.mark.parametrize("status", ["SOMETHING_ELSE", None, "", True])
    def test_unknown_defaults_to_500(self, status):
        """알 수 없는 값은 500"""
        assert to_http_status(status) == 500


class TestExceptionHierarchy:
    """예외 클래스 기본값"""

    @pytest.mark.parametrize("exc_class,kind,http_status", [
        (ResourceNotFoundError, ErrorKind.NOT_FOUND, 404),
        (ResourceConflictError, ErrorKind.CONFLICT, 409),
        (BadInputError, ErrorKind.BAD_INPUT, 400),
        (ValidationCheckError, ErrorKind.VALIDATION_FAILED, 400),
        (ForbiddenError, ErrorKind.FORBIDDEN, 403),
        (UnauthorizedError, ErrorKind.UNAUTHORIZED, 401),
        (InternalServiceError, ErrorKind.INTERNAL, 500),
    ])
    def test_kind_and_status(self, exc_class, kind, http_status):
        """kind 와 기본 status"""
        exc = exc_class("boom")
        assert isinstance(exc, SchemaServiceException)
        assert exc.kind == kind
        assert to_http_status(exc.status) == http_status

    def test_default_messages(self):
        """기본 메시지"""
        assert ResourceNotFoundError().message == "The request resource is not found"
        assert UnauthorizedError().message == "User is not authorized"

    def test_record_errors(self):
        """레코드 예외"""
        exc = RecordNotFoundError("finance", "abc")
        assert isinstance(exc, ResourceNotFoundError)
        assert exc.status == "DB_ERROR_RESOURCE_NOT_FOUND"
        assert exc.details == {"resource": "finance", "id": "abc"}

        assert RecordBadInputError("bad").status == "DB_ERROR_BAD_INPUT_REQUEST"

    def test_to_dict(self):
        """직렬화"""
        cause = ValueError("inner")
        exc = InternalServiceError("outer", details={"k": "v"}, cause=cause)
        data = exc.to_dict()
        assert data["kind"] == "internal"
        assert data["status"] == "SCHEMA_ERROR_INTERNAL_ERROR"
        assert data["message"] == "outer"
        assert data["details"] == {"k": "v"}
        assert data["cause"] == "inner"

    def test_explicit_status_overrides(self):
        """status 명시"""
        exc = BadInputError("x", status="SCHEMA_ERROR_FORBIDDEN")
        assert to_http_status(exc.status) == 403
