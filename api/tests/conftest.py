"""
Pytest Configuration and Fixtures
테스트 공통 설정 및 픽스처
"""

import base64
import os
import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

# 테스트 환경 설정 (app.main import 전에)
os.environ["ENV"] = "test"
os.environ["AUTH_MODE"] = "required"
os.environ["API_USERNAME"] = "developer"
os.environ["API_PASSWORD"] = "awesome"
os.environ["SCHEMA_STORE"] = "memory"
os.environ["RECORD_STORE"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

from app.core.config import Settings
from app.main import create_app
from app.services.record_model import RecordModel
from app.services.resources import FINANCE
from app.services.schema_registry import (
    InMemorySchemaStore,
    SchemaRegistry,
    SchemaStore,
    SchemaStoreError,
    load_seed,
)


def basic_auth(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


class FailingSchemaStore(SchemaStore):
    """save 가 항상 실패하는 저장소 (영속화 실패 시나리오)"""

    def __init__(self, document):
        self.document = document
        self.save_attempts = 0

    def load(self):
        return self.document

    def save(self, document):
        self.save_attempts += 1
        raise SchemaStoreError("disk full")


@pytest.fixture
def settings():
    """인메모리 저장소 설정"""
    return Settings(
        env="test",
        log_level="WARNING",
        auth_mode="required",
        api_username="developer",
        api_password="awesome",
        schema_store="memory",
        record_store="memory",
    )


@pytest.fixture
def app(settings):
    """테스트용 앱 인스턴스"""
    return create_app(settings)


@pytest.fixture
def client(app):
    """FastAPI 테스트 클라이언트"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client_no_raise(app):
    """서버 예외를 500 응답으로 반환하는 테스트 클라이언트"""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    """인증 헤더 (Basic)"""
    return basic_auth("developer", "awesome")


@pytest.fixture
def finance_schema():
    """finance 시드 스키마"""
    return load_seed("finance")


@pytest.fixture
def k12_schema():
    """k12 시드 스키마"""
    return load_seed("k12")


@pytest.fixture
def finance_store(finance_schema):
    """finance 인메모리 스키마 저장소"""
    return InMemorySchemaStore(finance_schema)


@pytest.fixture
def record_model():
    """finance 레코드 모델"""
    return RecordModel(FINANCE.name)


@pytest.fixture
def registry(finance_store, record_model):
    """finance 스키마 레지스트리"""
    return SchemaRegistry(finance_store, model_adapter=record_model)


@pytest.fixture
def mock_adapter():
    """레코드 모델 어댑터 Mock"""
    return MagicMock()


@pytest.fixture
def failing_store(finance_schema):
    """save 가 항상 실패하는 finance 저장소"""
    return FailingSchemaStore(finance_schema)
