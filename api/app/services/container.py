"""
Service Container - 리소스별 서비스 조립

설정(SCHEMA_STORE / RECORD_STORE)에 따라 스키마 저장소와 레코드 저장소를
선택하고, 리소스(finance, k12)마다 레지스트리 / 레코드 모델 / 레코드 서비스를
한 번씩 만든다. 모든 구성 요소는 첫 요청 시 생성되므로 앱 import 시점에는
DB 연결이 일어나지 않는다.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from app.core.config import Settings
from app.exceptions import InternalServiceError
from app.services.mongo_service import MongoService
from app.services.record_model import RecordModel
from app.services.record_repository import (
    InMemoryRecordRepository,
    MongoRecordRepository,
    RecordRepository,
)
from app.services.record_service import RecordService
from app.services.resources import RESOURCES, ResourceDefinition
from app.services.schema_registry import (
    InMemorySchemaStore,
    JsonFileSchemaStore,
    MongoSchemaStore,
    SchemaRegistry,
    SchemaStore,
    load_seed,
)

logger = logging.getLogger(__name__)

SCHEMA_STORES = ("file", "mongo", "memory")
RECORD_STORES = ("mongo", "memory")


class ResourceContext:
    """리소스 하나의 레지스트리 / 모델 / 저장소 / 서비스"""

    def __init__(self, resource: ResourceDefinition, container: "ServiceContainer"):
        self.resource = resource
        self.container = container
        self._lock = threading.RLock()
        self._registry: Optional[SchemaRegistry] = None
        self._record_model: Optional[RecordModel] = None
        self._repository: Optional[RecordRepository] = None
        self._service: Optional[RecordService] = None

    def _build_schema_store(self) -> SchemaStore:
        settings = self.container.settings
        if settings.schema_store == "memory":
            return InMemorySchemaStore(load_seed(self.resource.name))
        if settings.schema_store == "mongo":
            return MongoSchemaStore(self.container.mongo, self.resource.name)
        path = Path(settings.schema_dir) / f"{self.resource.name}_schema.json"
        return JsonFileSchemaStore(path, schema_name=self.resource.name)

    def _build_repository(self) -> RecordRepository:
        if self.container.settings.record_store == "memory":
            return InMemoryRecordRepository(self.resource.id_field)
        collection_name = self.registry.get_schema().collectionName
        repository = MongoRecordRepository(self.container.mongo, collection_name, self.resource.id_field)
        repository.ensure_indexes()
        return repository

    @property
    def record_model(self) -> RecordModel:
        with self._lock:
            if self._record_model is None:
                self._record_model = RecordModel(self.resource.name)
            return self._record_model

    @property
    def registry(self) -> SchemaRegistry:
        with self._lock:
            if self._registry is None:
                self._registry = SchemaRegistry(
                    self._build_schema_store(),
                    model_adapter=self.record_model
                )
            return self._registry

    @property
    def repository(self) -> RecordRepository:
        with self._lock:
            if self._repository is None:
                self._repository = self._build_repository()
            return self._repository

    @property
    def service(self) -> RecordService:
        with self._lock:
            if self._service is None:
                self._service = RecordService(
                    self.resource,
                    self.registry,
                    self.record_model,
                    self.repository
                )
            return self._service


class ServiceContainer:
    """
    앱 단위 서비스 컨테이너 (app.state.container)

    Example:
        >>> container = ServiceContainer(settings)
        >>> container.resource("finance").registry.get_schema()
    """

    def __init__(self, settings: Settings):
        if settings.schema_store not in SCHEMA_STORES:
            raise InternalServiceError(f"Unknown SCHEMA_STORE: {settings.schema_store}")
        if settings.record_store not in RECORD_STORES:
            raise InternalServiceError(f"Unknown RECORD_STORE: {settings.record_store}")

        self.settings = settings
        self._mongo: Optional[MongoService] = None
        self._mongo_lock = threading.Lock()
        self.contexts: Dict[str, ResourceContext] = {
            name: ResourceContext(resource, self) for name, resource in RESOURCES.items()
        }

    @property
    def uses_mongo(self) -> bool:
        return self.settings.schema_store == "mongo" or self.settings.record_store == "mongo"

    @property
    def mongo(self) -> MongoService:
        with self._mongo_lock:
            if self._mongo is None:
                self._mongo = MongoService(
                    uri=self.settings.mongodb_uri,
                    database_name=self.settings.mongodb_database,
                    timeout_ms=self.settings.mongodb_timeout
                )
            return self._mongo

    def resource(self, name: str) -> ResourceContext:
        return self.contexts[name]

    def close(self) -> None:
        with self._mongo_lock:
            if self._mongo is not None:
                self._mongo.close()
                self._mongo = None
        logger.info("Service container closed")
