"""
Record Service - 레코드 CRUD

레코드 쓰기는 현재 스키마의 레코드 모델로 검증하고,
읽기는 항상 레지스트리의 최신 스냅샷으로 투영한다.
"""

import logging
import uuid
from typing import Any, Dict, Mapping

from app.exceptions import RecordNotFoundError
from app.services.projection import project_collection, project_record
from app.services.record_model import RecordModel
from app.services.record_repository import RecordRepository
from app.services.resources import ResourceDefinition, VERSION_FIELD
from app.services.schema_registry import SchemaRegistry

logger = logging.getLogger(__name__)


class RecordService:
    """리소스 하나(finance 또는 k12)에 대한 레코드 서비스"""

    def __init__(
        self,
        resource: ResourceDefinition,
        registry: SchemaRegistry,
        record_model: RecordModel,
        repository: RecordRepository
    ):
        self.resource = resource
        self.registry = registry
        self.record_model = record_model
        self.repository = repository

    def _project(self, record) -> Dict[str, Any]:
        return project_record(record, self.registry.get_schema(), self.resource)

    def list_records(self) -> Dict[str, Any]:
        """전체 레코드 목록 envelope"""
        records = self.repository.find_all()
        return project_collection(records, self.registry.get_schema(), self.resource)

    def get_record(self, record_id: str) -> Dict[str, Any]:
        """
        레코드 조회

        Raises:
            RecordNotFoundError: 레코드가 없을 때
        """
        record = self.repository.find(record_id)
        if record is None:
            raise RecordNotFoundError(self.resource.resource_type, record_id)
        return self._project(record)

    def create_record(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        레코드 생성 (식별 필드와 version 은 서버가 부여)

        Raises:
            RecordBadInputError: 스키마 검증 실패
        """
        values = self.record_model.validate(payload)
        record = {
            self.resource.id_field: uuid.uuid4().hex,
            VERSION_FIELD: 1,
            **values,
        }
        stored = self.repository.insert(record)
        logger.info(
            f"Record created: resource={self.resource.name}, "
            f"id={record[self.resource.id_field]}"
        )
        return self._project(stored)

    def update_record(self, record_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        레코드 전체 교체, version 1 증가

        Raises:
            RecordNotFoundError: 레코드가 없을 때
            RecordBadInputError: 스키마 검증 실패
        """
        existing = self.repository.find(record_id)
        if existing is None:
            raise RecordNotFoundError(self.resource.resource_type, record_id)

        values = self.record_model.validate(payload)
        record = {
            self.resource.id_field: record_id,
            VERSION_FIELD: int(existing.get(VERSION_FIELD) or 0) + 1,
            **values,
        }
        stored = self.repository.replace(record_id, record)
        if stored is None:
            raise RecordNotFoundError(self.resource.resource_type, record_id)

        logger.info(
            f"Record updated: resource={self.resource.name}, id={record_id}, "
            f"version={record[VERSION_FIELD]}"
        )
        return self._project(stored)

    def delete_record(self, record_id: str) -> None:
        """
        레코드 삭제

        Raises:
            RecordNotFoundError: 레코드가 없을 때
        """
        if not self.repository.delete(record_id):
            raise RecordNotFoundError(self.resource.resource_type, record_id)
        logger.info(f"Record deleted: resource={self.resource.name}, id={record_id}")
