"""
Schema Registry - 스키마 레지스트리 핵심 클래스

레코드 타입 하나의 필드 카탈로그를 소유하고 변경을 관리하는 레지스트리

기능:
- 필드 추가 / 수정 / 삭제 / 조회
- 변경 전 필드 정의 검증
- 저장소 영속화 후에만 라이브 스키마 교체 (copy-on-write)
- 변경 후 레코드 모델 갱신 통지

Invariants:
    - 라이브 스냅샷은 항상 마지막으로 저장에 성공한 문서
    - 스냅샷은 제자리 수정하지 않고 참조 교체만 한다
    - 변경 연산은 레지스트리 락 아래에서 순서대로 실행된다
"""

import logging
import threading
from typing import Any, Callable, Mapping, Optional, Protocol

from app.exceptions import (
    BadInputError,
    InternalServiceError,
    ResourceConflictError,
    ResourceNotFoundError,
    SchemaServiceException,
)
from .models import FieldDefinition, SchemaDocument, SchemaSnapshot
from .store import SchemaStore, SchemaStoreError
from .validator import build_field_definition

logger = logging.getLogger(__name__)

SYSTEM_FIELD_MESSAGE = (
    "The Field {name} is a System Level Field. "
    "You can't modify/delete a field which has System Level set as true"
)


class RecordModelAdapter(Protocol):
    """스키마 변경 시 갱신되어야 하는 레코드 모델"""

    def refresh(self, schema: SchemaDocument) -> None:
        ...


class SchemaRegistry:
    """
    스키마 레지스트리

    Thread-safety:
        - 변경(add/update/delete)은 내부 락으로 직렬화 (대기열 방식)
        - 조회는 락 없이 현재 스냅샷 참조를 읽음
        - expected_revision 을 주면 compare-and-swap 으로 동작

    Example:
        >>> registry = SchemaRegistry(store, model_adapter=record_model)
        >>> registry.add_field("price", {"type": "Number", "required": "true"})
        >>> registry.get_schema().fields["price"].required
        True
    """

    def __init__(
        self,
        store: SchemaStore,
        model_adapter: Optional[RecordModelAdapter] = None
    ):
        """
        Args:
            store: 스키마 저장소
            model_adapter: 스키마 변경 시 refresh 할 레코드 모델
        """
        self.store = store
        self.model_adapter = model_adapter
        self._lock = threading.Lock()

        try:
            document = store.load()
        except SchemaStoreError as e:
            raise InternalServiceError(f"Cannot load schema: {e.message}", cause=e) from e

        self._snapshot = SchemaSnapshot(document=document, revision=1)
        if self.model_adapter is not None:
            self.model_adapter.refresh(document)

        logger.info(
            f"Schema registry loaded: schema={document.schemaName}, "
            f"fields={len(document.fields)}"
        )

    # ==================== 조회 ====================

    @property
    def revision(self) -> int:
        """현재 스냅샷 리비전"""
        return self._snapshot.revision

    @property
    def schema_name(self) -> str:
        return self._snapshot.document.schemaName

    def snapshot(self) -> SchemaSnapshot:
        """문서와 리비전을 한 번에 읽음"""
        return self._snapshot

    def get_schema(self) -> SchemaDocument:
        """현재 스키마 문서 반환 (항상 성공)"""
        return self._snapshot.document

    def get_field(self, name: str) -> SchemaDocument:
        """
        필드 존재 확인 후 전체 스키마 문서 반환

        호출자가 문서에서 해당 필드를 꺼내 사용한다.

        Raises:
            ResourceNotFoundError: 필드가 없을 때
        """
        document = self._snapshot.document
        if not document.has_field(name):
            raise ResourceNotFoundError()
        return document

    # ==================== 변경 ====================

    def add_field(
        self,
        name: str,
        data: Mapping[str, Any],
        expected_revision: Optional[int] = None
    ) -> SchemaDocument:
        """
        필드 추가

        Raises:
            ResourceConflictError: 같은 이름의 필드가 이미 있을 때
            BadInputError: 필드 정의 검증 실패
            InternalServiceError: 저장 실패
        """
        def mutate(current: SchemaDocument) -> SchemaDocument:
            if current.has_field(name):
                raise ResourceConflictError(
                    f"The Field {name} already exists.",
                    details={"field": name}
                )
            definition = build_field_definition(data)
            return current.with_field(name, definition)

        return self._apply(name, "add", mutate, expected_revision)

    def update_field(
        self,
        name: str,
        data: Mapping[str, Any],
        expected_revision: Optional[int] = None
    ) -> SchemaDocument:
        """
        필드 정의 전체 교체 (병합하지 않음)

        Raises:
            ResourceNotFoundError: 필드가 없을 때
            BadInputError: systemLevel 필드이거나 검증 실패
            InternalServiceError: 저장 실패
        """
        def mutate(current: SchemaDocument) -> SchemaDocument:
            self._ensure_mutable(current, name)
            definition = build_field_definition(data)
            return current.with_field(name, definition)

        return self._apply(name, "update", mutate, expected_revision)

    def delete_field(
        self,
        name: str,
        expected_revision: Optional[int] = None
    ) -> SchemaDocument:
        """
        필드 삭제

        Raises:
            ResourceNotFoundError: 필드가 없을 때
            BadInputError: systemLevel 필드일 때
            InternalServiceError: 저장 실패
        """
        def mutate(current: SchemaDocument) -> SchemaDocument:
            self._ensure_mutable(current, name)
            return current.without_field(name)

        return self._apply(name, "delete", mutate, expected_revision)

    # ==================== 내부 ====================

    @staticmethod
    def _ensure_mutable(document: SchemaDocument, name: str) -> FieldDefinition:
        existing = document.get_field(name)
        if existing is None:
            raise ResourceNotFoundError()
        if existing.systemLevel:
            raise BadInputError(
                SYSTEM_FIELD_MESSAGE.format(name=name),
                details={"field": name}
            )
        return existing

    def _apply(
        self,
        name: str,
        operation: str,
        mutate: Callable[[SchemaDocument], SchemaDocument],
        expected_revision: Optional[int]
    ) -> SchemaDocument:
        """검증 -> 복사본 변경 -> 저장 -> 승격 -> 모델 갱신"""
        if not isinstance(name, str) or not name.strip():
            raise BadInputError("The field name must be a non-empty string")

        with self._lock:
            current = self._snapshot
            if expected_revision is not None and expected_revision != current.revision:
                raise ResourceConflictError(
                    f"Schema revision mismatch: expected {expected_revision}, "
                    f"current {current.revision}",
                    details={"expected": expected_revision, "current": current.revision}
                )

            candidate = mutate(current.document)

            try:
                persisted = self.store.save(candidate)
            except SchemaStoreError as e:
                logger.error(
                    f"Schema persist failed: schema={current.document.schemaName}, "
                    f"op={operation}, field={name}: {e.message}"
                )
                raise InternalServiceError(
                    f"Failed to persist schema change: {e.message}",
                    details={"field": name, "operation": operation},
                    cause=e
                ) from e

            self._snapshot = SchemaSnapshot(document=persisted, revision=current.revision + 1)
            logger.info(
                f"Schema updated: schema={persisted.schemaName}, op={operation}, "
                f"field={name}, revision={self._snapshot.revision}"
            )

            self._refresh_model(persisted)
            return persisted

    def _refresh_model(self, document: SchemaDocument) -> None:
        if self.model_adapter is None:
            return
        try:
            self.model_adapter.refresh(document)
        except SchemaServiceException:
            raise
        except Exception as e:
            logger.exception(f"Record model refresh failed for {document.schemaName}")
            raise InternalServiceError(
                f"Schema saved but record model refresh failed: {e}",
                cause=e
            ) from e
